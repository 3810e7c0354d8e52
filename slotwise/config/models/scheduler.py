"""Scheduling and conflict negotiation configuration models."""

from pydantic import BaseModel, Field, field_validator


class DeadlineDaysConfig(BaseModel):
    """Default horizon, in days from now, for tasks without a due date."""

    high: int = Field(default=1, ge=0)
    medium: int = Field(default=3, ge=0)
    low: int = Field(default=7, ge=0)


class SchedulerConfig(BaseModel):
    """Slot search and driver loop configuration."""

    tick_interval_seconds: int = Field(
        default=30,
        ge=1,
        description="Seconds between scheduler ticks",
    )
    grid_minutes: int = Field(
        default=15,
        ge=1,
        le=60,
        description="Candidate start-time granularity",
    )
    fallback_search_days: int = Field(
        default=14,
        ge=1,
        description="Search window used when a task's own horizon is exhausted",
    )
    default_duration_minutes: int = Field(
        default=60,
        ge=1,
        description="Duration used when a task's time_required is missing or malformed",
    )
    default_due_time: str = Field(
        default="17:00",
        description="Local due time applied when a task has a due date but no due time",
    )
    deadline_days: DeadlineDaysConfig = Field(default_factory=DeadlineDaysConfig)
    low_priority_defer_days: float = Field(
        default=5.0,
        ge=0,
        description="Low-priority tasks further than this from their deadline are pushed later",
    )
    low_priority_percentile: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Position among sorted candidates picked for deferred low-priority work",
    )

    @field_validator("default_due_time")
    @classmethod
    def validate_due_time(cls, v: str) -> str:
        """Require an HH:MM string."""
        hours, _, minutes = v.partition(":")
        if not (hours.isdigit() and minutes.isdigit()):
            raise ValueError(f"default_due_time must be HH:MM, got {v!r}")
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"default_due_time out of range: {v!r}")
        return v


class ConflictConfig(BaseModel):
    """Human-in-the-loop conflict negotiation configuration."""

    timeout_minutes: float = Field(
        default=30.0,
        gt=0,
        description="Wait before the automatic fallback resolves a conflict",
    )
    bump_verify_attempts: int = Field(
        default=5,
        ge=1,
        description="Candidates re-verified per bumped task before giving up",
    )
