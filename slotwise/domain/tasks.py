"""Task and conflict request models."""

from datetime import UTC, date, datetime, timedelta
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from slotwise.domain.enums import TaskPriority, TaskStatus
from slotwise.domain.windows import BusySlot, TimeWindow


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class InternalConflict(BaseModel):
    """A scheduled task of the same user that blocks the incoming task."""

    model_config = ConfigDict(frozen=True)

    task_id: UUID
    title: str
    priority: TaskPriority
    window: TimeWindow
    priority_relevant: bool = Field(
        default=False,
        description="Blocking task has strictly lower priority than the incoming task",
    )


class ConflictRequest(BaseModel):
    """A pending human decision about a task that could not be placed.

    Persisted on the task record itself so that it survives restarts and is
    claimed atomically by whichever of the human action or the timeout gets
    there first.
    """

    id: UUID = Field(default_factory=uuid4)
    task_id: UUID
    user_id: UUID
    required_window: TimeWindow = Field(
        ..., description="Window the task needs, ignoring busy time"
    )
    horizon_end: datetime = Field(..., description="Deadline the search ran against")
    duration: timedelta
    internal_conflicts: list[InternalConflict] = Field(default_factory=list)
    external_conflicts: list[BusySlot] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime = Field(..., description="When the automatic fallback fires")
    message_ref: str | None = Field(
        default=None, description="Messaging reference of the decision request"
    )

    @property
    def correlation_id(self) -> str:
        return format_correlation_id(self.task_id, self.id)

    @property
    def conflicting_task_ids(self) -> list[UUID]:
        return [conflict.task_id for conflict in self.internal_conflicts]


def format_correlation_id(task_id: UUID, request_id: UUID) -> str:
    """Build the id carried by decision buttons."""
    return f"{task_id}:{request_id}"


def parse_correlation_id(correlation_id: str) -> tuple[UUID, UUID]:
    """Split a correlation id into (task_id, request_id).

    Raises:
        ValueError: If the id is not two colon-separated UUIDs
    """
    task_part, sep, request_part = correlation_id.strip().partition(":")
    if not sep:
        raise ValueError(f"Malformed correlation id: {correlation_id!r}")
    return UUID(task_part), UUID(request_part)


class Task(BaseModel):
    """A unit of work owned by one user, waiting for or holding a calendar slot."""

    model_config = ConfigDict(frozen=False, validate_assignment=True, extra="ignore")

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID = Field(..., description="Owning user")
    title: str = Field(..., min_length=1)
    description: str | None = Field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    time_required: str | None = Field(
        default="01:00", description="Duration as an HH:MM span"
    )
    due_date: date | None = Field(default=None)
    due_time: str | None = Field(default=None, description="Local due time, HH:MM")
    status: TaskStatus = Field(default=TaskStatus.PENDING)

    scheduled_start: datetime | None = Field(default=None)
    scheduled_end: datetime | None = Field(default=None)
    external_event_id: str | None = Field(default=None)

    conflict: ConflictRequest | None = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, v: object) -> TaskPriority:
        return TaskPriority.parse(v)  # type: ignore[arg-type]

    @field_validator("due_date", mode="before")
    @classmethod
    def lenient_due_date(cls, v: object) -> object:
        """Malformed due dates are dropped rather than rejected."""
        if v is None or isinstance(v, date):
            return v
        try:
            return date.fromisoformat(str(v).strip()[:10])
        except ValueError:
            return None

    @model_validator(mode="after")
    def check_schedule_fields(self) -> "Task":
        fields = (self.scheduled_start, self.scheduled_end, self.external_event_id)
        if any(f is not None for f in fields) and not all(f is not None for f in fields):
            raise ValueError(
                "scheduled_start, scheduled_end and external_event_id must be set together"
            )
        return self

    @property
    def scheduled_window(self) -> TimeWindow | None:
        if self.scheduled_start is None or self.scheduled_end is None:
            return None
        return TimeWindow(start=self.scheduled_start, end=self.scheduled_end)

    def touch(self) -> None:
        self.updated_at = utc_now()
