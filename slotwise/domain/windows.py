"""Time window value objects."""

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator

from slotwise.domain.enums import BusySource, TaskPriority


class TimeWindow(BaseModel):
    """Half-open interval [start, end) between two aware instants."""

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="Inclusive start")
    end: datetime = Field(..., description="Exclusive end")

    @model_validator(mode="after")
    def check_bounds(self) -> "TimeWindow":
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("TimeWindow instants must be timezone-aware")
        if self.end <= self.start:
            raise ValueError("TimeWindow end must be after start")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeWindow") -> bool:
        """Exact half-open overlap, no buffer between adjacent windows."""
        return self.start < other.end and self.end > other.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


class BusySlot(TimeWindow):
    """An interval already occupied by a scheduled task or a calendar event.

    Transient: built per search and never persisted on its own.
    """

    source: BusySource = Field(default=BusySource.EVENT)
    source_id: str | None = Field(default=None, description="Task id or event id")
    title: str | None = Field(default=None)
    priority: TaskPriority | None = Field(
        default=None, description="Priority of the blocking task, if any"
    )
