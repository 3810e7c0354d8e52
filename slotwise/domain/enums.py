"""Enums shared by the scheduling domain."""

from enum import Enum


class TaskPriority(str, Enum):
    """Task priority levels, ordered low < medium < high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: "str | TaskPriority | None") -> "TaskPriority":
        """Resolve a raw priority string, falling back to medium."""
        if isinstance(value, TaskPriority):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.MEDIUM


_PRIORITY_RANK = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.HIGH: 2,
}


class TaskStatus(str, Enum):
    """Task lifecycle.

    pending -> accepted -> scheduled | pending_conflict_resolution;
    a conflict resolves to scheduled, skipped, pending_manual_schedule or
    back to accepted for a retry.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    SCHEDULED = "scheduled"
    PENDING_CONFLICT_RESOLUTION = "pending_conflict_resolution"
    PENDING_MANUAL_SCHEDULE = "pending_manual_schedule"
    SKIPPED = "skipped"


class BusySource(str, Enum):
    """Where a busy interval came from."""

    TASK = "task"
    EVENT = "event"


class ResolutionKind(str, Enum):
    """Strategies a human (or the timeout) can choose for a conflict."""

    BUMP = "bump"
    SCHEDULE_LATER = "schedule_later"
    FIND_ALTERNATIVE = "find_alternative"
    FORCE = "force"
    SKIP = "skip"
    SCHEDULE_AT = "schedule_at"
    TIMEOUT = "timeout"
