"""Domain models for the scheduling engine."""

from slotwise.domain.accounts import User, WorkingHours
from slotwise.domain.enums import BusySource, ResolutionKind, TaskPriority, TaskStatus
from slotwise.domain.tasks import (
    ConflictRequest,
    InternalConflict,
    Task,
    format_correlation_id,
    parse_correlation_id,
    utc_now,
)
from slotwise.domain.windows import BusySlot, TimeWindow

__all__ = [
    "BusySlot",
    "BusySource",
    "ConflictRequest",
    "InternalConflict",
    "ResolutionKind",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TimeWindow",
    "User",
    "WorkingHours",
    "format_correlation_id",
    "parse_correlation_id",
    "utc_now",
]
