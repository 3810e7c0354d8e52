"""Results of applying a conflict resolution."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from slotwise.domain import TaskStatus, TimeWindow


class OutcomeStatus(str, Enum):
    """How a resolution attempt ended."""

    SCHEDULED = "scheduled"
    SKIPPED = "skipped"
    MANUAL = "manual"
    UNRESOLVED = "unresolved"
    RECONNECT_REQUIRED = "reconnect_required"
    FAILED = "failed"
    NOOP = "noop"


class MovedTask(BaseModel):
    """A task bumped to make room."""

    task_id: UUID
    title: str
    from_window: TimeWindow
    to_window: TimeWindow


class ResolutionOutcome(BaseModel):
    """What a resolution did, returned to callers and rendered for the user."""

    correlation_id: str
    task_id: UUID
    strategy: str
    status: OutcomeStatus
    task_status: TaskStatus | None = Field(
        default=None, description="Authoritative status after the resolution"
    )
    window: TimeWindow | None = Field(default=None, description="New window, if scheduled")
    moved: list[MovedTask] = Field(default_factory=list)
    not_moved: list[str] = Field(
        default_factory=list, description="Titles of tasks that could not be bumped"
    )
    overlaps: list[str] = Field(
        default_factory=list,
        description="Titles still overlapping the new window when it was taken regardless",
    )
    detail: str | None = Field(default=None)

    @property
    def keeps_request(self) -> bool:
        """Whether the conflict request stays open after this outcome."""
        return self.status in (OutcomeStatus.UNRESOLVED, OutcomeStatus.FAILED)
