"""Commits chosen windows to the external calendar and the task record."""

from dataclasses import dataclass
from enum import Enum

from slotwise.domain import Task, TaskStatus, TimeWindow, User
from slotwise.observability.logging import get_logger
from slotwise.observability.metrics import CALENDAR_ERRORS
from slotwise.providers.calendar import (
    CalendarAuthExpiredError,
    CalendarError,
    CalendarEventData,
    CalendarProvider,
)
from slotwise.scheduling.reconnect import CalendarReconnectHandler
from slotwise.tasks import TaskStore

logger = get_logger(__name__)


class CommitStatus(str, Enum):
    """Outcome of a calendar write."""

    SCHEDULED = "scheduled"
    AUTH_EXPIRED = "auth_expired"
    TRANSIENT_FAILURE = "transient_failure"
    STALE = "stale"


@dataclass
class CommitResult:
    """Result of commit or move.

    Attributes:
        status: What happened
        task: Updated task when the write went through
        error: Collaborator error text for failures
    """

    status: CommitStatus
    task: Task | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == CommitStatus.SCHEDULED


def _event_data(task: Task, user: User, window: TimeWindow) -> CalendarEventData:
    return CalendarEventData(
        summary=task.title,
        description=task.description,
        start=window.start,
        end=window.end,
        utc_offset=user.utc_offset,
    )


class CalendarEventWriter:
    """The only component that sets a task's window and external event id.

    Writes are compare-and-set on the task's status: if the task moved on
    while the calendar call was in flight, the calendar side is rolled back
    and the result is STALE.
    """

    def __init__(
        self,
        task_store: TaskStore,
        calendar: CalendarProvider,
        reconnect: CalendarReconnectHandler,
    ) -> None:
        self._task_store = task_store
        self._calendar = calendar
        self._reconnect = reconnect

    async def commit(
        self,
        task: Task,
        user: User,
        window: TimeWindow,
        expected_status: TaskStatus | None = None,
    ) -> CommitResult:
        """Create the calendar event and mark the task scheduled.

        Args:
            task: Task to schedule
            user: Owner of the task
            window: Chosen window
            expected_status: Status the task must still have (defaults to
                the status of ``task`` as read by the caller)
        """
        expected = expected_status or task.status
        try:
            created = await self._calendar.create_event(user, _event_data(task, user, window))
        except CalendarAuthExpiredError as e:
            await self._reconnect.handle(user)
            return CommitResult(status=CommitStatus.AUTH_EXPIRED, error=str(e))
        except CalendarError as e:
            CALENDAR_ERRORS.labels(kind="transient").inc()
            logger.warning(
                "calendar_create_failed",
                task_id=str(task.id),
                user_id=str(user.id),
                error=str(e),
            )
            return CommitResult(status=CommitStatus.TRANSIENT_FAILURE, error=str(e))

        updated = await self._task_store.update_task(
            task.id,
            {
                "status": TaskStatus.SCHEDULED,
                "scheduled_start": window.start,
                "scheduled_end": window.end,
                "external_event_id": created.id,
            },
            expected_status=expected,
        )
        if updated is None:
            logger.warning(
                "task_commit_stale",
                task_id=str(task.id),
                expected_status=expected.value,
                event_id=created.id,
            )
            await self._delete_quietly(user, created.id)
            return CommitResult(status=CommitStatus.STALE)

        logger.info(
            "task_scheduled",
            task_id=str(task.id),
            user_id=str(user.id),
            start=window.start.isoformat(),
            end=window.end.isoformat(),
            event_id=created.id,
        )
        return CommitResult(status=CommitStatus.SCHEDULED, task=updated)

    async def move(self, task: Task, user: User, window: TimeWindow) -> CommitResult:
        """Move an already scheduled task and its calendar event."""
        if task.external_event_id is None or task.scheduled_window is None:
            raise ValueError(f"Task {task.id} is not scheduled")

        previous = task.scheduled_window
        try:
            await self._calendar.update_event(
                user, task.external_event_id, _event_data(task, user, window)
            )
        except CalendarAuthExpiredError as e:
            await self._reconnect.handle(user)
            return CommitResult(status=CommitStatus.AUTH_EXPIRED, error=str(e))
        except CalendarError as e:
            CALENDAR_ERRORS.labels(kind="transient").inc()
            logger.warning("calendar_move_failed", task_id=str(task.id), error=str(e))
            return CommitResult(status=CommitStatus.TRANSIENT_FAILURE, error=str(e))

        updated = await self._task_store.update_task(
            task.id,
            {"scheduled_start": window.start, "scheduled_end": window.end},
            expected_status=TaskStatus.SCHEDULED,
        )
        if updated is None:
            logger.warning("task_move_stale", task_id=str(task.id))
            try:
                await self._calendar.update_event(
                    user, task.external_event_id, _event_data(task, user, previous)
                )
            except CalendarError as e:
                logger.error("calendar_move_rollback_failed", task_id=str(task.id), error=str(e))
            return CommitResult(status=CommitStatus.STALE)

        logger.info(
            "task_moved",
            task_id=str(task.id),
            from_start=previous.start.isoformat(),
            to_start=window.start.isoformat(),
        )
        return CommitResult(status=CommitStatus.SCHEDULED, task=updated)

    async def _delete_quietly(self, user: User, event_id: str) -> None:
        try:
            await self._calendar.delete_event(user, event_id)
        except CalendarError as e:
            logger.error("calendar_compensation_failed", event_id=event_id, error=str(e))
