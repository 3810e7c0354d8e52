"""Per-task scheduling pipeline.

resolve -> busy set -> find slots -> select -> commit; an empty search hands
the task to the conflict resolution workflow instead.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel

from slotwise.accounts import UserStore
from slotwise.config.models.scheduler import SchedulerConfig
from slotwise.domain import Task, TaskStatus, TimeWindow, User, utc_now
from slotwise.observability.logging import get_logger
from slotwise.observability.metrics import CALENDAR_ERRORS, TASKS_SCHEDULED
from slotwise.providers.calendar import CalendarAuthExpiredError, CalendarError
from slotwise.scheduling.conflict_detector import ConflictDetector
from slotwise.scheduling.reconnect import CalendarReconnectHandler
from slotwise.scheduling.resolver import build_context
from slotwise.scheduling.selection import PrioritySlotSelector
from slotwise.scheduling.slot_finder import find_slots
from slotwise.scheduling.writer import CalendarEventWriter, CommitStatus

if TYPE_CHECKING:
    from slotwise.conflicts.workflow import ConflictResolutionWorkflow

logger = get_logger(__name__)


class PipelineStatus(str, Enum):
    SCHEDULED = "scheduled"
    CONFLICT = "conflict"
    AUTH_EXPIRED = "auth_expired"
    TRANSIENT_FAILURE = "transient_failure"
    STALE = "stale"
    IGNORED = "ignored"


class PipelineResult(BaseModel):
    """What happened to one task."""

    task_id: str
    status: PipelineStatus
    window: TimeWindow | None = None
    correlation_id: str | None = None


class SchedulingPipeline:
    """Runs one accepted task through search, selection and commit."""

    def __init__(
        self,
        user_store: UserStore,
        detector: ConflictDetector,
        writer: CalendarEventWriter,
        reconnect: CalendarReconnectHandler,
        conflicts: "ConflictResolutionWorkflow",
        config: SchedulerConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._user_store = user_store
        self._detector = detector
        self._writer = writer
        self._reconnect = reconnect
        self._conflicts = conflicts
        self._config = config or SchedulerConfig()
        self._selector = PrioritySlotSelector(self._config)
        self._clock = clock

    async def schedule_task(self, task: Task, user: User) -> PipelineResult:
        """Schedule ``task`` or open a conflict for it.

        Calendar errors never escape: auth expiry runs the reconnect flow,
        anything else leaves the task for a later tick.
        """
        if task.status != TaskStatus.ACCEPTED or task.external_event_id is not None:
            return PipelineResult(task_id=str(task.id), status=PipelineStatus.IGNORED)

        now = self._clock()
        working_hours = await self._user_store.get_working_hours(user.id)
        ctx = build_context(task, user, working_hours, now, self._config)
        load_end = max(ctx.horizon_end, now + ctx.duration)

        try:
            snapshot = await self._detector.load(user, now, load_end, {task.id})
            candidates = find_slots(
                now,
                ctx.horizon_end,
                snapshot.slots(),
                ctx.duration,
                ctx.working_hours,
                ctx.tz,
                self._config.grid_minutes,
            )

            if not candidates:
                logger.info(
                    "no_slot_in_horizon",
                    task_id=str(task.id),
                    horizon_end=ctx.horizon_end.isoformat(),
                    duration_minutes=ctx.duration // timedelta(minutes=1),
                )
                diagnosis = await self._detector.diagnose(task, user, ctx, snapshot)
        except CalendarAuthExpiredError:
            await self._reconnect.handle(user)
            return PipelineResult(task_id=str(task.id), status=PipelineStatus.AUTH_EXPIRED)
        except CalendarError as e:
            CALENDAR_ERRORS.labels(kind="transient").inc()
            logger.warning("calendar_read_failed", task_id=str(task.id), error=str(e))
            return PipelineResult(task_id=str(task.id), status=PipelineStatus.TRANSIENT_FAILURE)

        if not candidates:
            request = await self._conflicts.open_conflict(task, user, ctx, diagnosis)
            if request is None:
                return PipelineResult(task_id=str(task.id), status=PipelineStatus.STALE)
            return PipelineResult(
                task_id=str(task.id),
                status=PipelineStatus.CONFLICT,
                correlation_id=request.correlation_id,
            )

        window = self._selector.select(candidates, task.priority, ctx.deadline, now)
        result = await self._writer.commit(task, user, window, expected_status=TaskStatus.ACCEPTED)
        if result.status == CommitStatus.SCHEDULED:
            TASKS_SCHEDULED.labels(path="direct").inc()
            return PipelineResult(
                task_id=str(task.id), status=PipelineStatus.SCHEDULED, window=window
            )

        status = {
            CommitStatus.AUTH_EXPIRED: PipelineStatus.AUTH_EXPIRED,
            CommitStatus.TRANSIENT_FAILURE: PipelineStatus.TRANSIENT_FAILURE,
            CommitStatus.STALE: PipelineStatus.STALE,
        }[result.status]
        return PipelineResult(task_id=str(task.id), status=status)
