"""Named resolution strategies applied to a claimed conflict request."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Any
from uuid import UUID

from slotwise.config.models.scheduler import ConflictConfig, SchedulerConfig
from slotwise.conflicts.actions import (
    BumpAction,
    ResolutionAction,
    ScheduleAtAction,
    SkipAction,
)
from slotwise.conflicts.outcomes import MovedTask, OutcomeStatus, ResolutionOutcome
from slotwise.domain import (
    ConflictRequest,
    ResolutionKind,
    Task,
    TaskStatus,
    TimeWindow,
    User,
    WorkingHours,
)
from slotwise.observability.logging import get_logger
from slotwise.scheduling.conflict_detector import ConflictDetector
from slotwise.scheduling.slot_finder import find_slots
from slotwise.scheduling.writer import CalendarEventWriter, CommitStatus
from slotwise.tasks import TaskStore

logger = get_logger(__name__)


@dataclass
class ResolutionContext:
    """A claimed conflict request and everything needed to act on it.

    Attributes:
        task: Task as read right before the claim
        user: Owner of the task
        request: The claimed request
        working_hours: Owner's policy
        tz: Owner's fixed offset
        now: Instant the resolution runs at
    """

    task: Task
    user: User
    request: ConflictRequest
    working_hours: WorkingHours
    tz: tzinfo
    now: datetime

    @property
    def duration(self) -> timedelta:
        return self.request.duration


class ResolutionStrategy(ABC):
    """Base class for conflict strategies.

    Strategies only run after the request was claimed, and every write they
    make expects the task to still be in pending_conflict_resolution.
    """

    kind: ResolutionKind

    def __init__(
        self,
        task_store: TaskStore,
        detector: ConflictDetector,
        writer: CalendarEventWriter,
        scheduler_config: SchedulerConfig | None = None,
        conflict_config: ConflictConfig | None = None,
    ) -> None:
        self._task_store = task_store
        self._detector = detector
        self._writer = writer
        self._scheduler_config = scheduler_config or SchedulerConfig()
        self._conflict_config = conflict_config or ConflictConfig()

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def _fallback(self) -> timedelta:
        return timedelta(days=self._scheduler_config.fallback_search_days)

    @abstractmethod
    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        """Apply the strategy to a claimed request."""
        pass

    def _outcome(
        self, ctx: ResolutionContext, status: OutcomeStatus, **fields: Any
    ) -> ResolutionOutcome:
        return ResolutionOutcome(
            correlation_id=ctx.request.correlation_id,
            task_id=ctx.task.id,
            strategy=self.name,
            status=status,
            **fields,
        )

    def _slots(
        self,
        ctx: ResolutionContext,
        start: datetime,
        end: datetime,
        busy: Iterable[TimeWindow],
        duration: timedelta | None = None,
    ) -> list[TimeWindow]:
        return find_slots(
            start,
            end,
            busy,
            duration or ctx.duration,
            ctx.working_hours,
            ctx.tz,
            self._scheduler_config.grid_minutes,
        )

    async def _free_slots(
        self, ctx: ResolutionContext, start: datetime, end: datetime
    ) -> list[TimeWindow]:
        """Candidates for the task against a fresh read of the busy set."""
        if end <= start:
            return []
        snapshot = await self._detector.load(ctx.user, start, end, {ctx.task.id})
        return self._slots(ctx, start, end, snapshot.slots())

    async def _is_free(
        self,
        ctx: ResolutionContext,
        window: TimeWindow,
        exclude: set[UUID],
        extra_busy: Iterable[TimeWindow] = (),
    ) -> bool:
        snapshot = await self._detector.load(ctx.user, window.start, window.end, exclude)
        busy: list[TimeWindow] = [*snapshot.slots(), *extra_busy]
        return not any(window.overlaps(other) for other in busy)

    async def _commit(
        self, ctx: ResolutionContext, window: TimeWindow, **fields: Any
    ) -> ResolutionOutcome:
        result = await self._writer.commit(
            ctx.task,
            ctx.user,
            window,
            expected_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
        )
        if result.status == CommitStatus.SCHEDULED:
            return self._outcome(
                ctx,
                OutcomeStatus.SCHEDULED,
                task_status=TaskStatus.SCHEDULED,
                window=window,
                **fields,
            )
        if result.status == CommitStatus.AUTH_EXPIRED:
            return self._outcome(ctx, OutcomeStatus.RECONNECT_REQUIRED, **fields)
        if result.status == CommitStatus.STALE:
            return self._outcome(ctx, OutcomeStatus.NOOP, detail="task changed concurrently")
        return self._outcome(
            ctx,
            OutcomeStatus.FAILED,
            task_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
            detail=result.error,
            **fields,
        )

    async def _to_manual(
        self, ctx: ResolutionContext, detail: str, **fields: Any
    ) -> ResolutionOutcome:
        updated = await self._task_store.update_task_status(
            ctx.task.id,
            TaskStatus.PENDING_MANUAL_SCHEDULE,
            expected_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
        )
        if updated is None:
            return self._outcome(ctx, OutcomeStatus.NOOP, detail="task changed concurrently")
        logger.info("task_pending_manual_schedule", task_id=str(ctx.task.id), reason=detail)
        return self._outcome(
            ctx,
            OutcomeStatus.MANUAL,
            task_status=TaskStatus.PENDING_MANUAL_SCHEDULE,
            detail=detail,
            **fields,
        )


class BumpStrategy(ResolutionStrategy):
    """Move conflicting tasks, lowest priority first, then take the freed window.

    If no conflicting task can be moved nothing changes except the task
    going to pending_manual_schedule.
    """

    kind = ResolutionKind.BUMP

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        selected: set[UUID] | None = None
        if isinstance(action, BumpAction) and action.task_ids:
            selected = set(action.task_ids)
        conflicts = [
            c
            for c in ctx.request.internal_conflicts
            if selected is None or c.task_id in selected
        ]
        conflicts.sort(key=lambda c: (c.priority.rank, c.window.start))

        required = ctx.request.required_window
        search_start = max(required.end, ctx.now)
        search_end = required.end + self._fallback
        claimed: list[TimeWindow] = [required]
        moved: list[MovedTask] = []
        not_moved: list[str] = []

        for conflict in conflicts:
            fresh = await self._task_store.get_task(conflict.task_id)
            if (
                fresh is None
                or fresh.status != TaskStatus.SCHEDULED
                or fresh.scheduled_window is None
            ):
                not_moved.append(conflict.title)
                continue

            new_window = await self._find_verified_slot(
                ctx, fresh, search_start, search_end, claimed
            )
            if new_window is None:
                logger.info("bump_no_slot", task_id=str(ctx.task.id), bumped_task_id=str(fresh.id))
                not_moved.append(fresh.title)
                continue

            result = await self._writer.move(fresh, ctx.user, new_window)
            if result.status == CommitStatus.AUTH_EXPIRED:
                return self._outcome(
                    ctx, OutcomeStatus.RECONNECT_REQUIRED, moved=moved, not_moved=not_moved
                )
            if not result.ok:
                not_moved.append(fresh.title)
                continue

            claimed.append(new_window)
            moved.append(
                MovedTask(
                    task_id=fresh.id,
                    title=fresh.title,
                    from_window=fresh.scheduled_window,
                    to_window=new_window,
                )
            )

        if not moved:
            return await self._to_manual(
                ctx, "none of the conflicting tasks could be moved", not_moved=not_moved
            )

        window, overlaps = await self._place_original(ctx)
        return await self._commit(
            ctx, window, moved=moved, not_moved=not_moved, overlaps=overlaps
        )

    async def _find_verified_slot(
        self,
        ctx: ResolutionContext,
        bumped: Task,
        start: datetime,
        end: datetime,
        claimed: list[TimeWindow],
    ) -> TimeWindow | None:
        """Earliest slot for ``bumped`` that is still free on a fresh read."""
        if bumped.scheduled_window is None:
            return None
        exclude = {bumped.id, ctx.task.id}
        snapshot = await self._detector.load(ctx.user, start, end, exclude)
        busy: list[TimeWindow] = [*snapshot.slots(), *claimed]
        candidates = self._slots(ctx, start, end, busy, bumped.scheduled_window.duration)

        for candidate in candidates[: self._conflict_config.bump_verify_attempts]:
            if await self._is_free(ctx, candidate, exclude, claimed):
                return candidate
            logger.debug("bump_candidate_taken", bumped_task_id=str(bumped.id))
        return None

    async def _place_original(self, ctx: ResolutionContext) -> tuple[TimeWindow, list[str]]:
        """Window for the incoming task and the titles it still overlaps there.

        With no free slot left in the horizon the required window is taken
        anyway, double-booking whatever stayed in place.
        """
        required = ctx.request.required_window
        if required.start >= ctx.now and await self._is_free(ctx, required, {ctx.task.id}):
            return required, []
        slots = await self._free_slots(ctx, ctx.now, ctx.request.horizon_end)
        if slots:
            return slots[0], []

        snapshot = await self._detector.load(
            ctx.user, required.start, required.end, {ctx.task.id}
        )
        overlaps = [
            slot.title or "Untitled" for slot in snapshot.slots() if slot.overlaps(required)
        ]
        logger.warning(
            "bump_original_double_booked",
            task_id=str(ctx.task.id),
            window_start=required.start.isoformat(),
            overlaps=overlaps,
        )
        return required, overlaps


class DeferStrategy(ResolutionStrategy):
    """Find the earliest free slot after the required window."""

    kind = ResolutionKind.SCHEDULE_LATER

    def __init__(
        self,
        *args: Any,
        kind: ResolutionKind = ResolutionKind.SCHEDULE_LATER,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.kind = kind

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        start = max(ctx.request.required_window.end, ctx.now)
        end = max(ctx.request.horizon_end, ctx.now) + self._fallback
        slots = await self._free_slots(ctx, start, end)
        if not slots:
            return await self._to_manual(ctx, "no free time found after the conflicts")
        return await self._commit(ctx, slots[0])


class ForceStrategy(ResolutionStrategy):
    """Take the first working-hours window, ignoring every conflict."""

    kind = ResolutionKind.FORCE

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        slots = self._slots(ctx, ctx.now, ctx.request.horizon_end, [])
        if not slots:
            slots = self._slots(ctx, ctx.now, ctx.now + self._fallback, [])
        if not slots:
            return self._outcome(
                ctx,
                OutcomeStatus.UNRESOLVED,
                task_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
                detail="no working-hours window exists to force the task into",
            )
        return await self._commit(ctx, slots[0])


class SkipStrategy(ResolutionStrategy):
    """Mark the task skipped without touching the calendar."""

    kind = ResolutionKind.SKIP

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        updated = await self._task_store.update_task_status(
            ctx.task.id,
            TaskStatus.SKIPPED,
            expected_status=TaskStatus.PENDING_CONFLICT_RESOLUTION,
        )
        if updated is None:
            return self._outcome(ctx, OutcomeStatus.NOOP, detail="task changed concurrently")
        reason = action.reason if isinstance(action, SkipAction) else None
        logger.info("task_skipped", task_id=str(ctx.task.id), reason=reason)
        return self._outcome(
            ctx, OutcomeStatus.SKIPPED, task_status=TaskStatus.SKIPPED, detail=reason
        )


class ScheduleAtStrategy(ResolutionStrategy):
    """Commit the exact window the user picked, if it is still free."""

    kind = ResolutionKind.SCHEDULE_AT

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        if not isinstance(action, ScheduleAtAction):
            raise TypeError("ScheduleAtStrategy requires a ScheduleAtAction")
        window = action.window
        if window.start < ctx.now or not await self._is_free(ctx, window, {ctx.task.id}):
            return await self._to_manual(ctx, "the requested time is no longer free")
        return await self._commit(ctx, window)


class TimeoutStrategy(ResolutionStrategy):
    """Automatic fallback: earliest free slot at the time the timer fires."""

    kind = ResolutionKind.TIMEOUT

    async def apply(
        self, ctx: ResolutionContext, action: ResolutionAction | None
    ) -> ResolutionOutcome:
        slots = await self._free_slots(ctx, ctx.now, ctx.request.horizon_end)
        if not slots:
            slots = await self._free_slots(ctx, ctx.now, ctx.now + self._fallback)
        if not slots:
            return await self._to_manual(ctx, "no free time found when the decision timed out")
        return await self._commit(ctx, slots[0])


def build_strategies(
    task_store: TaskStore,
    detector: ConflictDetector,
    writer: CalendarEventWriter,
    scheduler_config: SchedulerConfig | None = None,
    conflict_config: ConflictConfig | None = None,
) -> dict[ResolutionKind, ResolutionStrategy]:
    """Registry of strategies keyed by the action kind they serve."""
    args = (task_store, detector, writer, scheduler_config, conflict_config)
    return {
        ResolutionKind.BUMP: BumpStrategy(*args),
        ResolutionKind.SCHEDULE_LATER: DeferStrategy(*args),
        ResolutionKind.FIND_ALTERNATIVE: DeferStrategy(*args, kind=ResolutionKind.FIND_ALTERNATIVE),
        ResolutionKind.FORCE: ForceStrategy(*args),
        ResolutionKind.SKIP: SkipStrategy(*args),
        ResolutionKind.SCHEDULE_AT: ScheduleAtStrategy(*args),
        ResolutionKind.TIMEOUT: TimeoutStrategy(*args),
    }
