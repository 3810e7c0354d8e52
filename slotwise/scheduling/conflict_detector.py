"""Busy-set assembly and conflict classification.

Used proactively, to feed the slot finder, and diagnostically, to explain
what blocks a task whose search came back empty.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from uuid import UUID

from slotwise.domain import (
    BusySlot,
    BusySource,
    InternalConflict,
    Task,
    TaskStatus,
    TimeWindow,
    User,
)
from slotwise.observability.logging import get_logger
from slotwise.providers.calendar import CalendarEvent, CalendarProvider
from slotwise.scheduling.resolver import SchedulingContext
from slotwise.scheduling.slot_finder import find_slots, first_slot
from slotwise.tasks import TaskStore

logger = get_logger(__name__)


@dataclass
class BusySnapshot:
    """Scheduled tasks and calendar events read for one search range."""

    start: datetime
    end: datetime
    tasks: list[Task] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)

    @property
    def task_event_ids(self) -> set[str]:
        return {t.external_event_id for t in self.tasks if t.external_event_id}

    def external_events(self) -> list[CalendarEvent]:
        """Calendar events that are not the calendar copy of a scheduled task."""
        own = self.task_event_ids
        return [event for event in self.events if event.id not in own]

    def slots(self) -> list[BusySlot]:
        """The deduplicated busy set."""
        busy = [task_busy_slot(task) for task in self.tasks]
        busy.extend(event_busy_slot(event) for event in self.external_events())
        busy.sort(key=lambda slot: slot.start)
        return busy


@dataclass
class Diagnosis:
    """What a failed search needed and what stood in its way."""

    required_window: TimeWindow
    internal_conflicts: list[InternalConflict]
    external_conflicts: list[BusySlot]


def task_busy_slot(task: Task) -> BusySlot:
    window = task.scheduled_window
    if window is None:
        raise ValueError(f"Task {task.id} has no scheduled window")
    return BusySlot(
        start=window.start,
        end=window.end,
        source=BusySource.TASK,
        source_id=str(task.id),
        title=task.title,
        priority=task.priority,
    )


def event_busy_slot(event: CalendarEvent) -> BusySlot:
    return BusySlot(
        start=event.start,
        end=event.end,
        source=BusySource.EVENT,
        source_id=event.id,
        title=event.title,
    )


def find_internal_conflicts(
    task: Task,
    windows: list[TimeWindow],
    scheduled: list[Task],
) -> list[InternalConflict]:
    """Scheduled tasks overlapping any of ``windows``.

    A conflict is tagged priority-relevant when the blocking task has
    strictly lower priority than ``task``; the tag orders bumps and never
    blocks on its own.
    """
    conflicts: list[InternalConflict] = []
    for other in scheduled:
        if other.id == task.id or other.status != TaskStatus.SCHEDULED:
            continue
        window = other.scheduled_window
        if window is None or not any(window.overlaps(w) for w in windows):
            continue
        conflicts.append(
            InternalConflict(
                task_id=other.id,
                title=other.title,
                priority=other.priority,
                window=window,
                priority_relevant=other.priority.rank < task.priority.rank,
            )
        )
    conflicts.sort(key=lambda c: c.window.start)
    return conflicts


def find_external_conflicts(
    windows: list[TimeWindow],
    events: list[CalendarEvent],
) -> list[BusySlot]:
    """Calendar events overlapping any of ``windows``."""
    slots = [event_busy_slot(event) for event in events]
    return [slot for slot in slots if any(slot.overlaps(w) for w in windows)]


class ConflictDetector:
    """Reads the busy state of a user and classifies conflicts against it."""

    def __init__(
        self,
        task_store: TaskStore,
        calendar: CalendarProvider,
        grid_minutes: int = 15,
        fallback_search_days: int = 14,
    ) -> None:
        self._task_store = task_store
        self._calendar = calendar
        self._grid_minutes = grid_minutes
        self._fallback = timedelta(days=fallback_search_days)

    async def load(
        self,
        user: User,
        start: datetime,
        end: datetime,
        exclude_task_ids: set[UUID] | None = None,
    ) -> BusySnapshot:
        """Read scheduled tasks and calendar events overlapping [start, end).

        Calendar errors propagate so the caller can route auth expiry.
        """
        exclude = exclude_task_ids or set()
        scheduled = await self._task_store.get_tasks_by_status(user.id, TaskStatus.SCHEDULED)
        tasks = [
            task
            for task in scheduled
            if task.id not in exclude
            and task.scheduled_start is not None
            and task.scheduled_end is not None
            and task.scheduled_start < end
            and task.scheduled_end > start
        ]
        events = await self._calendar.list_events(user, start, end)
        excluded_events = {
            t.external_event_id for t in scheduled if t.id in exclude and t.external_event_id
        }
        events = [event for event in events if event.id not in excluded_events]
        return BusySnapshot(start=start, end=end, tasks=tasks, events=events)

    def required_window(self, ctx: SchedulingContext) -> TimeWindow:
        """First working-hours window of the horizon, ignoring busy time.

        Falls back to the fallback search period, then to [now, now + duration).
        """
        window = first_slot(
            ctx.now, ctx.horizon_end, [], ctx.duration, ctx.working_hours, ctx.tz,
            self._grid_minutes,
        )
        if window is None:
            window = first_slot(
                ctx.now, ctx.now + self._fallback, [], ctx.duration, ctx.working_hours,
                ctx.tz, self._grid_minutes,
            )
        if window is None:
            window = TimeWindow(start=ctx.now, end=ctx.now + ctx.duration)
        return window

    async def diagnose(
        self,
        task: Task,
        user: User,
        ctx: SchedulingContext,
        snapshot: BusySnapshot,
    ) -> Diagnosis:
        """List what actually blocks ``task`` in its horizon."""
        required = self.required_window(ctx)
        windows = find_slots(
            ctx.now, ctx.horizon_end, [], ctx.duration, ctx.working_hours, ctx.tz,
            self._grid_minutes,
        )
        if not windows:
            windows = [required]

        span_start = min(w.start for w in windows)
        span_end = max(w.end for w in windows)
        if span_start < snapshot.start or span_end > snapshot.end:
            snapshot = await self.load(user, span_start, span_end, {task.id})

        internal = find_internal_conflicts(task, windows, snapshot.tasks)
        external = find_external_conflicts(windows, snapshot.external_events())

        logger.info(
            "conflict_diagnosed",
            task_id=str(task.id),
            internal=len(internal),
            external=len(external),
            required_start=required.start.isoformat(),
        )
        return Diagnosis(
            required_window=required,
            internal_conflicts=internal,
            external_conflicts=external,
        )
