"""Duration and deadline resolution for tasks.

Malformed or missing fields never raise: they resolve to defaults.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta, tzinfo

from slotwise.config.models.scheduler import SchedulerConfig
from slotwise.domain import Task, TaskPriority, User, WorkingHours
from slotwise.domain.timeutils import parse_clock_time, parse_utc_offset

DEFAULT_DURATION = timedelta(hours=1)

_DURATION_PATTERN = re.compile(r"^(\d{1,3}):(\d{1,2})(?::(\d{1,2}))?$")


def parse_duration(span: str | None, default: timedelta = DEFAULT_DURATION) -> timedelta:
    """Parse an "HH:MM" span.

    Returns ``default`` when the span is missing, malformed or not positive.
    """
    if not span:
        return default
    match = _DURATION_PATTERN.match(span.strip())
    if not match:
        return default
    hours, minutes, seconds = match.groups()
    if int(minutes) > 59:
        return default
    duration = timedelta(hours=int(hours), minutes=int(minutes), seconds=int(seconds or 0))
    if duration <= timedelta(0):
        return default
    return duration


def compute_deadline(
    task: Task,
    now: datetime,
    user_offset: str | tzinfo | None,
    config: SchedulerConfig | None = None,
) -> datetime:
    """Resolve the end of the scheduling horizon.

    An explicit due date (with its due time, or the configured default due
    time) is read in the user's offset and always wins. Otherwise the
    deadline is a priority-based number of days from now.
    """
    config = config or SchedulerConfig()
    tz = user_offset if isinstance(user_offset, tzinfo) else parse_utc_offset(user_offset)

    if task.due_date is not None:
        due_time = (
            parse_clock_time(task.due_time)
            or parse_clock_time(config.default_due_time)
            or time(17, 0)
        )
        return datetime.combine(task.due_date, due_time, tzinfo=tz)

    days = {
        TaskPriority.HIGH: config.deadline_days.high,
        TaskPriority.MEDIUM: config.deadline_days.medium,
        TaskPriority.LOW: config.deadline_days.low,
    }[task.priority]
    return now + timedelta(days=days)


@dataclass(frozen=True)
class SchedulingContext:
    """Everything a slot search needs to know about one task.

    Attributes:
        now: Instant the search runs at
        duration: Resolved task duration
        deadline: Resolved horizon end
        tz: User's fixed offset
        working_hours: User's working-hours policy
    """

    now: datetime
    duration: timedelta
    deadline: datetime
    tz: tzinfo
    working_hours: WorkingHours

    @property
    def horizon_end(self) -> datetime:
        return self.deadline


def build_context(
    task: Task,
    user: User,
    working_hours: WorkingHours | None,
    now: datetime,
    config: SchedulerConfig | None = None,
) -> SchedulingContext:
    """Resolve a task's duration, deadline and policy into a search context."""
    config = config or SchedulerConfig()
    tz = parse_utc_offset(user.utc_offset)
    return SchedulingContext(
        now=now,
        duration=parse_duration(
            task.time_required,
            default=timedelta(minutes=config.default_duration_minutes),
        ),
        deadline=compute_deadline(task, now, tz, config),
        tz=tz,
        working_hours=working_hours or WorkingHours.default(user.id),
    )
