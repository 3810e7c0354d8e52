"""Candidate slot enumeration on a fixed grid within working hours."""

from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta, tzinfo

from slotwise.domain import TimeWindow, WorkingHours
from slotwise.domain.timeutils import parse_clock_time

DEFAULT_GRID_MINUTES = 15
DEFAULT_START = time(9, 0)
DEFAULT_END = time(17, 0)


def round_up_to_grid(instant: datetime, grid_minutes: int) -> datetime:
    """Round up to the next grid boundary of the instant's own clock."""
    floored = instant.replace(second=0, microsecond=0)
    if floored < instant:
        floored += timedelta(minutes=1)
    minute_of_day = floored.hour * 60 + floored.minute
    remainder = minute_of_day % grid_minutes
    if remainder:
        floored += timedelta(minutes=grid_minutes - remainder)
    return floored


def _working_bounds(hours: WorkingHours) -> tuple[time, time]:
    start = parse_clock_time(hours.start_time) or DEFAULT_START
    end = parse_clock_time(hours.end_time) or DEFAULT_END
    return start, end


def _break_bounds(hours: WorkingHours) -> tuple[time, time] | None:
    start = parse_clock_time(hours.break_start_time)
    end = parse_clock_time(hours.break_end_time)
    if start is None or end is None or end <= start:
        return None
    return start, end


def _at(day: date, clock: time, tz: tzinfo) -> datetime:
    return datetime.combine(day, clock, tzinfo=tz)


def iter_slots(
    earliest: datetime,
    horizon_end: datetime,
    busy: Iterable[TimeWindow],
    duration: timedelta,
    working_hours: WorkingHours,
    tz: tzinfo,
    grid_minutes: int = DEFAULT_GRID_MINUTES,
) -> Iterator[TimeWindow]:
    """Yield every free grid-aligned window of ``duration`` in the horizon.

    Candidates start on the grid (or exactly at start of work), lie entirely
    within one working day, avoid the break and every busy interval, and end
    no later than ``horizon_end``. They are produced in start order.
    """
    if duration <= timedelta(0) or horizon_end <= earliest:
        return

    work_start, work_end = _working_bounds(working_hours)
    if work_end <= work_start:
        return
    lunch = _break_bounds(working_hours)
    busy_windows = sorted(busy, key=lambda w: w.start)
    step = timedelta(minutes=grid_minutes)

    cursor = round_up_to_grid(earliest.astimezone(tz), grid_minutes)

    while cursor + duration <= horizon_end:
        day = cursor.date()
        next_day_start = _at(day + timedelta(days=1), work_start, tz)

        if not working_hours.works_on(day.weekday()):
            cursor = next_day_start
            continue

        day_start = _at(day, work_start, tz)
        day_end = _at(day, work_end, tz)
        if cursor < day_start:
            cursor = day_start
            continue
        if cursor >= day_end:
            cursor = next_day_start
            continue

        end = cursor + duration
        if end > day_end:
            cursor = next_day_start
            continue

        if lunch is not None:
            break_start, break_end = _at(day, lunch[0], tz), _at(day, lunch[1], tz)
            if cursor < break_end and end > break_start:
                cursor += step
                continue

        candidate = TimeWindow(start=cursor, end=end)
        if not any(candidate.overlaps(window) for window in busy_windows):
            yield candidate
        cursor += step


def find_slots(
    earliest: datetime,
    horizon_end: datetime,
    busy: Iterable[TimeWindow],
    duration: timedelta,
    working_hours: WorkingHours,
    tz: tzinfo,
    grid_minutes: int = DEFAULT_GRID_MINUTES,
) -> list[TimeWindow]:
    """Return all candidates in the horizon; empty means no adequate slot."""
    return list(
        iter_slots(earliest, horizon_end, busy, duration, working_hours, tz, grid_minutes)
    )


def first_slot(
    earliest: datetime,
    horizon_end: datetime,
    busy: Iterable[TimeWindow],
    duration: timedelta,
    working_hours: WorkingHours,
    tz: tzinfo,
    grid_minutes: int = DEFAULT_GRID_MINUTES,
) -> TimeWindow | None:
    """Earliest candidate, or None."""
    return next(
        iter_slots(earliest, horizon_end, busy, duration, working_hours, tz, grid_minutes),
        None,
    )
