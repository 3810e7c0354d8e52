"""Lenient parsers for the clock and offset strings stored on records."""

import re
from datetime import UTC, time, timedelta, timezone, tzinfo

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{1,2}):?(\d{2})$")
_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


def parse_utc_offset(value: str | None) -> tzinfo:
    """Turn "+04:00" / "-0530" / "Z" into a fixed-offset tzinfo.

    Malformed or missing offsets resolve to UTC.
    """
    if not value:
        return UTC
    value = value.strip()
    if value.upper() in ("Z", "UTC", "+00:00", "-00:00"):
        return UTC
    match = _OFFSET_PATTERN.match(value)
    if not match:
        return UTC
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    if delta >= timedelta(hours=24):
        return UTC
    return timezone(-delta if sign == "-" else delta)


def parse_clock_time(value: str | None) -> time | None:
    """Parse an "HH:MM" time of day, returning None when malformed."""
    if not value:
        return None
    match = _CLOCK_PATTERN.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return time(hours, minutes)


def format_offset(tz: tzinfo) -> str:
    """Render a fixed offset as +HH:MM."""
    delta = tz.utcoffset(None) or timedelta(0)
    sign = "-" if delta < timedelta(0) else "+"
    total_minutes = abs(int(delta.total_seconds())) // 60
    return f"{sign}{total_minutes // 60:02d}:{total_minutes % 60:02d}"
