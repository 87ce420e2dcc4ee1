"""Shared utilities used across the booking core.

Wall-clock helpers live here so that every module converts between
"local salon time" and absolute instants in exactly one way. A naive
``date``/``time`` pair is always tenant-local wall-clock time; an aware
``datetime`` is always an absolute instant.
"""

import re
from datetime import date, datetime, time, timedelta, tzinfo


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("98765 43210")
        '9876543210'
        >>> normalize_phone("+91 (987) 654-3210")
        '+919876543210'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def redact_phone(value: str) -> str:
    """Mask a phone number for logging, keeping the first 3 and last 2 chars."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]


def minutes_of(at: time) -> int:
    """Minutes since local midnight for a wall-clock time."""
    return at.hour * 60 + at.minute


def time_from_minutes(minutes: int) -> time:
    """Inverse of :func:`minutes_of` for values inside one day."""
    return time(minutes // 60, minutes % 60)


def to_canonical(at: time) -> str:
    """Canonical 24-hour ``HH:MM`` form used for every internal comparison."""
    return f"{at.hour:02d}:{at.minute:02d}"


def format_time_label(at: time) -> str:
    """12-hour display label, e.g. ``9:00 AM`` or ``12:30 PM``."""
    hour = at.hour % 12 or 12
    suffix = "AM" if at.hour < 12 else "PM"
    return f"{hour}:{at.minute:02d} {suffix}"


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval overlap: [start_a, end_a) and [start_b, end_b)."""
    return start_a < end_b and start_b < end_a


def day_of_week(on_date: date) -> int:
    """Day of week with Sunday as 0, matching the dashboard's availability table."""
    return (on_date.weekday() + 1) % 7


def to_instant(on_date: date, at: time, tz: tzinfo) -> datetime:
    """Attach the tenant zone to a local wall-clock date and time."""
    return datetime.combine(on_date, at).replace(tzinfo=tz)


def to_wall_clock(instant: datetime, tz: tzinfo) -> tuple[date, time]:
    """Convert an absolute instant to the tenant's local date and time."""
    if instant.tzinfo is None:
        raise ValueError("Expected a timezone-aware datetime, got a naive one")
    local = instant.astimezone(tz)
    return local.date(), local.time().replace(second=0, microsecond=0)


def local_today(now: datetime, tz: tzinfo) -> date:
    """The tenant-local calendar date for an absolute instant."""
    return to_wall_clock(now, tz)[0]


def date_window(start: date, days: int) -> list[date]:
    """``days`` consecutive calendar dates beginning with ``start``."""
    return [start + timedelta(days=offset) for offset in range(days)]
