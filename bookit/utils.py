"""Shared time helpers used across the scheduling core."""

import re
from datetime import datetime, time, timezone
from typing import Union

import pytz

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_clock_time(value: Union[str, time]) -> time:
    """Parse a 24-hour ``HH:MM`` string into a ``datetime.time``.

    Examples:
        >>> parse_clock_time("09:30")
        datetime.time(9, 30)
        >>> parse_clock_time(time(17, 0))
        datetime.time(17, 0)
    """
    if isinstance(value, time):
        return value
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Expected HH:MM 24-hour time, got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def utcnow() -> datetime:
    """Default clock: the current instant, timezone-aware in UTC."""
    return datetime.now(timezone.utc)


def get_tz(name: str) -> pytz.BaseTzInfo:
    """Resolve a timezone name, raising ValueError for unknown names."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Unknown timezone: {name!r}") from None


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.tzinfo.utcoffset(value) is not None
