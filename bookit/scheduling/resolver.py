"""
Schedule resolution.

Determines a provider's effective working windows for one calendar date.
Precedence, highest first:

1. A blocked override closes the day.
2. A non-blocked override with custom hours replaces the weekly window.
3. Otherwise every available weekly block for that weekday applies.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from bookit.schemas.schedule_schema import DateOverride, WeeklyScheduleBlock
from bookit.utils import parse_clock_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingWindow:
    """A day-local ``[start, end)`` range to hand to the slot generator."""
    start: time
    end: time


def day_of_week(on_date: date) -> int:
    """0=Sunday .. 6=Saturday, matching persisted schedule records."""
    return (on_date.weekday() + 1) % 7


def find_override(
    overrides: Iterable[DateOverride], on_date: date
) -> Optional[DateOverride]:
    """Return the override for ``on_date``, if any.

    The store keeps at most one override per provider per date; if a
    caller passes several anyway the first one wins and a warning is
    logged.
    """
    matches = [o for o in overrides if o.date == on_date]
    if len(matches) > 1:
        logger.warning(
            "%d overrides found for provider %s on %s; using the first",
            len(matches), matches[0].provider_id, on_date.isoformat(),
        )
    return matches[0] if matches else None


def resolve_working_windows(
    schedule: Iterable[WeeklyScheduleBlock],
    overrides: Iterable[DateOverride],
    on_date: date,
) -> list[WorkingWindow]:
    """Return the effective working windows for ``on_date``, ordered by start."""
    override = find_override(overrides, on_date)

    if override is not None and override.blocked:
        return []

    if override is not None and override.has_custom_hours:
        return [WorkingWindow(
            start=parse_clock_time(override.start_time),
            end=parse_clock_time(override.end_time),
        )]

    weekday = day_of_week(on_date)
    windows = [
        WorkingWindow(start=block.start, end=block.end)
        for block in schedule
        if block.day_of_week == weekday and block.available
    ]
    windows.sort(key=lambda w: w.start)
    return windows
