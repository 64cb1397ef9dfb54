"""
Slot generation.

Discretizes a day-local working window into back-to-back slots of one
service duration. Pure and deterministic: bookings are never consulted
here (see overlap.py).
"""

from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz

from bookit.schemas.schedule_schema import TimeInterval
from bookit.utils import parse_clock_time


def generate_time_slots(
    start_time: Union[str, time],
    end_time: Union[str, time],
    duration_minutes: int,
    on_date: date,
    tz: pytz.BaseTzInfo = pytz.UTC,
) -> list[TimeInterval]:
    """
    Tile ``[start_time, end_time)`` on ``on_date`` with fixed-length slots.

    Args:
        start_time: window start, ``HH:MM`` or ``datetime.time``
        end_time: window end, ``HH:MM`` or ``datetime.time``
        duration_minutes: length of every slot
        on_date: calendar date the clock times apply to
        tz: timezone the clock times are expressed in

    Returns:
        Slots ordered by start. A trailing remainder shorter than the
        duration is dropped, so a window shorter than one duration yields
        an empty list. On DST change days, wall-clock starts that do not
        exist or that fall inside the previous slot are skipped.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be > 0, got {duration_minutes}")

    start = parse_clock_time(start_time)
    end = parse_clock_time(end_time)
    window_start = start.hour * 60 + start.minute
    window_end = end.hour * 60 + end.minute

    midnight = datetime.combine(on_date, time(0, 0))
    local_end = midnight + timedelta(minutes=window_end)
    length = timedelta(minutes=duration_minutes)
    slots: list[TimeInterval] = []

    minutes = window_start
    while minutes + duration_minutes <= window_end:
        slot_start = _localize(tz, midnight + timedelta(minutes=minutes))
        minutes += duration_minutes
        if slot_start is None or (slots and slot_start < slots[-1].end):
            continue
        # Every slot lasts exactly the duration, even across a DST change.
        slot_end = tz.normalize(slot_start + length)
        if slot_end.replace(tzinfo=None) > local_end:
            continue
        slots.append(TimeInterval(start=slot_start, end=slot_end))

    return slots


def _localize(tz: pytz.BaseTzInfo, local: datetime) -> Optional[datetime]:
    """Attach ``tz`` to a wall-clock time.

    Returns None for times skipped by a spring-forward change. Times
    repeated by a fall-back change resolve to standard time.
    """
    try:
        return tz.localize(local, is_dst=None)
    except pytz.NonExistentTimeError:
        return None
    except pytz.AmbiguousTimeError:
        return tz.localize(local, is_dst=False)
