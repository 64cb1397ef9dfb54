"""
Overlap detection.

Two intervals overlap iff ``a.start < b.end and a.end > b.start``; touching
endpoints are allowed. Bookings are not assumed to be sorted, so the
filter is a plain linear scan per slot.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, TypeVar


class HasBounds(Protocol):
    start: datetime
    end: datetime


SlotT = TypeVar("SlotT", bound=HasBounds)


def intervals_overlap(a: HasBounds, b: HasBounds) -> bool:
    return a.start < b.end and a.end > b.start


def is_slot_available(slot: HasBounds, existing: Iterable[HasBounds]) -> bool:
    """True if ``slot`` overlaps none of ``existing``."""
    return not any(intervals_overlap(slot, other) for other in existing)


def find_conflicts(slot: HasBounds, existing: Iterable[SlotT]) -> list[SlotT]:
    """Return every entry of ``existing`` that overlaps ``slot``."""
    return [other for other in existing if intervals_overlap(slot, other)]


def filter_available_slots(
    candidates: Iterable[SlotT], committed: Iterable[HasBounds]
) -> list[SlotT]:
    """
    Drop candidates that overlap any committed booking.

    ``committed`` should hold only Pending/Confirmed bookings; status is
    not re-checked here.
    """
    busy = list(committed)
    return [slot for slot in candidates if is_slot_available(slot, busy)]
