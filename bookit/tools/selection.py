"""
Caller-side provider selection.

The availability query always returns slots in first-available order. A
front end that wants to spread load picks among providers free at the
same time with one of these strategies.
"""

import random
from datetime import datetime
from enum import Enum
from typing import Optional

from bookit.schemas.booking_schema import AvailableSlot


class ProviderSelectionStrategy(str, Enum):
    FIRST_AVAILABLE = "first-available"
    ROUND_ROBIN = "round-robin"
    RANDOM = "random"


class ProviderSelector:
    """Chooses one slot among providers free at the same start time."""

    def __init__(
        self,
        strategy: ProviderSelectionStrategy = ProviderSelectionStrategy.FIRST_AVAILABLE,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.strategy = ProviderSelectionStrategy(strategy)
        self._rng = rng or random.Random()
        self._last_provider_id: Optional[str] = None

    def choose(
        self, slots: list[AvailableSlot], start: Optional[datetime] = None
    ) -> Optional[AvailableSlot]:
        """Pick a slot starting at ``start``, or at the earliest start if omitted."""
        if not slots:
            return None
        target = start or min(s.start for s in slots)
        candidates = [s for s in slots if s.start == target]
        if not candidates:
            return None

        if self.strategy == ProviderSelectionStrategy.RANDOM:
            chosen = self._rng.choice(candidates)
        elif self.strategy == ProviderSelectionStrategy.ROUND_ROBIN:
            chosen = self._next_in_rotation(candidates)
        else:
            chosen = candidates[0]

        self._last_provider_id = chosen.provider_id
        return chosen

    def _next_in_rotation(self, candidates: list[AvailableSlot]) -> AvailableSlot:
        ordered = sorted(candidates, key=lambda s: s.provider_id)
        if self._last_provider_id is None:
            return ordered[0]
        for slot in ordered:
            if slot.provider_id > self._last_provider_id:
                return slot
        return ordered[0]
