"""
Reminder scheduler.

Periodically sweeps confirmed bookings that enter their business's lead
window and sends exactly one reminder each. The reminder marker is claimed
with a conditional update *before* dispatch, so two overlapping sweeps can
never both send for the same booking. A failed dispatch releases the claim
and the booking stays a candidate for the next sweep.

Clock, store, renderer, and dispatcher are all injected so the scheduler
runs under a fake clock in tests.
"""

import asyncio
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional

from bookit.config import ReminderConfig, settings
from bookit.logging_context import get_request_logger, new_request_id
from bookit.notifications.templates import (
    NotificationDispatcher,
    ReminderContext,
    ReminderRenderer,
    render_reminder,
)
from bookit.schemas.booking_schema import Booking
from bookit.schemas.business_schema import Business
from bookit.store.base import BookingStore
from bookit.utils import utcnow

logger = get_request_logger(__name__)


class ReminderScheduler:
    """Finds bookings inside the reminder lead window and dispatches reminders."""

    def __init__(
        self,
        store: BookingStore,
        dispatcher: NotificationDispatcher,
        renderer: ReminderRenderer = render_reminder,
        clock: Callable[[], datetime] = utcnow,
        config: Optional[ReminderConfig] = None,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._renderer = renderer
        self._clock = clock
        self._config = config or settings.reminders
        self.failures: Counter[str] = Counter()

    def failure_count(self, booking_id: str) -> int:
        return self.failures[booking_id]

    def run_sweep(self, now: Optional[datetime] = None) -> int:
        """
        Run one sweep.

        Returns:
            Number of reminders dispatched during this sweep.
        """
        now = now or self._clock()
        new_request_id("SWEEP")
        sent = 0

        for business in self._store.list_active_businesses():
            window_end = now + timedelta(minutes=business.reminder_lead_minutes)
            candidates = self._store.list_reminder_candidates(business.id, now, window_end)
            for booking in candidates:
                if self._send_one(business, booking, now):
                    sent += 1

        if sent:
            logger.info("Reminder sweep at %s: %d reminders sent", now.isoformat(), sent)
        return sent

    def _send_one(self, business: Business, booking: Booking, now: datetime) -> bool:
        max_attempts = self._config.max_attempts
        if max_attempts and self.failures[booking.id] >= max_attempts:
            logger.debug("Skipping booking %s after %d failed attempts",
                         booking.id, self.failures[booking.id])
            return False

        if not self._store.claim_reminder(booking.id, now):
            # Another sweep got there first.
            return False

        try:
            content = self._renderer(self._build_context(business, booking))
            self._dispatcher.send(booking, content)
        except Exception:
            self.failures[booking.id] += 1
            logger.exception("Reminder dispatch failed for booking %s (attempt %d)",
                             booking.id, self.failures[booking.id])
            self._store.release_reminder(booking.id, now)
            return False

        logger.info("Reminder sent for booking %s", booking.id)
        return True

    def _build_context(self, business: Business, booking: Booking) -> ReminderContext:
        provider = self._store.get_provider(booking.provider_id)
        service = self._store.get_service(booking.service_id)
        if provider is None or service is None:
            raise LookupError(f"Booking {booking.id} references a missing provider or service")
        return ReminderContext(
            provider_name=provider.display_name,
            service_name=service.name,
            business_name=business.name,
            start=booking.start,
            timezone=business.timezone,
        )

    async def run_periodically(
        self, stop: asyncio.Event, interval_seconds: Optional[float] = None
    ) -> int:
        """Sweep every ``interval_seconds`` until ``stop`` is set.

        A sweep that raises (for example a store outage) is logged and the
        loop tries again on the next tick.
        """
        interval = interval_seconds or self._config.sweep_interval_seconds
        total = 0
        while not stop.is_set():
            try:
                total += await asyncio.to_thread(self.run_sweep)
            except Exception:
                logger.exception("Reminder sweep failed; retrying in %.0fs", interval)
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
        return total
