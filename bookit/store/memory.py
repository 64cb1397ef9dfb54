"""
Thread-safe in-memory booking store.

Stands in for a real database in tests, the console demo, and local
development. Records are copied on the way in and out so callers can
never mutate stored state behind the store's back.
"""

import logging
import threading
from collections import defaultdict
from collections.abc import Collection, Sequence
from datetime import date, datetime
from typing import Optional

from bookit.errors import DuplicateOverrideError, SlotConflictError
from bookit.schemas.booking_schema import (
    Booking,
    BookingStatus,
)
from bookit.schemas.business_schema import Business, Provider, ProviderOffering, Service
from bookit.schemas.schedule_schema import DateOverride, WeeklyScheduleBlock
from bookit.scheduling.overlap import find_conflicts

logger = logging.getLogger(__name__)


class InMemoryStore:
    """Dictionary-backed implementation of ``BookingStore``."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._provider_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._businesses: dict[str, Business] = {}
        self._services: dict[str, Service] = {}
        self._providers: dict[str, Provider] = {}
        self._offerings: set[tuple[str, str]] = set()
        self._schedules: dict[str, list[WeeklyScheduleBlock]] = defaultdict(list)
        self._overrides: dict[tuple[str, date], DateOverride] = {}
        self._bookings: dict[str, Booking] = {}

    # ------------------------------------------------------------------ #
    # Seeding
    # ------------------------------------------------------------------ #

    def add_business(self, business: Business) -> Business:
        with self._lock:
            self._businesses[business.id] = business.model_copy()
        return business

    def add_service(self, service: Service) -> Service:
        with self._lock:
            self._services[service.id] = service.model_copy()
        return service

    def add_provider(self, provider: Provider, service_ids: Sequence[str] = ()) -> Provider:
        with self._lock:
            self._providers[provider.id] = provider.model_copy()
            for service_id in service_ids:
                self._offerings.add((provider.id, service_id))
        return provider

    def add_offering(self, offering: ProviderOffering) -> None:
        with self._lock:
            self._offerings.add((offering.provider_id, offering.service_id))

    def put_booking(self, booking: Booking) -> Booking:
        """Store a booking without any conflict check (fixtures, imports)."""
        with self._lock:
            self._bookings[booking.id] = booking.model_copy()
        return booking

    def reset(self) -> None:
        """Clear all records. Used by test fixtures for isolation."""
        with self._lock:
            self._businesses.clear()
            self._services.clear()
            self._providers.clear()
            self._offerings.clear()
            self._schedules.clear()
            self._overrides.clear()
            self._bookings.clear()

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def get_business(self, business_id: str) -> Optional[Business]:
        with self._lock:
            business = self._businesses.get(business_id)
            return business.model_copy() if business else None

    def list_active_businesses(self) -> list[Business]:
        with self._lock:
            return [b.model_copy() for b in self._businesses.values() if b.is_active]

    def get_service(self, service_id: str) -> Optional[Service]:
        with self._lock:
            service = self._services.get(service_id)
            return service.model_copy() if service else None

    def list_services(self, business_id: str) -> list[Service]:
        with self._lock:
            return [
                s.model_copy() for s in self._services.values()
                if s.business_id == business_id
            ]

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        with self._lock:
            provider = self._providers.get(provider_id)
            return provider.model_copy() if provider else None

    def list_providers(self, business_id: str) -> list[Provider]:
        with self._lock:
            return [
                p.model_copy() for p in self._providers.values()
                if p.business_id == business_id
            ]

    def provider_offers(self, provider_id: str, service_id: str) -> bool:
        with self._lock:
            return (provider_id, service_id) in self._offerings

    def list_providers_for_service(self, business_id: str, service_id: str) -> list[Provider]:
        with self._lock:
            return [
                p.model_copy() for p in self._providers.values()
                if p.business_id == business_id
                and p.is_active
                and (p.id, service_id) in self._offerings
            ]

    # ------------------------------------------------------------------ #
    # Schedules
    # ------------------------------------------------------------------ #

    def get_weekly_schedule(self, provider_id: str) -> list[WeeklyScheduleBlock]:
        with self._lock:
            return [b.model_copy() for b in self._schedules.get(provider_id, [])]

    def replace_weekly_schedule(
        self, provider_id: str, blocks: Sequence[WeeklyScheduleBlock]
    ) -> list[WeeklyScheduleBlock]:
        replacement = [b.model_copy(update={"provider_id": provider_id}) for b in blocks]
        with self._lock:
            self._schedules[provider_id] = replacement
        logger.info("Weekly schedule replaced for provider %s (%d blocks)",
                    provider_id, len(replacement))
        return sorted(
            (b.model_copy() for b in replacement),
            key=lambda b: (b.day_of_week, b.start_time),
        )

    def get_overrides(
        self,
        provider_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[DateOverride]:
        with self._lock:
            found = [
                o.model_copy() for (pid, day), o in self._overrides.items()
                if pid == provider_id
                and (start_date is None or day >= start_date)
                and (end_date is None or day <= end_date)
            ]
        return sorted(found, key=lambda o: o.date)

    def add_override(self, override: DateOverride) -> DateOverride:
        key = (override.provider_id, override.date)
        with self._lock:
            if key in self._overrides:
                raise DuplicateOverrideError(
                    f"Provider {override.provider_id} already has an override "
                    f"on {override.date.isoformat()}"
                )
            self._overrides[key] = override.model_copy()
        return override

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            return booking.model_copy() if booking else None

    def list_committed_bookings(
        self, provider_ids: Collection[str], start: datetime, end: datetime
    ) -> list[Booking]:
        wanted = set(provider_ids)
        with self._lock:
            return [
                b.model_copy() for b in self._bookings.values()
                if b.provider_id in wanted
                and b.is_committed
                and b.start < end and b.end > start
            ]

    def list_customer_bookings(self, customer_id: str) -> list[Booking]:
        with self._lock:
            found = [
                b.model_copy() for b in self._bookings.values()
                if b.customer_id == customer_id
            ]
        return sorted(found, key=lambda b: b.start)

    def insert_booking_if_free(self, booking: Booking) -> Booking:
        # The provider lock makes check-then-insert atomic against other
        # inserts for the same provider.
        with self._provider_locks[booking.provider_id]:
            with self._lock:
                committed = [
                    b for b in self._bookings.values()
                    if b.provider_id == booking.provider_id
                    and b.is_committed
                ]
                conflicts = find_conflicts(booking, committed)
                if conflicts:
                    raise SlotConflictError(
                        f"Provider {booking.provider_id} already has booking "
                        f"{conflicts[0].id} overlapping {booking.start.isoformat()}"
                    )
                self._bookings[booking.id] = booking.model_copy()
        return booking.model_copy()

    def update_booking_if_status(
        self,
        booking_id: str,
        expected: Collection[BookingStatus],
        **changes: object,
    ) -> Optional[Booking]:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None or current.status not in expected:
                return None
            updated = current.model_copy(update=changes)
            self._bookings[booking_id] = updated
            return updated.model_copy()

    # ------------------------------------------------------------------ #
    # Reminders
    # ------------------------------------------------------------------ #

    def list_reminder_candidates(
        self, business_id: str, window_start: datetime, window_end: datetime
    ) -> list[Booking]:
        with self._lock:
            found = [
                b.model_copy() for b in self._bookings.values()
                if b.business_id == business_id
                and b.status == BookingStatus.CONFIRMED
                and b.reminder_sent_at is None
                and window_start <= b.start <= window_end
            ]
        return sorted(found, key=lambda b: b.start)

    def claim_reminder(self, booking_id: str, claimed_at: datetime) -> bool:
        with self._lock:
            current = self._bookings.get(booking_id)
            if (
                current is None
                or current.status != BookingStatus.CONFIRMED
                or current.reminder_sent_at is not None
            ):
                return False
            self._bookings[booking_id] = current.model_copy(
                update={"reminder_sent_at": claimed_at}
            )
            return True

    def release_reminder(self, booking_id: str, claimed_at: datetime) -> bool:
        with self._lock:
            current = self._bookings.get(booking_id)
            if current is None or current.reminder_sent_at != claimed_at:
                return False
            self._bookings[booking_id] = current.model_copy(
                update={"reminder_sent_at": None}
            )
            return True
