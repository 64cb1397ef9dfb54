"""
Store boundary consumed by the scheduling core.

The core never talks to a database directly. Any backend that satisfies
``BookingStore`` can be plugged in. Two writes carry concurrency
guarantees every backend must honor:

- ``insert_booking_if_free`` checks for overlap and inserts as one atomic
  step per provider (serializable transaction, exclusion constraint, or a
  lock), raising ``SlotConflictError`` on overlap.
- ``update_booking_if_status``, ``claim_reminder`` and ``release_reminder``
  are conditional updates: they only apply when the stored row still
  matches the expected state.
"""

from collections.abc import Collection, Sequence
from datetime import date, datetime
from typing import Optional, Protocol

from bookit.schemas.booking_schema import Booking, BookingStatus
from bookit.schemas.business_schema import Business, Provider, Service
from bookit.schemas.schedule_schema import DateOverride, WeeklyScheduleBlock


class BookingStore(Protocol):
    # --- Lookups ---

    def get_business(self, business_id: str) -> Optional[Business]: ...

    def list_active_businesses(self) -> list[Business]: ...

    def get_service(self, service_id: str) -> Optional[Service]: ...

    def list_services(self, business_id: str) -> list[Service]: ...

    def get_provider(self, provider_id: str) -> Optional[Provider]: ...

    def list_providers(self, business_id: str) -> list[Provider]: ...

    def provider_offers(self, provider_id: str, service_id: str) -> bool: ...

    def list_providers_for_service(
        self, business_id: str, service_id: str
    ) -> list[Provider]: ...

    # --- Schedules ---

    def get_weekly_schedule(self, provider_id: str) -> list[WeeklyScheduleBlock]: ...

    def replace_weekly_schedule(
        self, provider_id: str, blocks: Sequence[WeeklyScheduleBlock]
    ) -> list[WeeklyScheduleBlock]: ...

    def get_overrides(
        self,
        provider_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[DateOverride]: ...

    def add_override(self, override: DateOverride) -> DateOverride: ...

    # --- Bookings ---

    def get_booking(self, booking_id: str) -> Optional[Booking]: ...

    def list_committed_bookings(
        self, provider_ids: Collection[str], start: datetime, end: datetime
    ) -> list[Booking]: ...

    def list_customer_bookings(self, customer_id: str) -> list[Booking]: ...

    def insert_booking_if_free(self, booking: Booking) -> Booking: ...

    def update_booking_if_status(
        self,
        booking_id: str,
        expected: Collection[BookingStatus],
        **changes: object,
    ) -> Optional[Booking]: ...

    # --- Reminders ---

    def list_reminder_candidates(
        self, business_id: str, window_start: datetime, window_end: datetime
    ) -> list[Booking]: ...

    def claim_reminder(self, booking_id: str, claimed_at: datetime) -> bool:
        """Set the reminder marker only if the booking is still Confirmed and unmarked."""
        ...

    def release_reminder(self, booking_id: str, claimed_at: datetime) -> bool:
        """Clear the marker only if it still holds ``claimed_at``."""
        ...
