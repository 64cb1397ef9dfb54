"""
Booking engine facade.

Wires one store, one clock, and the configuration into the operations the
rest of the product calls: availability search, booking creation, booking
transitions, the reminder sweep, and the provider schedule management that
feeds them.
"""

from collections.abc import Callable, Iterable
from datetime import date, datetime
from typing import Any, Optional

from pydantic import ValidationError

from bookit.config import AppConfig, settings
from bookit.errors import (
    BusinessNotFoundError,
    InputValidationError,
    ProviderNotFoundError,
    UnauthorizedError,
)
from bookit.logging_context import get_request_logger, new_request_id
from bookit.notifications.templates import LoggingDispatcher, NotificationDispatcher
from bookit.schemas.booking_schema import (
    AvailabilityResult,
    Booking,
    BookingAction,
    BookingStatus,
)
from bookit.schemas.business_schema import Provider, Service
from bookit.schemas.schedule_schema import DateOverride, WeeklyScheduleBlock
from bookit.scheduling.availability import AvailabilityQuery
from bookit.scheduling.reminders import ReminderScheduler
from bookit.scheduling.transitions import BookingTransitionGuard
from bookit.store.base import BookingStore
from bookit.utils import utcnow

logger = get_request_logger(__name__)


class BookingEngine:
    """Single entry point for callers of the scheduling core."""

    def __init__(
        self,
        store: BookingStore,
        clock: Callable[[], datetime] = utcnow,
        dispatcher: Optional[NotificationDispatcher] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or settings
        self._clock = clock
        self.availability = AvailabilityQuery(store, self.config.scheduling, clock)
        self.guard = BookingTransitionGuard(store, clock)
        self.reminders = ReminderScheduler(
            store,
            dispatcher or LoggingDispatcher(),
            clock=clock,
            config=self.config.reminders,
        )

    # ------------------------------------------------------------------ #
    # Core operations
    # ------------------------------------------------------------------ #

    def resolve_availability(
        self,
        business_id: str,
        service_id: str,
        provider_id: Optional[str] = None,
        from_date: Optional[date] = None,
        days: Optional[int] = None,
    ) -> AvailabilityResult:
        new_request_id("AVL")
        return self.availability.resolve(business_id, service_id, provider_id, from_date, days)

    def create_booking(
        self,
        business_id: str,
        service_id: str,
        provider_id: str,
        customer_id: str,
        start: datetime,
    ) -> Booking:
        new_request_id("BKG")
        return self.guard.create_booking(business_id, service_id, provider_id, customer_id, start)

    def transition_booking(
        self,
        booking_id: str,
        acting_user_id: str,
        action: BookingAction,
        reason: Optional[str] = None,
    ) -> Booking:
        new_request_id("TRN")
        return self.guard.transition(booking_id, acting_user_id, action, reason)

    def run_reminder_sweep(self, now: Optional[datetime] = None) -> int:
        return self.reminders.run_sweep(now)

    # ------------------------------------------------------------------ #
    # Listings
    # ------------------------------------------------------------------ #

    def list_customer_bookings(
        self,
        customer_id: str,
        status: Optional[BookingStatus] = None,
        upcoming: bool = False,
    ) -> list[Booking]:
        """A customer's bookings, ascending by start.

        ``upcoming`` keeps only committed bookings that have not started yet
        and takes precedence over ``status``.
        """
        if not customer_id:
            raise InputValidationError("customer_id is required")
        bookings = self.store.list_customer_bookings(customer_id)
        if upcoming:
            now = self._clock()
            return [b for b in bookings if b.is_committed and b.start >= now]
        if status is not None:
            status = BookingStatus(status)
            return [b for b in bookings if b.status == status]
        return bookings

    def list_providers(
        self, business_id: str, service_id: Optional[str] = None
    ) -> list[Provider]:
        self._require_business(business_id)
        if service_id:
            return self.store.list_providers_for_service(business_id, service_id)
        return [p for p in self.store.list_providers(business_id) if p.is_active]

    def search_services(self, business_id: str, query: Optional[str] = None) -> list[Service]:
        self._require_business(business_id)
        services = [s for s in self.store.list_services(business_id) if s.is_active]
        if query:
            needle = query.lower().strip()
            services = [s for s in services if needle in s.name.lower()]
        return services

    # ------------------------------------------------------------------ #
    # Provider schedule management
    # ------------------------------------------------------------------ #

    def replace_weekly_schedule(
        self,
        provider_id: str,
        acting_user_id: str,
        blocks: Iterable[dict[str, Any]],
    ) -> list[WeeklyScheduleBlock]:
        """Replace a provider's whole weekly schedule. No partial patches."""
        new_request_id("SCH")
        provider = self._require_provider_owner(provider_id, acting_user_id)
        try:
            parsed = [
                WeeklyScheduleBlock(**{**block, "provider_id": provider.id})
                for block in blocks
            ]
        except (ValidationError, TypeError) as exc:
            raise InputValidationError(f"Invalid schedule: {exc}") from exc
        return self.store.replace_weekly_schedule(provider.id, parsed)

    def add_override(
        self,
        provider_id: str,
        acting_user_id: str,
        on_date: date,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        blocked: Optional[bool] = None,
        reason: Optional[str] = None,
    ) -> DateOverride:
        """Add a date override. ``blocked`` defaults to True when omitted."""
        new_request_id("SCH")
        provider = self._require_provider_owner(provider_id, acting_user_id)
        try:
            override = DateOverride(
                provider_id=provider.id,
                date=on_date,
                start_time=start_time or None,
                end_time=end_time or None,
                blocked=True if blocked is None else blocked,
                reason=reason,
            )
        except ValidationError as exc:
            raise InputValidationError(f"Invalid override: {exc}") from exc
        created = self.store.add_override(override)
        logger.info("Override added for provider %s on %s (blocked=%s)",
                    provider.id, created.date.isoformat(), created.blocked)
        return created

    def _require_business(self, business_id: str) -> None:
        if not business_id:
            raise InputValidationError("business_id is required")
        if self.store.get_business(business_id) is None:
            raise BusinessNotFoundError(f"Business {business_id} not found")

    def _require_provider_owner(self, provider_id: str, acting_user_id: str) -> Provider:
        if not provider_id or not acting_user_id:
            raise InputValidationError("provider_id and acting_user_id are required")
        provider = self.store.get_provider(provider_id)
        if provider is None:
            raise ProviderNotFoundError(f"Provider {provider_id} not found")
        if provider.user_id != acting_user_id:
            raise UnauthorizedError(
                f"User {acting_user_id} may not manage provider {provider_id}"
            )
        return provider
