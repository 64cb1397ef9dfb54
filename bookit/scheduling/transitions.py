"""
Booking transition guard.

Every booking state change goes through here. The lifecycle is an explicit
transition table; any action without a matching row for the booking's
current status is rejected with ``InvalidStateError`` and the booking is
left untouched.

    Pending --Confirm--> Confirmed
    Pending --Cancel---> Cancelled
    Confirmed --Cancel-> Cancelled

``Completed`` is set by out-of-band processing once a booking has ended;
nothing here produces or blocks it.

Usage:
    guard = BookingTransitionGuard(store)
    booking = guard.create_booking("biz-1", "svc-cut", "prov-ana", "cust-1", start)
    guard.transition(booking.id, "user-ana", BookingAction.CONFIRM)
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from bookit.errors import (
    BookingNotFoundError,
    BookItError,
    BusinessNotFoundError,
    InputValidationError,
    InThePastError,
    InvalidStateError,
    NoEligibleProviderError,
    ProviderNotFoundError,
    ProviderServiceMismatchError,
    ServiceInactiveError,
    ServiceNotFoundError,
    SlotConflictError,
    UnauthorizedError,
)
from bookit.logging_context import get_request_logger
from bookit.schemas.booking_schema import (
    Booking,
    BookingAction,
    BookingStatus,
    CancelledBy,
    ConfirmationType,
)
from bookit.schemas.business_schema import Business, Provider, Service
from bookit.scheduling.overlap import find_conflicts
from bookit.store.base import BookingStore
from bookit.utils import is_aware, utcnow

logger = get_request_logger(__name__)


@dataclass(frozen=True)
class BookingTransition:
    """A single legal status change."""
    from_status: BookingStatus
    to_status: BookingStatus
    action: BookingAction


def new_booking_id() -> str:
    return f"BK-{uuid.uuid4().hex[:10].upper()}"


class BookingTransitionGuard:
    """Validates and executes create, confirm, and cancel."""

    TRANSITIONS: list[BookingTransition] = [
        BookingTransition(BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingAction.CONFIRM),
        BookingTransition(BookingStatus.PENDING, BookingStatus.CANCELLED, BookingAction.CANCEL),
        BookingTransition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingAction.CANCEL),
    ]

    def __init__(
        self,
        store: BookingStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create_booking(
        self,
        business_id: str,
        service_id: str,
        provider_id: str,
        customer_id: str,
        start: datetime,
    ) -> Booking:
        """
        Create a booking after checking every precondition in order.

        Raises:
            InputValidationError: missing ids or a naive ``start``
            InThePastError: ``start`` is not strictly after now
            BusinessNotFoundError / ServiceNotFoundError / ProviderNotFoundError
            ServiceInactiveError: service inactive or owned by another business
            ProviderServiceMismatchError: provider does not offer the service
            NoEligibleProviderError: provider is inactive
            SlotConflictError: the interval overlaps a committed booking
        """
        for name, value in [
            ("business_id", business_id),
            ("service_id", service_id),
            ("provider_id", provider_id),
            ("customer_id", customer_id),
        ]:
            if not value or not isinstance(value, str):
                raise InputValidationError(f"{name} is required")
        if not isinstance(start, datetime) or not is_aware(start):
            raise InputValidationError("start must be a timezone-aware datetime")

        try:
            now = self._clock()
            if start <= now:
                raise InThePastError(f"Cannot book in the past ({start.isoformat()})")

            business = self._load_business(business_id)
            service = self._load_service(business, service_id)
            provider = self._load_provider(business, provider_id)
            if not self._store.provider_offers(provider.id, service.id):
                raise ProviderServiceMismatchError(
                    f"Provider {provider.id} does not offer service {service.id}"
                )

            end = start + timedelta(minutes=service.duration_minutes)
            existing = self._store.list_committed_bookings([provider.id], start, end)
            proposed = Booking(
                id=new_booking_id(),
                business_id=business.id,
                provider_id=provider.id,
                customer_id=customer_id,
                service_id=service.id,
                start=start,
                end=end,
                status=(
                    BookingStatus.CONFIRMED if business.auto_confirm_bookings
                    else BookingStatus.PENDING
                ),
                confirmation_type=(
                    ConfirmationType.AUTO if business.auto_confirm_bookings
                    else ConfirmationType.MANUAL
                ),
                created_at=now,
            )
            if find_conflicts(proposed, existing):
                raise SlotConflictError(
                    f"Time slot {start.isoformat()} conflicts with an existing booking"
                )

            # The store re-checks overlap atomically with the insert.
            booking = self._store.insert_booking_if_free(proposed)
        except BookItError as exc:
            logger.info("Booking rejected for provider %s at %s: %s",
                        provider_id, start.isoformat(), exc.code)
            raise

        logger.info("Booking created: %s (%s) provider=%s start=%s",
                    booking.id, booking.status.value, booking.provider_id,
                    booking.start.isoformat())
        return booking

    # ------------------------------------------------------------------ #
    # Confirm / cancel
    # ------------------------------------------------------------------ #

    def confirm(self, booking_id: str, acting_user_id: str) -> Booking:
        return self.transition(booking_id, acting_user_id, BookingAction.CONFIRM)

    def cancel(
        self, booking_id: str, acting_user_id: str, reason: Optional[str] = None
    ) -> Booking:
        return self.transition(booking_id, acting_user_id, BookingAction.CANCEL, reason)

    def transition(
        self,
        booking_id: str,
        acting_user_id: str,
        action: BookingAction,
        reason: Optional[str] = None,
    ) -> Booking:
        """
        Apply ``action`` to a booking on behalf of ``acting_user_id``.

        Raises:
            InputValidationError: missing ids or unknown action
            BookingNotFoundError: no such booking
            UnauthorizedError: actor is neither the customer nor the provider
            InvalidStateError: no legal transition from the current status
        """
        if not booking_id or not acting_user_id:
            raise InputValidationError("booking_id and acting_user_id are required")
        try:
            action = BookingAction(action)
        except ValueError:
            raise InputValidationError(f"Unknown booking action: {action!r}") from None

        try:
            booking = self._store.get_booking(booking_id)
            if booking is None:
                raise BookingNotFoundError(f"Booking {booking_id} not found")
            role = self._authorize(booking, acting_user_id)

            target = self._target_status(booking.status, action)
            sources = self.get_valid_sources(action)
            if action == BookingAction.CONFIRM:
                changes = {
                    "status": target,
                    "confirmation_type": ConfirmationType.MANUAL,
                }
            else:
                changes = {
                    "status": target,
                    "cancellation_reason": reason,
                    "cancelled_by": role,
                }

            updated = self._store.update_booking_if_status(booking_id, sources, **changes)
            if updated is None:
                # Status changed between read and write.
                current = self._store.get_booking(booking_id)
                current_status = current.status.value if current else "missing"
                raise InvalidStateError(
                    f"Cannot {action.value.lower()} booking {booking_id} "
                    f"in status {current_status}"
                )
        except BookItError as exc:
            logger.info("Transition %s rejected for booking %s: %s",
                        action.value, booking_id, exc.code)
            raise

        logger.info("Booking %s: %s -> %s by %s",
                    booking_id, booking.status.value, updated.status.value, role.value)
        return updated

    def get_valid_actions(self, status: BookingStatus) -> list[BookingAction]:
        """Return all actions legal from ``status``."""
        return [t.action for t in self.TRANSITIONS if t.from_status == status]

    def get_valid_sources(self, action: BookingAction) -> frozenset[BookingStatus]:
        return frozenset(t.from_status for t in self.TRANSITIONS if t.action == action)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _target_status(self, current: BookingStatus, action: BookingAction) -> BookingStatus:
        for t in self.TRANSITIONS:
            if t.from_status == current and t.action == action:
                return t.to_status
        raise InvalidStateError(
            f"Cannot {action.value.lower()} a booking in status {current.value}. "
            f"Valid actions: {[a.value for a in self.get_valid_actions(current)]}"
        )

    def _authorize(self, booking: Booking, acting_user_id: str) -> CancelledBy:
        """Return the actor's role on the booking, customer taking precedence."""
        if booking.customer_id == acting_user_id:
            return CancelledBy.CUSTOMER
        provider = self._store.get_provider(booking.provider_id)
        if provider is not None and provider.user_id and provider.user_id == acting_user_id:
            return CancelledBy.PROVIDER
        raise UnauthorizedError(
            f"User {acting_user_id} may not act on booking {booking.id}"
        )

    def _load_business(self, business_id: str) -> Business:
        business = self._store.get_business(business_id)
        if business is None:
            raise BusinessNotFoundError(f"Business {business_id} not found")
        return business

    def _load_service(self, business: Business, service_id: str) -> Service:
        service = self._store.get_service(service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found")
        if not service.is_active or service.business_id != business.id:
            raise ServiceInactiveError(
                f"Service {service_id} is not bookable at business {business.id}"
            )
        return service

    def _load_provider(self, business: Business, provider_id: str) -> Provider:
        provider = self._store.get_provider(provider_id)
        if provider is None or provider.business_id != business.id:
            raise ProviderNotFoundError(f"Provider {provider_id} not found")
        if not provider.is_active:
            raise NoEligibleProviderError(f"Provider {provider_id} is not accepting bookings")
        return provider
