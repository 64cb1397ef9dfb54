"""
Availability query.

Composes schedule resolution, slot generation, and the conflict filter
across a provider set and a date range. Each day's slots are merged across
providers and sorted ascending by start ("first available"). Provider
selection policies such as round-robin belong to callers
(see bookit.tools.selection).
"""

from collections import defaultdict
from collections.abc import Callable, Iterable
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from bookit.config import SchedulingConfig, settings
from bookit.errors import (
    BusinessNotFoundError,
    InputValidationError,
    NoEligibleProviderError,
    ProviderNotFoundError,
    ServiceNotFoundError,
)
from bookit.logging_context import get_request_logger
from bookit.schemas.booking_schema import AvailabilityResult, AvailableSlot, Booking
from bookit.schemas.business_schema import Business, Provider, Service
from bookit.schemas.schedule_schema import DateOverride, TimeInterval, WeeklyScheduleBlock
from bookit.scheduling.overlap import filter_available_slots
from bookit.scheduling.resolver import resolve_working_windows
from bookit.scheduling.slots import generate_time_slots
from bookit.store.base import BookingStore
from bookit.utils import get_tz, utcnow

logger = get_request_logger(__name__)


def get_available_slots(
    schedule: Iterable[WeeklyScheduleBlock],
    overrides: Iterable[DateOverride],
    committed: Iterable[Booking],
    on_date: date,
    duration_minutes: int,
    tz: pytz.BaseTzInfo = pytz.UTC,
) -> list[TimeInterval]:
    """All open slots for one provider on one date.

    Each resolved window is tiled independently, then the combined
    candidate list is filtered against ``committed`` bookings.
    """
    candidates: list[TimeInterval] = []
    for window in resolve_working_windows(schedule, overrides, on_date):
        candidates.extend(
            generate_time_slots(window.start, window.end, duration_minutes, on_date, tz)
        )
    return filter_available_slots(candidates, committed)


def day_bounds(start_date: date, days: int, tz: pytz.BaseTzInfo) -> tuple[datetime, datetime]:
    """Instants covering local midnight of ``start_date`` to midnight ``days`` later."""
    start = tz.localize(datetime.combine(start_date, time(0, 0)))
    end = tz.localize(datetime.combine(start_date + timedelta(days=days), time(0, 0)))
    return start, end


class AvailabilityQuery:
    """Resolves open slots for a service over a range of days."""

    def __init__(
        self,
        store: BookingStore,
        config: Optional[SchedulingConfig] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._config = config or settings.scheduling
        self._clock = clock

    def resolve(
        self,
        business_id: str,
        service_id: str,
        provider_id: Optional[str] = None,
        from_date: Optional[date] = None,
        days: Optional[int] = None,
    ) -> AvailabilityResult:
        """
        Search availability.

        Args:
            business_id: business that owns the service
            service_id: service whose duration sizes the slots
            provider_id: restrict to one provider, else any provider
                offering the service
            from_date: first day searched, defaults to the current date in
                the business timezone
            days: number of days searched, defaults to the configured value

        Raises:
            InputValidationError: bad ids or day count
            BusinessNotFoundError: unknown business
            ServiceNotFoundError: unknown, inactive, or foreign service
            ProviderNotFoundError: unknown provider id
            NoEligibleProviderError: no active provider offers the service
        """
        days = self._config.default_search_days if days is None else days
        self._validate(business_id, service_id, provider_id, from_date, days)

        business = self._store.get_business(business_id)
        if business is None:
            raise BusinessNotFoundError(f"Business {business_id} not found")

        service = self._load_service(business, service_id)
        providers = self._eligible_providers(business, service, provider_id)

        tz = get_tz(business.timezone)
        if from_date is None:
            from_date = self._clock().astimezone(tz).date()

        range_start, range_end = day_bounds(from_date, days, tz)
        provider_ids = [p.id for p in providers]
        by_provider: dict[str, list[Booking]] = defaultdict(list)
        for booking in self._store.list_committed_bookings(provider_ids, range_start, range_end):
            by_provider[booking.provider_id].append(booking)

        last_date = from_date + timedelta(days=days - 1)
        schedules = {p.id: self._store.get_weekly_schedule(p.id) for p in providers}
        overrides = {p.id: self._store.get_overrides(p.id, from_date, last_date) for p in providers}

        result = AvailabilityResult(
            business_id=business.id,
            service_id=service.id,
            service_name=service.name,
            duration_minutes=service.duration_minutes,
        )
        for offset in range(days):
            on_date = from_date + timedelta(days=offset)
            day_slots: list[AvailableSlot] = []
            for provider in providers:
                open_slots = get_available_slots(
                    schedules[provider.id],
                    overrides[provider.id],
                    by_provider[provider.id],
                    on_date,
                    service.duration_minutes,
                    tz,
                )
                day_slots.extend(
                    AvailableSlot(
                        start=slot.start,
                        end=slot.end,
                        provider_id=provider.id,
                        provider_name=provider.display_name,
                    )
                    for slot in open_slots
                )
            # Stable sort keeps provider order for identical start times.
            day_slots.sort(key=lambda s: s.start)
            result.availability[on_date.isoformat()] = day_slots

        logger.info(
            "Availability for service %s: %d slots across %d providers over %d days",
            service.id, result.slot_count(), len(providers), days,
        )
        return result

    def _validate(
        self,
        business_id: str,
        service_id: str,
        provider_id: Optional[str],
        from_date: Optional[date],
        days: int,
    ) -> None:
        if not business_id or not isinstance(business_id, str):
            raise InputValidationError("business_id is required")
        if not service_id or not isinstance(service_id, str):
            raise InputValidationError("service_id is required")
        if provider_id is not None and (not provider_id or not isinstance(provider_id, str)):
            raise InputValidationError("provider_id must be a non-empty string")
        if from_date is not None and (
            not isinstance(from_date, date) or isinstance(from_date, datetime)
        ):
            raise InputValidationError("from_date must be a calendar date")
        if not isinstance(days, int) or isinstance(days, bool):
            raise InputValidationError("days must be an integer")
        if not 1 <= days <= self._config.max_search_days:
            raise InputValidationError(
                f"days must be between 1 and {self._config.max_search_days}, got {days}"
            )

    def _load_service(self, business: Business, service_id: str) -> Service:
        service = self._store.get_service(service_id)
        if service is None or service.business_id != business.id or not service.is_active:
            raise ServiceNotFoundError(f"Service {service_id} not found")
        return service

    def _eligible_providers(
        self, business: Business, service: Service, provider_id: Optional[str]
    ) -> list[Provider]:
        if provider_id is None:
            providers = self._store.list_providers_for_service(business.id, service.id)
            if not providers:
                raise NoEligibleProviderError(
                    f"No providers available for service {service.id}"
                )
            return providers

        provider = self._store.get_provider(provider_id)
        if provider is None or provider.business_id != business.id:
            raise ProviderNotFoundError(f"Provider {provider_id} not found")
        if not provider.is_active or not self._store.provider_offers(provider.id, service.id):
            raise NoEligibleProviderError(
                f"Provider {provider_id} does not offer service {service.id}"
            )
        return [provider]
