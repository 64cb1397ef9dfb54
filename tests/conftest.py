"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from bookit.engine import BookingEngine
from bookit.notifications.templates import LoggingDispatcher
from bookit.schemas.booking_schema import Booking, BookingStatus, ConfirmationType
from bookit.schemas.business_schema import Business, Provider, Service
from bookit.schemas.schedule_schema import WeeklyScheduleBlock
from bookit.store.memory import InMemoryStore

# Friday 2026-03-13 12:00 UTC. The following Monday is 2026-03-16.
FIXED_NOW = datetime(2026, 3, 13, 12, 0, tzinfo=timezone.utc)
MONDAY = date(2026, 3, 16)
SATURDAY = date(2026, 3, 14)


class FakeClock:
    """Injectable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def at(day: date, clock_time: str) -> datetime:
    """UTC instant for ``HH:MM`` on ``day``."""
    hour, minute = (int(p) for p in clock_time.split(":"))
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


def weekdays(provider_id: str, start: str, end: str) -> list[WeeklyScheduleBlock]:
    """Monday..Friday blocks (1..5) with the same hours."""
    return [
        WeeklyScheduleBlock(provider_id=provider_id, day_of_week=d, start_time=start, end_time=end)
        for d in range(1, 6)
    ]


def make_booking(
    start: datetime,
    minutes: int = 30,
    provider_id: str = "prov-ana",
    customer_id: str = "cust-1",
    status: BookingStatus = BookingStatus.CONFIRMED,
    booking_id: Optional[str] = None,
    business_id: str = "biz-1",
    service_id: str = "svc-cut",
) -> Booking:
    """Helper to create a Booking with sensible defaults."""
    return Booking(
        id=booking_id or f"BK-{provider_id}-{start:%m%d%H%M}",
        business_id=business_id,
        provider_id=provider_id,
        customer_id=customer_id,
        service_id=service_id,
        start=start,
        end=start + timedelta(minutes=minutes),
        status=status,
        confirmation_type=ConfirmationType.MANUAL,
    )


def seed_store(store: InMemoryStore, auto_confirm: bool = False) -> InMemoryStore:
    store.add_business(Business(
        id="biz-1", name="Fresh Cuts", timezone="UTC",
        auto_confirm_bookings=auto_confirm, reminder_lead_minutes=60,
    ))
    store.add_business(Business(id="biz-2", name="Zen Space", timezone="UTC"))

    store.add_service(Service(id="svc-cut", business_id="biz-1", name="Haircut",
                              duration_minutes=30, price=Decimal("35")))
    store.add_service(Service(id="svc-color", business_id="biz-1", name="Color",
                              duration_minutes=90, price=Decimal("80")))
    store.add_service(Service(id="svc-old", business_id="biz-1", name="Hot Towel Shave",
                              duration_minutes=30, is_active=False))
    store.add_service(Service(id="svc-massage", business_id="biz-2", name="Massage",
                              duration_minutes=60))

    store.add_provider(
        Provider(id="prov-ana", business_id="biz-1", user_id="user-ana", display_name="Ana"),
        service_ids=["svc-cut", "svc-color", "svc-old"],
    )
    store.add_provider(
        Provider(id="prov-ben", business_id="biz-1", user_id="user-ben", display_name="Ben"),
        service_ids=["svc-cut"],
    )
    store.add_provider(
        Provider(id="prov-zoe", business_id="biz-2", user_id="user-zoe", display_name="Zoe"),
        service_ids=["svc-massage"],
    )

    store.replace_weekly_schedule("prov-ana", weekdays("prov-ana", "09:00", "17:00"))
    store.replace_weekly_schedule("prov-ben", weekdays("prov-ben", "13:00", "17:00"))
    store.replace_weekly_schedule("prov-zoe", weekdays("prov-zoe", "10:00", "12:00"))
    return store


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return seed_store(InMemoryStore())


@pytest.fixture
def dispatcher():
    return LoggingDispatcher()


@pytest.fixture
def engine(store, clock, dispatcher):
    return BookingEngine(store, clock=clock, dispatcher=dispatcher)
