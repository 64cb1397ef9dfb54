"""Demo data for local runs: a barbershop with auto-confirm and a spa without."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from bookit.schemas.booking_schema import Booking, BookingStatus, ConfirmationType
from bookit.schemas.business_schema import Business, Provider, Service
from bookit.schemas.schedule_schema import DateOverride, WeeklyScheduleBlock
from bookit.store.memory import InMemoryStore
from bookit.utils import get_tz

WEEKDAYS = range(1, 6)  # Monday..Friday
SATURDAY = 6


def _weekly(provider_id: str, days, start: str, end: str) -> list[WeeklyScheduleBlock]:
    return [
        WeeklyScheduleBlock(provider_id=provider_id, day_of_week=d, start_time=start, end_time=end)
        for d in days
    ]


def _next_weekday(after: date, weekday: int) -> date:
    """Next date strictly after ``after`` whose 0=Sunday weekday matches."""
    current = after + timedelta(days=1)
    while (current.weekday() + 1) % 7 != weekday:
        current += timedelta(days=1)
    return current


def seed_demo_store(store: InMemoryStore, today: date) -> InMemoryStore:
    fresh_cuts = store.add_business(Business(
        id="biz-fresh-cuts",
        name="Fresh Cuts Barbershop",
        slug="fresh-cuts",
        timezone="America/New_York",
        auto_confirm_bookings=True,
        reminder_lead_minutes=60,
    ))
    zen_space = store.add_business(Business(
        id="biz-zen-space",
        name="Zen Space Wellness",
        slug="zen-space",
        timezone="America/Los_Angeles",
        auto_confirm_bookings=False,
        reminder_lead_minutes=120,
    ))

    for service in [
        Service(id="svc-haircut", business_id=fresh_cuts.id, name="Classic Haircut",
                duration_minutes=30, price=Decimal("35.00")),
        Service(id="svc-fade", business_id=fresh_cuts.id, name="Classic Fade",
                duration_minutes=45, price=Decimal("45.00")),
        Service(id="svc-beard", business_id=fresh_cuts.id, name="Beard Trim & Shape",
                duration_minutes=20, price=Decimal("20.00")),
        Service(id="svc-shave", business_id=fresh_cuts.id, name="Hot Towel Shave",
                duration_minutes=30, price=Decimal("30.00"), is_active=False),
        Service(id="svc-deep-tissue", business_id=zen_space.id, name="Deep Tissue Massage",
                duration_minutes=60, price=Decimal("120.00")),
        Service(id="svc-swedish", business_id=zen_space.id, name="Swedish Massage",
                duration_minutes=60, price=Decimal("100.00")),
    ]:
        store.add_service(service)

    store.add_provider(
        Provider(id="prov-tony", business_id=fresh_cuts.id, user_id="user-tony",
                 display_name="Tony Rivera"),
        service_ids=["svc-haircut", "svc-fade", "svc-beard"],
    )
    store.add_provider(
        Provider(id="prov-sarah", business_id=fresh_cuts.id, user_id="user-sarah",
                 display_name="Sarah Chen"),
        service_ids=["svc-haircut", "svc-beard"],
    )
    store.add_provider(
        Provider(id="prov-maya", business_id=zen_space.id, user_id="user-maya",
                 display_name="Maya Lopez"),
        service_ids=["svc-deep-tissue", "svc-swedish"],
    )

    store.replace_weekly_schedule(
        "prov-tony",
        _weekly("prov-tony", WEEKDAYS, "09:00", "17:00")
        + _weekly("prov-tony", [SATURDAY], "10:00", "14:00"),
    )
    store.replace_weekly_schedule(
        "prov-sarah", _weekly("prov-sarah", range(2, 7), "10:00", "18:00")
    )
    store.replace_weekly_schedule(
        "prov-maya",
        _weekly("prov-maya", WEEKDAYS, "10:00", "18:00")
        + _weekly("prov-maya", [SATURDAY], "10:00", "15:00"),
    )

    store.add_override(DateOverride(
        provider_id="prov-tony", date=today + timedelta(days=2),
        blocked=True, reason="Personal day",
    ))
    store.add_override(DateOverride(
        provider_id="prov-sarah", date=_next_weekday(today, SATURDAY),
        start_time="09:00", end_time="16:00", blocked=False,
        reason="Extended Saturday hours",
    ))

    ny = get_tz(fresh_cuts.timezone)
    tomorrow_ten = ny.localize(datetime.combine(today + timedelta(days=1), time(10, 0)))
    store.put_booking(Booking(
        id="BK-SEED000001",
        business_id=fresh_cuts.id,
        provider_id="prov-tony",
        customer_id="user-alex",
        service_id="svc-fade",
        start=tomorrow_ten,
        end=tomorrow_ten + timedelta(minutes=45),
        status=BookingStatus.CONFIRMED,
        confirmation_type=ConfirmationType.AUTO,
    ))
    return store
