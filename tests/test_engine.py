"""Tests for the engine facade: listings and provider schedule management."""

from datetime import date, timedelta

import pytest

from bookit.engine import BookingEngine
from bookit.errors import (
    BusinessNotFoundError,
    DomainRuleError,
    DuplicateOverrideError,
    InputValidationError,
    ProviderNotFoundError,
    UnauthorizedError,
)
from bookit.schemas.booking_schema import BookingAction, BookingStatus
from bookit.store.memory import InMemoryStore
from bookit.store.seed import seed_demo_store
from tests.conftest import FIXED_NOW, MONDAY, at, make_booking

WEEKDAY_HOURS = [
    {"day_of_week": 1, "start_time": "08:00", "end_time": "12:00"},
    {"day_of_week": 3, "start_time": "12:00", "end_time": "16:00"},
]


class TestFacade:
    def test_book_confirm_and_remind(self, engine, dispatcher, clock):
        start = FIXED_NOW + timedelta(hours=3)
        booking = engine.create_booking("biz-1", "svc-cut", "prov-ana", "cust-1", start)
        engine.transition_booking(booking.id, "user-ana", BookingAction.CONFIRM)
        clock.advance(hours=2, minutes=30)
        assert engine.run_reminder_sweep() == 1
        assert dispatcher.outbox[0][0] == booking.id

    def test_operations_log_with_request_id(self, engine, caplog):
        with caplog.at_level("INFO", logger="bookit"):
            booking = engine.create_booking(
                "biz-1", "svc-cut", "prov-ana", "cust-1", at(MONDAY, "10:00")
            )
            engine.transition_booking(booking.id, "user-ana", BookingAction.CONFIRM)
        created = [r for r in caplog.records if r.getMessage().startswith("Booking created")]
        moved = [r for r in caplog.records if "->" in r.getMessage()]
        assert created[0].request_id.startswith("BKG-")
        assert moved[0].request_id.startswith("TRN-")

    def test_booked_slot_disappears_from_search(self, engine):
        engine.create_booking("biz-1", "svc-cut", "prov-ben", "cust-1", at(MONDAY, "13:00"))
        result = engine.resolve_availability("biz-1", "svc-cut", "prov-ben", MONDAY, 1)
        assert at(MONDAY, "13:00") not in [s.start for s in result.availability["2026-03-16"]]


class TestScheduleManagement:
    def test_replace_weekly_schedule(self, engine, store):
        blocks = engine.replace_weekly_schedule("prov-ana", "user-ana", WEEKDAY_HOURS)
        assert [(b.day_of_week, b.start_time) for b in blocks] == [(1, "08:00"), (3, "12:00")]
        assert len(store.get_weekly_schedule("prov-ana")) == 2

    def test_replacement_is_whole_set(self, engine):
        engine.replace_weekly_schedule("prov-ana", "user-ana", WEEKDAY_HOURS)
        result = engine.resolve_availability("biz-1", "svc-cut", "prov-ana", date(2026, 3, 17), 1)
        assert result.availability["2026-03-17"] == []

    def test_provider_id_in_payload_ignored(self, engine, store):
        blocks = [{**WEEKDAY_HOURS[0], "provider_id": "prov-ben"}]
        engine.replace_weekly_schedule("prov-ana", "user-ana", blocks)
        assert store.get_weekly_schedule("prov-ben") != []
        assert store.get_weekly_schedule("prov-ana")[0].provider_id == "prov-ana"

    def test_invalid_block_rejected_and_schedule_kept(self, engine, store):
        before = store.get_weekly_schedule("prov-ana")
        bad = [{"day_of_week": 1, "start_time": "17:00", "end_time": "09:00"}]
        with pytest.raises(InputValidationError):
            engine.replace_weekly_schedule("prov-ana", "user-ana", bad)
        assert store.get_weekly_schedule("prov-ana") == before

    def test_day_of_week_out_of_range(self, engine):
        with pytest.raises(InputValidationError):
            engine.replace_weekly_schedule(
                "prov-ana", "user-ana",
                [{"day_of_week": 7, "start_time": "09:00", "end_time": "17:00"}],
            )

    def test_only_owner_may_edit(self, engine):
        with pytest.raises(UnauthorizedError):
            engine.replace_weekly_schedule("prov-ana", "user-ben", WEEKDAY_HOURS)

    def test_unknown_provider(self, engine):
        with pytest.raises(ProviderNotFoundError):
            engine.replace_weekly_schedule("prov-nope", "user-ana", WEEKDAY_HOURS)

    def test_override_defaults_to_blocked(self, engine):
        override = engine.add_override("prov-ana", "user-ana", MONDAY, reason="Dentist")
        assert override.blocked is True
        result = engine.resolve_availability("biz-1", "svc-cut", "prov-ana", MONDAY, 1)
        assert result.availability["2026-03-16"] == []

    def test_override_with_custom_hours(self, engine):
        engine.add_override("prov-ana", "user-ana", MONDAY, "07:00", "08:00", blocked=False)
        result = engine.resolve_availability("biz-1", "svc-cut", "prov-ana", MONDAY, 1)
        assert [s.start for s in result.availability["2026-03-16"]] == [
            at(MONDAY, "07:00"), at(MONDAY, "07:30"),
        ]

    def test_one_override_per_date(self, engine):
        engine.add_override("prov-ana", "user-ana", MONDAY)
        with pytest.raises(DuplicateOverrideError) as exc_info:
            engine.add_override("prov-ana", "user-ana", MONDAY, "10:00", "12:00", blocked=False)
        assert isinstance(exc_info.value, DomainRuleError)
        assert exc_info.value.code == "DuplicateOverride"
        assert exc_info.value.retryable is False

    def test_override_needs_both_times(self, engine):
        with pytest.raises(InputValidationError):
            engine.add_override("prov-ana", "user-ana", MONDAY, start_time="10:00", blocked=False)

    def test_override_only_by_owner(self, engine):
        with pytest.raises(UnauthorizedError):
            engine.add_override("prov-ana", "cust-1", MONDAY)


class TestListings:
    def test_customer_bookings_sorted(self, engine, store):
        store.put_booking(make_booking(at(MONDAY, "15:00"), booking_id="BK-LATE"))
        store.put_booking(make_booking(at(MONDAY, "09:00"), booking_id="BK-EARLY"))
        store.put_booking(make_booking(at(MONDAY, "11:00"), customer_id="cust-2"))
        assert [b.id for b in engine.list_customer_bookings("cust-1")] == ["BK-EARLY", "BK-LATE"]

    def test_status_filter(self, engine, store):
        store.put_booking(make_booking(at(MONDAY, "09:00"), booking_id="BK-A"))
        store.put_booking(make_booking(at(MONDAY, "10:00"), booking_id="BK-B",
                                       status=BookingStatus.CANCELLED))
        found = engine.list_customer_bookings("cust-1", status=BookingStatus.CANCELLED)
        assert [b.id for b in found] == ["BK-B"]

    def test_upcoming_excludes_past_and_cancelled(self, engine, store):
        store.put_booking(make_booking(FIXED_NOW - timedelta(hours=1), booking_id="BK-PAST"))
        store.put_booking(make_booking(at(MONDAY, "09:00"), booking_id="BK-SOON"))
        store.put_booking(make_booking(at(MONDAY, "10:00"), booking_id="BK-OFF",
                                       status=BookingStatus.CANCELLED))
        assert [b.id for b in engine.list_customer_bookings("cust-1", upcoming=True)] == ["BK-SOON"]

    def test_customer_required(self, engine):
        with pytest.raises(InputValidationError):
            engine.list_customer_bookings("")

    def test_list_providers(self, engine):
        assert {p.id for p in engine.list_providers("biz-1")} == {"prov-ana", "prov-ben"}
        assert [p.id for p in engine.list_providers("biz-1", "svc-color")] == ["prov-ana"]

    def test_list_providers_unknown_business(self, engine):
        with pytest.raises(BusinessNotFoundError):
            engine.list_providers("biz-nope")

    def test_search_services_skips_inactive(self, engine):
        names = [s.name for s in engine.search_services("biz-1")]
        assert sorted(names) == ["Color", "Haircut"]

    def test_search_services_by_name(self, engine):
        assert [s.id for s in engine.search_services("biz-1", "  HAIR ")] == ["svc-cut"]


class TestDemoSeed:
    def test_seeded_store_is_searchable(self):
        store = seed_demo_store(InMemoryStore(), date(2026, 3, 13))
        engine = BookingEngine(store)
        result = engine.resolve_availability(
            "biz-fresh-cuts", "svc-haircut", from_date=date(2026, 3, 16), days=7
        )
        assert result.slot_count() > 0
        assert all(s.provider_id.startswith("prov-") for day in result.availability.values()
                   for s in day)
