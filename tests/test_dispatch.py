"""Tests for tool-call parsing and dispatch."""

import pytest

from bookit.errors import InputValidationError
from bookit.tools.dispatch import (
    CancelBooking,
    CreateBooking,
    SearchAvailability,
    ToolDispatcher,
    parse_command,
)
from tests.conftest import MONDAY


@pytest.fixture
def tools(engine):
    return ToolDispatcher(engine, mask_unauthorized=True)


def create(tools, start="2026-03-16T10:00:00Z", customer_id="cust-1"):
    return tools.handle({
        "tool": "create_booking",
        "business_id": "biz-1",
        "service_id": "svc-cut",
        "provider_id": "prov-ana",
        "customer_id": customer_id,
        "start_time": start,
    })


class TestParseCommand:
    def test_discriminates_on_tool(self):
        command = parse_command({
            "tool": "search_availability", "business_id": "biz-1",
            "service_id": "svc-cut", "date": "2026-03-16",
        })
        assert isinstance(command, SearchAvailability)
        assert command.date == MONDAY

    def test_parses_iso_start_time(self):
        command = parse_command({
            "tool": "create_booking", "business_id": "biz-1", "service_id": "svc-cut",
            "provider_id": "prov-ana", "customer_id": "cust-1",
            "start_time": "2026-03-16T10:00:00+00:00",
        })
        assert isinstance(command, CreateBooking)
        assert command.start_time.utcoffset() is not None

    def test_unknown_tool(self):
        with pytest.raises(InputValidationError):
            parse_command({"tool": "reschedule_booking", "booking_id": "BK-1"})

    def test_missing_field(self):
        with pytest.raises(InputValidationError):
            parse_command({"tool": "cancel_booking", "booking_id": "BK-1"})

    def test_optional_reason(self):
        command = parse_command({"tool": "cancel_booking", "booking_id": "BK-1", "user_id": "u"})
        assert isinstance(command, CancelBooking)
        assert command.reason is None


class TestDispatch:
    def test_search_availability(self, tools):
        result = tools.handle({
            "tool": "search_availability", "business_id": "biz-1",
            "service_id": "svc-cut", "date": "2026-03-16", "days": 1,
        })
        assert result["success"] is True
        assert result["service"] == {"id": "svc-cut", "name": "Haircut", "duration_minutes": 30}
        slots = result["availability"]["2026-03-16"]
        assert len(slots) == 24
        assert slots[0]["provider_name"] == "Ana"

    def test_create_and_confirm(self, tools):
        created = create(tools)
        assert created["success"] is True
        assert created["booking"]["status"] == "Pending"
        confirmed = tools.handle({
            "tool": "confirm_booking", "booking_id": created["booking"]["id"],
            "user_id": "user-ana",
        })
        assert confirmed["booking"]["status"] == "Confirmed"

    def test_conflict_reported_with_code(self, tools):
        create(tools)
        result = create(tools, start="2026-03-16T10:15:00Z", customer_id="cust-2")
        assert result == {
            "success": False,
            "error": "SlotConflict",
            "message": result["message"],
            "retryable": False,
        }

    def test_cancel_with_reason(self, tools):
        booking_id = create(tools)["booking"]["id"]
        result = tools.handle({
            "tool": "cancel_booking", "booking_id": booking_id,
            "user_id": "cust-1", "reason": "sick",
        })
        assert result["booking"]["status"] == "Cancelled"
        assert result["booking"]["cancelled_by"] == "Customer"
        assert result["booking"]["cancellation_reason"] == "sick"

    def test_invalid_state_code(self, tools):
        booking_id = create(tools)["booking"]["id"]
        cancel = {"tool": "cancel_booking", "booking_id": booking_id, "user_id": "cust-1"}
        tools.handle(cancel)
        assert tools.handle(cancel)["error"] == "InvalidState"

    def test_unauthorized_masked_as_not_found(self, tools):
        booking_id = create(tools)["booking"]["id"]
        result = tools.handle({"tool": "cancel_booking", "booking_id": booking_id, "user_id": "stranger"})
        assert result["error"] == "NotFound"
        assert result["message"] == "Booking not found"

    def test_unauthorized_unmasked(self, engine):
        tools = ToolDispatcher(engine, mask_unauthorized=False)
        booking_id = create(tools)["booking"]["id"]
        result = tools.handle({"tool": "cancel_booking", "booking_id": booking_id, "user_id": "stranger"})
        assert result["error"] == "Unauthorized"

    def test_malformed_payload(self, tools):
        result = tools.handle({"tool": "create_booking", "business_id": "biz-1"})
        assert result["success"] is False
        assert result["error"] == "InvalidInput"

    def test_past_start(self, tools):
        result = create(tools, start="2026-03-13T11:00:00Z")
        assert result["error"] == "InThePast"

    def test_naive_start_rejected(self, tools):
        assert create(tools, start="2026-03-16T10:00:00")["error"] == "InvalidInput"

    def test_my_bookings(self, tools):
        create(tools)
        result = tools.handle({"tool": "get_my_bookings", "user_id": "cust-1", "upcoming": True})
        assert [b["provider_id"] for b in result["bookings"]] == ["prov-ana"]

    def test_providers_and_services(self, tools):
        providers = tools.handle({"tool": "get_providers", "business_id": "biz-1",
                                  "service_id": "svc-color"})
        assert [p["display_name"] for p in providers["providers"]] == ["Ana"]
        services = tools.handle({"tool": "search_services", "business_id": "biz-1",
                                 "query": "col"})
        assert [s["name"] for s in services["services"]] == ["Color"]

    def test_unknown_service_code(self, tools):
        result = tools.handle({"tool": "search_availability", "business_id": "biz-1",
                               "service_id": "svc-nope"})
        assert result["error"] == "ServiceNotFound"
