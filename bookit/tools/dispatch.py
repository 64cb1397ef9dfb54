"""
Capability interface for tool-calling front ends.

A chat or voice front end turns a model's tool call into one of the
command models below (discriminated on ``tool``) and hands it to
``ToolDispatcher``. The dispatcher routes to the booking engine and always
returns a plain dict, converting scheduling errors into
``{"success": False, "error": <code>, ...}`` so the front end can phrase a
specific reply. No conversational state lives here.
"""

import datetime as dt
from typing import Annotated, Any, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from bookit.config import settings
from bookit.engine import BookingEngine
from bookit.errors import BookItError, InputValidationError, UnauthorizedError
from bookit.logging_context import get_request_logger
from bookit.schemas.booking_schema import BookingAction, BookingStatus

logger = get_request_logger(__name__)


class SearchAvailability(BaseModel):
    tool: Literal["search_availability"] = "search_availability"
    business_id: str
    service_id: str
    provider_id: Optional[str] = None
    date: Optional[dt.date] = None
    days: Optional[int] = None


class CreateBooking(BaseModel):
    tool: Literal["create_booking"] = "create_booking"
    business_id: str
    service_id: str
    provider_id: str
    customer_id: str
    start_time: dt.datetime


class CancelBooking(BaseModel):
    tool: Literal["cancel_booking"] = "cancel_booking"
    booking_id: str
    user_id: str
    reason: Optional[str] = None


class ConfirmBooking(BaseModel):
    tool: Literal["confirm_booking"] = "confirm_booking"
    booking_id: str
    user_id: str


class ListMyBookings(BaseModel):
    tool: Literal["get_my_bookings"] = "get_my_bookings"
    user_id: str
    status: Optional[BookingStatus] = None
    upcoming: bool = False


class ListProviders(BaseModel):
    tool: Literal["get_providers"] = "get_providers"
    business_id: str
    service_id: Optional[str] = None


class SearchServices(BaseModel):
    tool: Literal["search_services"] = "search_services"
    business_id: str
    query: Optional[str] = None


ToolCommand = Annotated[
    Union[
        SearchAvailability,
        CreateBooking,
        CancelBooking,
        ConfirmBooking,
        ListMyBookings,
        ListProviders,
        SearchServices,
    ],
    Field(discriminator="tool"),
]

_command_adapter: TypeAdapter[Any] = TypeAdapter(ToolCommand)


class ToolResult(TypedDict, total=False):
    """Result returned to the front end for every tool call."""

    success: bool
    error: str
    message: str
    retryable: bool
    service: dict[str, Any]
    availability: dict[str, list[dict[str, Any]]]
    booking: dict[str, Any]
    bookings: list[dict[str, Any]]
    providers: list[dict[str, Any]]
    services: list[dict[str, Any]]


def parse_command(payload: dict[str, Any]) -> ToolCommand:
    """Validate a raw tool call into a command model."""
    try:
        return _command_adapter.validate_python(payload)
    except ValidationError as exc:
        raise InputValidationError(f"Invalid tool call: {exc}") from exc


class ToolDispatcher:
    """Routes tool commands to the booking engine."""

    def __init__(self, engine: BookingEngine, mask_unauthorized: Optional[bool] = None) -> None:
        self._engine = engine
        self._mask_unauthorized = (
            settings.mask_unauthorized if mask_unauthorized is None else mask_unauthorized
        )

    def handle(self, payload: dict[str, Any]) -> ToolResult:
        """Parse and dispatch a raw tool call."""
        try:
            command = parse_command(payload)
        except BookItError as exc:
            return self._error(exc)
        return self.dispatch(command)

    def dispatch(self, command: ToolCommand) -> ToolResult:
        try:
            return self._route(command)
        except BookItError as exc:
            return self._error(exc)

    def _route(self, command: ToolCommand) -> ToolResult:
        engine = self._engine
        match command:
            case SearchAvailability():
                result = engine.resolve_availability(
                    command.business_id,
                    command.service_id,
                    command.provider_id,
                    command.date,
                    command.days,
                )
                return {
                    "success": True,
                    "service": {
                        "id": result.service_id,
                        "name": result.service_name,
                        "duration_minutes": result.duration_minutes,
                    },
                    "availability": {
                        day: [slot.model_dump(mode="json") for slot in slots]
                        for day, slots in result.availability.items()
                    },
                }
            case CreateBooking():
                booking = engine.create_booking(
                    command.business_id,
                    command.service_id,
                    command.provider_id,
                    command.customer_id,
                    command.start_time,
                )
                return {"success": True, "booking": booking.model_dump(mode="json")}
            case CancelBooking():
                booking = engine.transition_booking(
                    command.booking_id, command.user_id, BookingAction.CANCEL, command.reason
                )
                return {"success": True, "booking": booking.model_dump(mode="json")}
            case ConfirmBooking():
                booking = engine.transition_booking(
                    command.booking_id, command.user_id, BookingAction.CONFIRM
                )
                return {"success": True, "booking": booking.model_dump(mode="json")}
            case ListMyBookings():
                bookings = engine.list_customer_bookings(
                    command.user_id, command.status, command.upcoming
                )
                return {"success": True, "bookings": [b.model_dump(mode="json") for b in bookings]}
            case ListProviders():
                providers = engine.list_providers(command.business_id, command.service_id)
                return {
                    "success": True,
                    "providers": [p.model_dump(mode="json") for p in providers],
                }
            case SearchServices():
                services = engine.search_services(command.business_id, command.query)
                return {
                    "success": True,
                    "services": [s.model_dump(mode="json") for s in services],
                }
        raise InputValidationError(f"Unsupported tool command: {type(command).__name__}")

    def _error(self, exc: BookItError) -> ToolResult:
        code, message = exc.code, exc.message
        if self._mask_unauthorized and isinstance(exc, UnauthorizedError):
            # Do not reveal that the booking exists.
            code, message = "NotFound", "Booking not found"
        logger.info("Tool call failed: %s", code)
        return {
            "success": False,
            "error": code,
            "message": message,
            "retryable": exc.retryable,
        }
