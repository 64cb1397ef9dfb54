"""Booking and availability data models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from bookit.utils import utcnow


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


# Only these statuses occupy a provider's time.
COMMITTED_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED}
)


class ConfirmationType(str, Enum):
    AUTO = "Auto"
    MANUAL = "Manual"


class CancelledBy(str, Enum):
    CUSTOMER = "Customer"
    PROVIDER = "Provider"


class BookingAction(str, Enum):
    CONFIRM = "Confirm"
    CANCEL = "Cancel"


class Booking(BaseModel):
    """A customer's reservation of a provider's time."""
    id: str
    business_id: str
    provider_id: str
    customer_id: str
    service_id: str
    start: datetime
    end: datetime
    status: BookingStatus
    confirmation_type: ConfirmationType
    reminder_sent_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[CancelledBy] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_committed(self) -> bool:
        return self.status in COMMITTED_STATUSES


class AvailableSlot(BaseModel):
    """An open slot tagged with the provider who can take it."""
    start: datetime
    end: datetime
    provider_id: str
    provider_name: str


class AvailabilityResult(BaseModel):
    """Availability search result, keyed by ISO date in the business timezone."""
    business_id: str
    service_id: str
    service_name: str
    duration_minutes: int
    availability: dict[str, list[AvailableSlot]] = Field(default_factory=dict)

    def slot_count(self) -> int:
        return sum(len(slots) for slots in self.availability.values())
