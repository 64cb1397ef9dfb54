"""Business, service, and provider records consumed by the scheduling core."""

from decimal import Decimal
from typing import Optional

import pytz
from pydantic import BaseModel, Field, field_validator

from bookit.config import settings


class Business(BaseModel):
    """Tenant settings that influence booking and reminders."""
    id: str
    name: str
    slug: Optional[str] = None
    timezone: str = Field(default_factory=lambda: settings.scheduling.default_timezone)
    auto_confirm_bookings: bool = False
    reminder_lead_minutes: int = Field(
        default_factory=lambda: settings.scheduling.default_reminder_lead_minutes, ge=1
    )
    is_active: bool = True

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        if value not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {value!r}")
        return value


class Service(BaseModel):
    """A bookable service. Duration is the only input scheduling needs."""
    id: str
    business_id: str
    name: str
    duration_minutes: int = Field(gt=0)
    price: Decimal = Decimal("0")
    currency: str = "USD"
    is_active: bool = True


class Provider(BaseModel):
    """A staff member whose time is booked. ``user_id`` is their login identity."""
    id: str
    business_id: str
    user_id: Optional[str] = None
    display_name: str
    is_active: bool = True


class ProviderOffering(BaseModel):
    """Asserts that a provider performs a service."""
    provider_id: str
    service_id: str
