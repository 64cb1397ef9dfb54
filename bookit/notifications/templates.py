"""Reminder content rendering and the default dispatch sink.

Real delivery (SMS, email, web chat) lives outside the scheduling core and
plugs in through ``NotificationDispatcher``.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from bookit.schemas.booking_schema import Booking
from bookit.utils import get_tz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderContext:
    """Everything a reminder message needs to mention."""
    provider_name: str
    service_name: str
    business_name: str
    start: datetime
    timezone: str


def format_local_time(start: datetime, timezone: str) -> str:
    """Render an instant in the business timezone, e.g. ``Mon, Mar 16, 10:00 AM``."""
    local = start.astimezone(get_tz(timezone))
    return local.strftime("%a, %b %d, %I:%M %p").replace(" 0", " ")


def render_reminder(context: ReminderContext) -> str:
    when = format_local_time(context.start, context.timezone)
    return (
        f"Reminder: You have {context.service_name} with {context.provider_name} "
        f"coming up!\n{when}\n{context.business_name}"
    )


class ReminderRenderer(Protocol):
    def __call__(self, context: ReminderContext) -> str: ...


class NotificationDispatcher(Protocol):
    def send(self, booking: Booking, content: str) -> None:
        """Deliver ``content`` for ``booking``. Raise on failure."""
        ...


@dataclass
class LoggingDispatcher:
    """Dispatcher that only logs and keeps an outbox. Used in dev and tests."""

    outbox: list[tuple[str, str]] = field(default_factory=list)

    def send(self, booking: Booking, content: str) -> None:
        self.outbox.append((booking.id, content))
        logger.info("Reminder for booking %s to customer %s:\n%s",
                    booking.id, booking.customer_id, content)
