"""Provider schedule models: recurring weekly blocks, date overrides, intervals."""

import datetime as dt
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bookit.utils import is_aware, parse_clock_time


def _check_clock(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    parse_clock_time(value)
    return value


class WeeklyScheduleBlock(BaseModel):
    """Recurring working hours for one weekday (0=Sunday .. 6=Saturday)."""

    provider_id: str
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    available: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, value: Optional[str]) -> Optional[str]:
        return _check_clock(value)

    @model_validator(mode="after")
    def check_start_before_end(self) -> "WeeklyScheduleBlock":
        if parse_clock_time(self.start_time) >= parse_clock_time(self.end_time):
            raise ValueError(
                f"start_time {self.start_time} must be before end_time {self.end_time}"
            )
        return self

    @property
    def start(self) -> dt.time:
        return parse_clock_time(self.start_time)

    @property
    def end(self) -> dt.time:
        return parse_clock_time(self.end_time)


class DateOverride(BaseModel):
    """
    Date-specific exception to a provider's weekly hours.

    ``blocked=True`` closes the whole day whatever the times say. A
    non-blocked override with both times replaces the day's window.
    """

    provider_id: str
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    blocked: bool = True
    reason: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, value: Optional[str]) -> Optional[str]:
        return _check_clock(value)

    @model_validator(mode="after")
    def check_times_paired(self) -> "DateOverride":
        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("start_time and end_time must be given together")
        if self.start_time is not None and self.end_time is not None:
            if parse_clock_time(self.start_time) >= parse_clock_time(self.end_time):
                raise ValueError(
                    f"start_time {self.start_time} must be before end_time {self.end_time}"
                )
        return self

    @property
    def has_custom_hours(self) -> bool:
        return not self.blocked and self.start_time is not None and self.end_time is not None


class TimeInterval(BaseModel):
    """Half-open span of time between two timezone-aware instants."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_bounds(self) -> "TimeInterval":
        if not (is_aware(self.start) and is_aware(self.end)):
            raise ValueError("interval bounds must be timezone-aware")
        if self.start >= self.end:
            raise ValueError("interval start must be before end")
        return self
