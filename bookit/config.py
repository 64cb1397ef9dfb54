"""
Centralized configuration with environment variable overrides.

Search limits, timezone defaults, and reminder sweep settings are
configurable here. Nothing is hardcoded in scheduling or booking logic.
"""

import logging
import os
from dataclasses import dataclass, field

import pytz
from dotenv import load_dotenv

from bookit.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class SchedulingConfig:
    """Availability search and timezone settings."""

    default_search_days: int = _safe_int("DEFAULT_SEARCH_DAYS", "7")
    max_search_days: int = _safe_int("MAX_SEARCH_DAYS", "60")
    default_timezone: str = os.getenv("DEFAULT_TIMEZONE", "UTC")
    default_reminder_lead_minutes: int = _safe_int("DEFAULT_REMINDER_LEAD_MINUTES", "60")


@dataclass(frozen=True)
class ReminderConfig:
    """Reminder sweep cadence and retry cap."""

    sweep_interval_seconds: float = _safe_float("REMINDER_SWEEP_INTERVAL_SECONDS", "300")
    max_attempts: int = _safe_int("REMINDER_MAX_ATTEMPTS", "0")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "bookit-scheduling")
    mask_unauthorized: bool = os.getenv("MASK_UNAUTHORIZED", "true").lower() in ("1", "true", "yes")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    scheduling = config.scheduling
    if scheduling.default_search_days < 1:
        raise ValueError(
            f"DEFAULT_SEARCH_DAYS must be >= 1, got {scheduling.default_search_days}"
        )
    if scheduling.max_search_days < scheduling.default_search_days:
        raise ValueError(
            "MAX_SEARCH_DAYS must be >= DEFAULT_SEARCH_DAYS, "
            f"got {scheduling.max_search_days}"
        )
    if scheduling.default_timezone not in pytz.all_timezones_set:
        raise ValueError(
            f"DEFAULT_TIMEZONE is not a known timezone: {scheduling.default_timezone!r}"
        )
    if scheduling.default_reminder_lead_minutes < 1:
        raise ValueError(
            "DEFAULT_REMINDER_LEAD_MINUTES must be >= 1, "
            f"got {scheduling.default_reminder_lead_minutes}"
        )
    if config.reminders.sweep_interval_seconds <= 0:
        raise ValueError(
            "REMINDER_SWEEP_INTERVAL_SECONDS must be > 0, "
            f"got {config.reminders.sweep_interval_seconds}"
        )
    if config.reminders.max_attempts < 0:
        raise ValueError(
            f"REMINDER_MAX_ATTEMPTS must be >= 0, got {config.reminders.max_attempts}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Records from plain loggers still need request_id for the format above.
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
