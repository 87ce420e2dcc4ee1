"""
Centralized configuration with environment variable overrides.

Business identity, scheduling granularity, and session lifetime are
configurable here. Nothing is hardcoded in the conversation or tool logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from salon_booking.logging_context import build_log_handler

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


@dataclass(frozen=True)
class BusinessConfig:
    """Tenant-facing business settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Bella Salon")
    timezone: str = os.getenv("BUSINESS_TIMEZONE", "Asia/Kolkata")
    currency: str = os.getenv("CURRENCY", "INR")
    currency_symbol: str = os.getenv("CURRENCY_SYMBOL", "₹")
    default_customer_name: str = os.getenv("DEFAULT_CUSTOMER_NAME", "WhatsApp Customer")
    booking_notes: str = os.getenv("BOOKING_NOTES", "Booked via WhatsApp Bot")

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class SchedulingConfig:
    """Slot generation and booking window settings."""

    slot_interval_minutes: int = _safe_int("SLOT_INTERVAL_MINUTES", "30")
    booking_window_days: int = _safe_int("BOOKING_WINDOW_DAYS", "7")
    default_max_appointments: int = _safe_int("DEFAULT_MAX_APPOINTMENTS", "1")


@dataclass(frozen=True)
class ConversationConfig:
    """Chat session lifetime and input limits."""

    session_ttl_minutes: int = _safe_int("SESSION_TTL_MINUTES", "30")
    max_input_length: int = _safe_int("MAX_INPUT_LENGTH", "500")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    conversation: ConversationConfig = field(default_factory=ConversationConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    try:
        ZoneInfo(config.business.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"BUSINESS_TIMEZONE is not a known IANA zone: {config.business.timezone!r}"
        ) from None

    interval = config.scheduling.slot_interval_minutes
    if interval < 5 or 60 % interval != 0:
        raise ValueError(
            f"SLOT_INTERVAL_MINUTES must be >= 5 and divide 60, got {interval}"
        )
    if config.scheduling.booking_window_days < 1:
        raise ValueError(
            f"BOOKING_WINDOW_DAYS must be >= 1, got {config.scheduling.booking_window_days}"
        )
    if config.scheduling.default_max_appointments < 1:
        raise ValueError(
            "DEFAULT_MAX_APPOINTMENTS must be >= 1, "
            f"got {config.scheduling.default_max_appointments}"
        )
    if config.conversation.session_ttl_minutes < 1:
        raise ValueError(
            f"SESSION_TTL_MINUTES must be >= 1, got {config.conversation.session_ttl_minutes}"
        )
    if config.conversation.max_input_length < 1:
        raise ValueError(
            f"MAX_INPUT_LENGTH must be >= 1, got {config.conversation.max_input_length}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        handlers=[build_log_handler()],
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
