"""Tests for configuration loading and validation."""

import pytest

from salon_booking.config import (
    AppConfig,
    BusinessConfig,
    ConversationConfig,
    SchedulingConfig,
    _validate_config,
)


def build_config(**sections) -> AppConfig:
    """Build an AppConfig bypassing the frozen dataclass defaults."""
    config = AppConfig.__new__(AppConfig)
    object.__setattr__(config, "business", sections.get("business", BusinessConfig()))
    object.__setattr__(config, "scheduling", sections.get("scheduling", SchedulingConfig()))
    object.__setattr__(config, "conversation", sections.get("conversation", ConversationConfig()))
    object.__setattr__(config, "log_level", "INFO")
    return config


def scheduling(**overrides) -> SchedulingConfig:
    values = {
        "slot_interval_minutes": 30,
        "booking_window_days": 7,
        "default_max_appointments": 1,
    }
    values.update(overrides)
    config = SchedulingConfig.__new__(SchedulingConfig)
    for key, value in values.items():
        object.__setattr__(config, key, value)
    return config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_unknown_timezone(self):
        business = BusinessConfig.__new__(BusinessConfig)
        for key, value in vars(BusinessConfig()).items():
            object.__setattr__(business, key, value)
        object.__setattr__(business, "timezone", "Mars/Olympus_Mons")

        with pytest.raises(ValueError, match="BUSINESS_TIMEZONE"):
            _validate_config(build_config(business=business))

    @pytest.mark.parametrize("interval", [0, 7, 45])
    def test_slot_interval_must_divide_an_hour(self, interval):
        with pytest.raises(ValueError, match="SLOT_INTERVAL_MINUTES"):
            _validate_config(build_config(scheduling=scheduling(slot_interval_minutes=interval)))

    @pytest.mark.parametrize("interval", [5, 15, 20, 30, 60])
    def test_valid_slot_intervals(self, interval):
        _validate_config(build_config(scheduling=scheduling(slot_interval_minutes=interval)))

    def test_booking_window_at_least_one_day(self):
        with pytest.raises(ValueError, match="BOOKING_WINDOW_DAYS"):
            _validate_config(build_config(scheduling=scheduling(booking_window_days=0)))

    def test_max_appointments_at_least_one(self):
        with pytest.raises(ValueError, match="DEFAULT_MAX_APPOINTMENTS"):
            _validate_config(build_config(scheduling=scheduling(default_max_appointments=0)))

    def test_session_ttl_positive(self):
        conversation = ConversationConfig.__new__(ConversationConfig)
        object.__setattr__(conversation, "session_ttl_minutes", 0)
        object.__setattr__(conversation, "max_input_length", 500)

        with pytest.raises(ValueError, match="SESSION_TTL_MINUTES"):
            _validate_config(build_config(conversation=conversation))

    def test_safe_int_parsing(self):
        from salon_booking.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from salon_booking.config import _safe_int

        monkeypatch.setenv("SALON_TEST_INT", "thirty")
        with pytest.raises(ValueError, match="SALON_TEST_INT"):
            _safe_int("SALON_TEST_INT", "30")

    def test_business_tz(self):
        assert BusinessConfig().tz.key == BusinessConfig().timezone
