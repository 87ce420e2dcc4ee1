"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_conversation_schema(self):
        from salon_booking.schemas.conversation_schema import BookingStep, BotReply
        assert BookingStep.IDLE == "idle"
        assert BotReply(reply_text="hi", session_state=BookingStep.IDLE).options == []

    def test_import_booking_schema(self):
        from salon_booking.schemas.booking_schema import ACTIVE_STATUSES, BookingStatus
        assert BookingStatus.CANCELLED not in ACTIVE_STATUSES

    def test_import_schedule_schema(self):
        from salon_booking.schemas.schedule_schema import (
            Offering, StaffAvailabilityRule, StaffMember, TimeOff, TimeSlot,
        )
        assert TimeSlot is not None


class TestConversationImports:
    def test_import_package(self):
        from salon_booking.conversation import (
            BookingConversation, BookingStateMachine, InMemorySessionStore,
        )
        assert BookingStateMachine().current_step.value == "idle"
        assert len(InMemorySessionStore()) == 0

    def test_import_matchers(self):
        from salon_booking.conversation.matchers import Matched, Unmatched, select_option
        assert callable(select_option)


class TestToolImports:
    def test_import_availability(self):
        from salon_booking.tools.availability import AvailabilityResolver, merge_slot_times
        assert callable(merge_slot_times)

    def test_import_booking(self):
        from salon_booking.tools.booking import (
            BookingCommitGuard, cancel_booking, complete_booking, confirm_booking,
        )
        assert callable(cancel_booking)

    def test_import_time_normalizer(self):
        from salon_booking.tools.time_normalizer import parse_date, parse_time
        assert parse_time("9 am", ["09:00"]) == "09:00"

    def test_seed_data(self):
        from salon_booking.tools.seed_data import DEMO_TENANT_ID, build_demo_stores
        stores = build_demo_stores()
        assert len(stores.offerings.list_active_offerings(DEMO_TENANT_ID)) == 5


class TestConfigImport:
    def test_import_config(self):
        from salon_booking.config import settings
        assert settings.business.name is not None
        assert settings.scheduling.slot_interval_minutes >= 5
        assert settings.conversation.session_ttl_minutes >= 1


class TestConsoleDemo:
    def test_console_session_imports(self):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        assert session.trace == []

    def test_cancel_scenario(self, capsys):
        from console_demo import ConsoleSession
        session = ConsoleSession()
        session.run_scenario("cancel")
        assert session.trace[-1] == "cancelled"
        assert "cancel" in capsys.readouterr().out.lower()
