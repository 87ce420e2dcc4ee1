"""Tests for the booking conversation state machine."""

import pytest

from salon_booking.conversation.state_machine import (
    ACTIVE_STEPS,
    BookingStateMachine,
    InvalidTransitionError,
    TransitionTrigger,
)
from salon_booking.schemas.conversation_schema import BookingStep

HAPPY_PATH = [
    (TransitionTrigger.BOOK_REQUESTED, BookingStep.SERVICE_SELECTION),
    (TransitionTrigger.SERVICE_SELECTED, BookingStep.DATE_SELECTION),
    (TransitionTrigger.DATE_SELECTED, BookingStep.TIME_SELECTION),
    (TransitionTrigger.TIME_SELECTED, BookingStep.STAFF_SELECTION),
    (TransitionTrigger.STAFF_SELECTED, BookingStep.CONFIRMATION),
    (TransitionTrigger.BOOKING_COMMITTED, BookingStep.COMPLETED),
]


def advance_to(machine: BookingStateMachine, step: BookingStep) -> None:
    for trigger, target in HAPPY_PATH:
        if machine.current_step == step:
            return
        machine.transition(trigger)
    assert machine.current_step == step


class TestInitialStep:
    def test_starts_idle(self, state_machine):
        assert state_machine.current_step == BookingStep.IDLE

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()

    def test_only_booking_starts_a_session(self, state_machine):
        assert state_machine.get_valid_triggers() == [TransitionTrigger.BOOK_REQUESTED]

    def test_resume_from_stored_step(self):
        machine = BookingStateMachine(BookingStep.TIME_SELECTION)
        assert machine.current_step == BookingStep.TIME_SELECTION


class TestHappyPath:
    def test_full_path(self, state_machine):
        for trigger, expected in HAPPY_PATH:
            assert state_machine.transition(trigger) == expected
        assert state_machine.is_terminal()

    def test_advance_to_confirmation(self, state_machine):
        advance_to(state_machine, BookingStep.CONFIRMATION)
        assert state_machine.get_valid_triggers()[0] == TransitionTrigger.BOOKING_COMMITTED

    def test_steps_cannot_be_skipped(self, state_machine):
        state_machine.transition(TransitionTrigger.BOOK_REQUESTED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(TransitionTrigger.TIME_SELECTED)

    def test_commit_only_from_confirmation(self, state_machine):
        advance_to(state_machine, BookingStep.STAFF_SELECTION)
        assert TransitionTrigger.BOOKING_COMMITTED not in state_machine.get_valid_triggers()

    def test_error_lists_valid_triggers(self, state_machine):
        with pytest.raises(InvalidTransitionError, match="book_requested"):
            state_machine.transition(TransitionTrigger.CANCEL_REQUESTED)


class TestConflictRecovery:
    def test_conflict_at_confirmation_returns_to_time_selection(self, state_machine):
        advance_to(state_machine, BookingStep.CONFIRMATION)
        assert state_machine.transition(TransitionTrigger.SLOT_CONFLICT) == BookingStep.TIME_SELECTION

    def test_sold_out_at_confirmation_returns_to_date_selection(self, state_machine):
        advance_to(state_machine, BookingStep.CONFIRMATION)
        assert state_machine.transition(TransitionTrigger.DATE_SOLD_OUT) == BookingStep.DATE_SELECTION

    def test_conflict_at_staff_selection(self, state_machine):
        advance_to(state_machine, BookingStep.STAFF_SELECTION)
        assert state_machine.transition(TransitionTrigger.SLOT_CONFLICT) == BookingStep.TIME_SELECTION

    def test_sold_out_at_time_selection(self, state_machine):
        advance_to(state_machine, BookingStep.TIME_SELECTION)
        assert state_machine.transition(TransitionTrigger.DATE_SOLD_OUT) == BookingStep.DATE_SELECTION

    def test_conflict_never_completes(self, state_machine):
        advance_to(state_machine, BookingStep.CONFIRMATION)
        state_machine.transition(TransitionTrigger.SLOT_CONFLICT)
        assert not state_machine.is_terminal()


class TestCancelRestartExpiry:
    @pytest.mark.parametrize("step", ACTIVE_STEPS)
    def test_cancel_from_every_live_step(self, step):
        machine = BookingStateMachine(step)
        assert machine.transition(TransitionTrigger.CANCEL_REQUESTED) == BookingStep.CANCELLED
        assert machine.is_terminal()

    @pytest.mark.parametrize("step", ACTIVE_STEPS)
    def test_restart_from_every_live_step(self, step):
        machine = BookingStateMachine(step)
        assert machine.transition(TransitionTrigger.RESTART_REQUESTED) == BookingStep.SERVICE_SELECTION

    @pytest.mark.parametrize("step", ACTIVE_STEPS)
    def test_expiry_from_every_live_step(self, step):
        machine = BookingStateMachine(step)
        assert machine.transition(TransitionTrigger.SESSION_EXPIRED) == BookingStep.IDLE

    @pytest.mark.parametrize("step", [BookingStep.COMPLETED, BookingStep.CANCELLED])
    def test_terminal_steps_have_no_exits(self, step):
        machine = BookingStateMachine(step)
        assert machine.get_valid_triggers() == []

    def test_idle_cannot_be_cancelled(self, state_machine):
        assert TransitionTrigger.CANCEL_REQUESTED not in state_machine.get_valid_triggers()
