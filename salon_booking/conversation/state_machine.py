"""
Finite state machine for the WhatsApp booking conversation.

Defines the booking steps and explicit transitions with triggers. Every
message either fires one declared transition or leaves the step unchanged,
so a session can never jump to a step it has no path to.

Usage:
    sm = BookingStateMachine()
    sm.transition(TransitionTrigger.BOOK_REQUESTED)
    assert sm.current_step == BookingStep.SERVICE_SELECTION
"""

import logging
from dataclasses import dataclass
from enum import Enum

from salon_booking.schemas.conversation_schema import BookingStep

logger = logging.getLogger(__name__)


class TransitionTrigger(str, Enum):
    """Events that cause step transitions."""
    BOOK_REQUESTED = "book_requested"
    SERVICE_SELECTED = "service_selected"
    DATE_SELECTED = "date_selected"
    TIME_SELECTED = "time_selected"
    STAFF_SELECTED = "staff_selected"
    BOOKING_COMMITTED = "booking_committed"
    SLOT_CONFLICT = "slot_conflict"
    DATE_SOLD_OUT = "date_sold_out"
    CANCEL_REQUESTED = "cancel_requested"
    RESTART_REQUESTED = "restart_requested"
    SESSION_EXPIRED = "session_expired"


@dataclass
class Transition:
    """A single valid step transition."""
    from_step: BookingStep
    to_step: BookingStep
    trigger: TransitionTrigger


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


TERMINAL_STEPS = frozenset({BookingStep.COMPLETED, BookingStep.CANCELLED})

# Steps where a session is live and cancel / restart / expiry apply.
ACTIVE_STEPS = (
    BookingStep.SERVICE_SELECTION,
    BookingStep.DATE_SELECTION,
    BookingStep.TIME_SELECTION,
    BookingStep.STAFF_SELECTION,
    BookingStep.CONFIRMATION,
)


class BookingStateMachine:
    """
    Deterministic state machine controlling the booking conversation.

    Every transition must be explicitly defined. A trigger with no matching
    transition from the current step is rejected with the list of triggers
    that are allowed.
    """

    TRANSITIONS: list[Transition] = [
        # --- Happy path ---
        Transition(BookingStep.IDLE, BookingStep.SERVICE_SELECTION,
                   TransitionTrigger.BOOK_REQUESTED),
        Transition(BookingStep.SERVICE_SELECTION, BookingStep.DATE_SELECTION,
                   TransitionTrigger.SERVICE_SELECTED),
        Transition(BookingStep.DATE_SELECTION, BookingStep.TIME_SELECTION,
                   TransitionTrigger.DATE_SELECTED),
        Transition(BookingStep.TIME_SELECTION, BookingStep.STAFF_SELECTION,
                   TransitionTrigger.TIME_SELECTED),
        Transition(BookingStep.STAFF_SELECTION, BookingStep.CONFIRMATION,
                   TransitionTrigger.STAFF_SELECTED),
        Transition(BookingStep.CONFIRMATION, BookingStep.COMPLETED,
                   TransitionTrigger.BOOKING_COMMITTED),

        # --- Commit-time conflict ---
        Transition(BookingStep.CONFIRMATION, BookingStep.TIME_SELECTION,
                   TransitionTrigger.SLOT_CONFLICT),
        Transition(BookingStep.CONFIRMATION, BookingStep.DATE_SELECTION,
                   TransitionTrigger.DATE_SOLD_OUT),

        # --- Slots vanished while choosing ---
        Transition(BookingStep.TIME_SELECTION, BookingStep.DATE_SELECTION,
                   TransitionTrigger.DATE_SOLD_OUT),
        Transition(BookingStep.STAFF_SELECTION, BookingStep.TIME_SELECTION,
                   TransitionTrigger.SLOT_CONFLICT),
        Transition(BookingStep.STAFF_SELECTION, BookingStep.DATE_SELECTION,
                   TransitionTrigger.DATE_SOLD_OUT),
    ] + [
        # --- Cancel, restart and expiry from every live step ---
        Transition(step, to_step, trigger)
        for step in ACTIVE_STEPS
        for to_step, trigger in (
            (BookingStep.CANCELLED, TransitionTrigger.CANCEL_REQUESTED),
            (BookingStep.SERVICE_SELECTION, TransitionTrigger.RESTART_REQUESTED),
            (BookingStep.IDLE, TransitionTrigger.SESSION_EXPIRED),
        )
    ]

    def __init__(self, initial_step: BookingStep = BookingStep.IDLE) -> None:
        self._current_step = initial_step

    @property
    def current_step(self) -> BookingStep:
        return self._current_step

    def transition(self, trigger: TransitionTrigger) -> BookingStep:
        """
        Execute a step transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new booking step.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_step == self._current_step and t.trigger == trigger:
                old_step = self._current_step
                self._current_step = t.to_step
                logger.debug(
                    "Step transition: %s -> %s (trigger: %s)",
                    old_step.value, self._current_step.value, trigger.value,
                )
                return self._current_step

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_step.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == self._current_step]

    def is_terminal(self) -> bool:
        """Check if the conversation has reached a terminal step."""
        return self._current_step in TERMINAL_STEPS
