from salon_booking.conversation.booking_flow import BookingConversation
from salon_booking.conversation.session_store import InMemorySessionStore, SessionStore
from salon_booking.conversation.state_machine import (
    BookingStateMachine,
    InvalidTransitionError,
    TransitionTrigger,
)

__all__ = [
    "BookingConversation",
    "BookingStateMachine",
    "InvalidTransitionError",
    "TransitionTrigger",
    "SessionStore",
    "InMemorySessionStore",
]
