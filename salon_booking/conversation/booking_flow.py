"""
WhatsApp booking conversation: one inbound message in, one reply out.

Each message is dispatched on the session's current step. Handlers work on
a copy of the stored session and the copy is only saved once the reply is
ready, so a store failure part-way through leaves the stored session as it
was and the customer can safely resend the same text.

Usage:
    flow = BookingConversation(offerings, schedule, bookings, InMemorySessionStore())
    reply = flow.handle_message("tenant-1", "+919876543210", "book")
    print(reply.reply_text)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional, Sequence

from salon_booking.config import settings
from salon_booking.conversation.matchers import (
    Matched,
    MatchResult,
    Unmatched,
    contains_keyword,
    first_match,
    is_exact_keyword,
    match_index,
    select_option,
)
from salon_booking.conversation.session_store import SessionStore
from salon_booking.conversation.state_machine import (
    ACTIVE_STEPS,
    BookingStateMachine,
    TransitionTrigger,
)
from salon_booking.logging_context import conversation_context
from salon_booking.prompts import reply_templates as replies
from salon_booking.schemas.conversation_schema import BookingStep, BotReply, ConversationSession
from salon_booking.schemas.schedule_schema import Offering, StaffMember, TimeSlot
from salon_booking.tools.availability import (
    AvailabilityResolver,
    merge_slot_times,
    staff_free_at,
)
from salon_booking.tools.booking import BookingCommitGuard, SlotConflictError
from salon_booking.tools.stores import BookingStore, OfferingStore, ScheduleStore
from salon_booking.tools.time_normalizer import format_date_label, parse_date, parse_time
from salon_booking.utils import (
    date_window,
    format_time_label,
    local_today,
    normalize_phone,
    redact_phone,
)

logger = logging.getLogger(__name__)

START_KEYWORDS = ("book", "booking", "appointment", "schedule", "reserve")
CANCEL_KEYWORDS = ("cancel", "stop", "quit")
RESTART_KEYWORDS = ("restart", "start over", "new booking")
AFFIRMATIVE = ("yes", "y", "yeah", "yep", "confirm", "confirmed", "ok", "okay", "proceed", "sure")
NEGATIVE = ("no", "n", "nope", "nah", "not", "don't", "dont")

StaffSlots = list[tuple[StaffMember, list[TimeSlot]]]


@dataclass
class _Outcome:
    """Reply produced by a step handler."""
    text: str
    options: list[str] = field(default_factory=list)
    booking_id: Optional[str] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _label(canonical: str) -> str:
    return format_time_label(time.fromisoformat(canonical))


class BookingConversation:
    """Per-customer booking state machine over injected stores."""

    def __init__(
        self,
        offering_store: OfferingStore,
        schedule_store: ScheduleStore,
        booking_store: BookingStore,
        session_store: SessionStore,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], datetime] = _utcnow,
        session_ttl: Optional[timedelta] = None,
        booking_window_days: Optional[int] = None,
    ) -> None:
        self._offerings = offering_store
        self._schedule = schedule_store
        self._sessions = session_store
        self._tz = tz or settings.business.tz
        self._clock = clock
        self._ttl = session_ttl or timedelta(minutes=settings.conversation.session_ttl_minutes)
        self._window_days = booking_window_days or settings.scheduling.booking_window_days
        self._resolver = AvailabilityResolver(schedule_store, booking_store, self._tz)
        self._guard = BookingCommitGuard(self._resolver, booking_store)

    @property
    def resolver(self) -> AvailabilityResolver:
        return self._resolver

    # ------------------------------------------------------------------ #
    # Public entry points
    # ------------------------------------------------------------------ #

    def handle_message(
        self,
        tenant_id: str,
        customer_phone: str,
        raw_text: str,
        customer_name: Optional[str] = None,
    ) -> BotReply:
        """Advance the customer's booking by one message. Never raises."""
        phone = normalize_phone(customer_phone)
        stored: Optional[ConversationSession] = None
        with conversation_context(f"{tenant_id}:{redact_phone(phone)}"):
            try:
                stored = self._sessions.get((tenant_id, phone))
                return self._dispatch(tenant_id, phone, raw_text, customer_name, stored)
            except Exception:
                logger.exception("Failed to handle message; session left unchanged")
                step = stored.step if stored is not None else BookingStep.IDLE
                return BotReply(reply_text=replies.TEMPORARILY_UNAVAILABLE, session_state=step)

    def get_session(self, tenant_id: str, customer_phone: str) -> Optional[ConversationSession]:
        """Current live session, or None if there is none or it has expired."""
        session = self._sessions.get((tenant_id, normalize_phone(customer_phone)))
        if session is None or session.is_expired(self._clock()):
            return None
        return session

    def offered_dates(self, now: Optional[datetime] = None) -> list[date]:
        """The rolling window of bookable calendar dates, starting today."""
        today = local_today(now or self._clock(), self._tz)
        return date_window(today, self._window_days)

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    def _dispatch(
        self,
        tenant_id: str,
        phone: str,
        raw_text: str,
        customer_name: Optional[str],
        stored: Optional[ConversationSession],
    ) -> BotReply:
        now = self._clock()
        text = raw_text.strip()

        notice: Optional[str] = None
        if stored is not None and (stored.is_expired(now) or stored.step not in ACTIVE_STEPS):
            if stored.is_expired(now) and stored.step in ACTIVE_STEPS:
                BookingStateMachine(stored.step).transition(TransitionTrigger.SESSION_EXPIRED)
                notice = replies.SESSION_EXPIRED
                logger.info("Session expired at step %s", stored.step.value)
            self._sessions.delete(stored.key)
            stored = None

        if len(text) > settings.conversation.max_input_length:
            step = stored.step if stored is not None else BookingStep.IDLE
            return BotReply(reply_text=replies.INPUT_TOO_LONG, session_state=step)

        if stored is None:
            return self._handle_idle(tenant_id, phone, text, customer_name, now, notice)

        session = stored.model_copy(deep=True)
        if customer_name:
            session.customer_name = customer_name
        machine = BookingStateMachine(session.step)

        if contains_keyword(text, CANCEL_KEYWORDS):
            machine.transition(TransitionTrigger.CANCEL_REQUESTED)
            outcome = _Outcome(replies.BOOKING_CANCELLED)
        elif contains_keyword(text, RESTART_KEYWORDS):
            outcome = self._restart(session, machine)
        else:
            handler = {
                BookingStep.SERVICE_SELECTION: self._on_service_selection,
                BookingStep.DATE_SELECTION: self._on_date_selection,
                BookingStep.TIME_SELECTION: self._on_time_selection,
                BookingStep.STAFF_SELECTION: self._on_staff_selection,
                BookingStep.CONFIRMATION: self._on_confirmation,
            }[session.step]
            outcome = handler(session, machine, text, now)

        session.step = machine.current_step
        if machine.is_terminal():
            session.clear_selections()
            self._sessions.delete(session.key)
            logger.info("Session closed at step %s", session.step.value)
        else:
            session.touch(now, self._ttl)
            self._sessions.save(session)

        return BotReply(
            reply_text=outcome.text,
            session_state=session.step,
            booking_id=outcome.booking_id,
            options=outcome.options,
        )

    # ------------------------------------------------------------------ #
    # Step handlers
    # ------------------------------------------------------------------ #

    def _handle_idle(
        self,
        tenant_id: str,
        phone: str,
        text: str,
        customer_name: Optional[str],
        now: datetime,
        notice: Optional[str],
    ) -> BotReply:
        prefix = f"{notice}\n\n" if notice else ""
        if not contains_keyword(text, START_KEYWORDS):
            return BotReply(
                reply_text=prefix + replies.build_greeting(), session_state=BookingStep.IDLE
            )

        offerings = self._offerings.list_active_offerings(tenant_id)
        if not offerings:
            return BotReply(reply_text=prefix + replies.NO_SERVICES, session_state=BookingStep.IDLE)

        machine = BookingStateMachine()
        machine.transition(TransitionTrigger.BOOK_REQUESTED)
        session = ConversationSession(
            tenant_id=tenant_id,
            customer_phone=phone,
            customer_name=customer_name,
            step=machine.current_step,
            created_at=now,
            updated_at=now,
            expires_at=now + self._ttl,
        )
        self._sessions.save(session)
        logger.info("Booking session started")
        return BotReply(
            reply_text=prefix + replies.build_service_menu(offerings),
            session_state=session.step,
            options=[o.name for o in offerings],
        )

    def _restart(self, session: ConversationSession, machine: BookingStateMachine) -> _Outcome:
        machine.transition(TransitionTrigger.RESTART_REQUESTED)
        session.clear_selections()
        offerings = self._offerings.list_active_offerings(session.tenant_id)
        return _Outcome(replies.build_service_menu(offerings), [o.name for o in offerings])

    def _on_service_selection(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        text: str,
        now: datetime,
    ) -> _Outcome:
        offerings = self._offerings.list_active_offerings(session.tenant_id)
        if not offerings:
            return _Outcome(replies.NO_SERVICES)

        result = select_option(text, offerings, name_of=lambda o: o.name)
        if not isinstance(result, Matched):
            return _Outcome(
                replies.build_service_menu(offerings, error_hint="I couldn't find that service."),
                [o.name for o in offerings],
            )

        offering = result.value
        session.service_id = offering.id
        machine.transition(TransitionTrigger.SERVICE_SELECTED)
        dates = self.offered_dates(now)
        return _Outcome(
            replies.build_date_menu(dates, offering),
            [format_date_label(d) for d in dates],
        )

    def _on_date_selection(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        text: str,
        now: datetime,
    ) -> _Outcome:
        offering = self._offering_for(session)
        if offering is None:
            return self._start_over(session, machine)

        dates = self.offered_dates(now)
        today = local_today(now, self._tz)

        def by_date_text(value: str, options: Sequence[date]) -> MatchResult[date]:
            resolved = parse_date(value, options, today)
            return Matched(resolved) if resolved is not None else Unmatched("no date")

        result = first_match(text, dates, [match_index, by_date_text])
        if not isinstance(result, Matched):
            return _Outcome(
                replies.build_date_menu(
                    dates, error_hint="Please select a valid date from the list."
                ),
                [format_date_label(d) for d in dates],
            )

        chosen = result.value
        slots = merge_slot_times(self._staff_slots(session, offering, chosen, now))
        if not slots:
            logger.info("No availability on %s", chosen)
            return _Outcome(
                replies.build_no_availability(chosen, dates),
                [format_date_label(d) for d in dates],
            )

        session.selected_date = chosen
        machine.transition(TransitionTrigger.DATE_SELECTED)
        return _Outcome(replies.build_slot_menu(slots, chosen), [s.label for s in slots])

    def _on_time_selection(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        text: str,
        now: datetime,
    ) -> _Outcome:
        offering = self._offering_for(session)
        on_date = session.selected_date
        if offering is None or on_date is None:
            return self._start_over(session, machine)

        staff_slots = self._staff_slots(session, offering, on_date, now)
        slots = merge_slot_times(staff_slots)
        if not slots:
            return self._date_sold_out(session, machine, on_date, now)

        def by_time_text(value: str, options: Sequence[TimeSlot]) -> MatchResult[TimeSlot]:
            canonical = parse_time(value, [s.canonical for s in options])
            for slot in options:
                if slot.canonical == canonical:
                    return Matched(slot)
            return Unmatched("no time")

        result = first_match(text, slots, [by_time_text])
        if not isinstance(result, Matched):
            result = match_index(text, slots)
        if not isinstance(result, Matched):
            return _Outcome(
                replies.build_slot_menu(
                    slots, on_date,
                    error_hint="Please select a valid time slot from the list above.",
                ),
                [s.label for s in slots],
            )

        slot = result.value
        session.selected_time = slot.canonical
        machine.transition(TransitionTrigger.TIME_SELECTED)
        staff = staff_free_at(staff_slots, slot.canonical)
        return _Outcome(replies.build_staff_menu(staff, slot.label), [s.name for s in staff])

    def _on_staff_selection(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        text: str,
        now: datetime,
    ) -> _Outcome:
        offering = self._offering_for(session)
        on_date, chosen_time = session.selected_date, session.selected_time
        if offering is None or on_date is None or chosen_time is None:
            return self._start_over(session, machine)

        staff_slots = self._staff_slots(session, offering, on_date, now)
        staff = staff_free_at(staff_slots, chosen_time)
        if not staff:
            return self._time_taken(session, machine, on_date, chosen_time, staff_slots, now)

        slot_label = next(
            s.label for _, slots in staff_slots for s in slots if s.canonical == chosen_time
        )
        result = select_option(text, staff, name_of=lambda s: s.name)
        if not isinstance(result, Matched):
            return _Outcome(
                replies.build_staff_menu(
                    staff, slot_label,
                    error_hint="Please select a valid staff member from the list above.",
                ),
                [s.name for s in staff],
            )

        member = result.value
        session.staff_id = member.id
        machine.transition(TransitionTrigger.STAFF_SELECTED)
        return _Outcome(
            replies.build_confirmation_summary(
                session.customer_name or settings.business.default_customer_name,
                offering,
                on_date,
                slot_label,
                member,
            ),
            ["yes", "cancel"],
        )

    def _on_confirmation(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        text: str,
        now: datetime,
    ) -> _Outcome:
        if contains_keyword(text, NEGATIVE):
            machine.transition(TransitionTrigger.CANCEL_REQUESTED)
            return _Outcome(replies.BOOKING_CANCELLED)
        if not (is_exact_keyword(text, AFFIRMATIVE) or contains_keyword(text, ("yes", "confirm"))):
            return _Outcome(replies.CONFIRM_PROMPT, ["yes", "cancel"])

        offering = self._offering_for(session)
        staff = self._staff_for(session)
        on_date, chosen_time = session.selected_date, session.selected_time
        if offering is None or staff is None or on_date is None or chosen_time is None:
            return self._start_over(session, machine)

        try:
            booking = self._guard.commit(session, offering, now=now)
        except SlotConflictError:
            staff_slots = self._staff_slots(session, offering, on_date, now)
            return self._time_taken(session, machine, on_date, chosen_time, staff_slots, now)

        machine.transition(TransitionTrigger.BOOKING_COMMITTED)
        slot_label = _label(chosen_time)
        return _Outcome(
            replies.build_booking_confirmed(
                booking.id,
                offering,
                on_date,
                slot_label,
                staff,
            ),
            booking_id=booking.id,
        )

    # ------------------------------------------------------------------ #
    # Shared helpers
    # ------------------------------------------------------------------ #

    def _offering_for(self, session: ConversationSession) -> Optional[Offering]:
        if session.service_id is None:
            return None
        offering = self._offerings.get_offering(session.tenant_id, session.service_id)
        if offering is None or not offering.is_active:
            return None
        return offering

    def _staff_for(self, session: ConversationSession) -> Optional[StaffMember]:
        if session.staff_id is None:
            return None
        staff = self._schedule.get_staff(session.staff_id)
        if staff is None or not staff.is_active or staff.tenant_id != session.tenant_id:
            return None
        return staff

    def _staff_slots(
        self,
        session: ConversationSession,
        offering: Offering,
        on_date: date,
        now: datetime,
    ) -> StaffSlots:
        return self._resolver.get_staff_slots(
            session.tenant_id, offering.id, on_date, offering.duration_minutes, not_before=now
        )

    def _start_over(
        self, session: ConversationSession, machine: BookingStateMachine
    ) -> _Outcome:
        """A stored selection no longer resolves, e.g. the service was deactivated."""
        logger.warning("Session selections no longer valid; restarting from services")
        outcome = self._restart(session, machine)
        outcome.text = f"{replies.SELECTION_UNAVAILABLE}\n\n{outcome.text}"
        return outcome

    def _date_sold_out(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        on_date: date,
        now: datetime,
    ) -> _Outcome:
        machine.transition(TransitionTrigger.DATE_SOLD_OUT)
        session.selected_date = None
        session.selected_time = None
        session.staff_id = None
        dates = self.offered_dates(now)
        return _Outcome(
            replies.build_no_availability(on_date, dates),
            [format_date_label(d) for d in dates],
        )

    def _time_taken(
        self,
        session: ConversationSession,
        machine: BookingStateMachine,
        on_date: date,
        chosen_time: str,
        staff_slots: StaffSlots,
        now: datetime,
    ) -> _Outcome:
        """The chosen time vanished: go back to time selection with a fresh list."""
        slots = merge_slot_times(staff_slots)
        if not slots:
            return self._date_sold_out(session, machine, on_date, now)
        machine.transition(TransitionTrigger.SLOT_CONFLICT)
        session.selected_time = None
        session.staff_id = None
        return _Outcome(
            replies.build_slot_conflict(
                slots, on_date, _label(chosen_time)
            ),
            [s.label for s in slots],
        )
