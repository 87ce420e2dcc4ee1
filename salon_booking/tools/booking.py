"""
Booking commit guard and dashboard status operations.

The commit guard is the only write path from the chat into the booking
table. It re-runs the availability resolver immediately before inserting,
which closes the window between "slot shown" and "slot confirmed" for all
but truly simultaneous commits. That remaining race is accepted: staff see
an over-booked slot on the dashboard and resolve it by hand.
"""

import logging
from datetime import datetime
from typing import Optional

from salon_booking.config import settings
from salon_booking.schemas.booking_schema import Booking, BookingRequest, BookingStatus
from salon_booking.schemas.conversation_schema import ConversationSession
from salon_booking.schemas.schedule_schema import Offering, TimeSlot
from salon_booking.tools.availability import AvailabilityResolver
from salon_booking.tools.stores import BookingNotFoundError, BookingStore, InvalidStatusChangeError
from salon_booking.utils import redact_phone, to_instant

logger = logging.getLogger(__name__)


class SlotConflictError(Exception):
    """The chosen slot was taken between display and confirmation."""

    def __init__(self, message: str, fresh_slots: list[TimeSlot]) -> None:
        super().__init__(message)
        self.fresh_slots = fresh_slots


class IncompleteSessionError(ValueError):
    """Raised when a session reaches the commit guard without every selection."""


class BookingCommitGuard:
    """Re-validates a confirmed session and writes exactly one booking."""

    def __init__(self, resolver: AvailabilityResolver, booking_store: BookingStore) -> None:
        self._resolver = resolver
        self._bookings = booking_store

    def commit(
        self,
        session: ConversationSession,
        offering: Offering,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Turn a confirmed session into a persisted booking.

        Raises:
            IncompleteSessionError: If service, date, time or staff is missing.
            SlotConflictError: If the chosen time is no longer free for the staff member.
        """
        missing = [
            name
            for name, value in [
                ("service", session.service_id),
                ("date", session.selected_date),
                ("time", session.selected_time),
                ("staff", session.staff_id),
            ]
            if not value
        ]
        if missing:
            raise IncompleteSessionError(
                f"Cannot commit booking - missing selections: {', '.join(missing)}."
            )

        fresh = self._resolver.get_available_slots(
            session.staff_id,  # type: ignore[arg-type]
            session.selected_date,  # type: ignore[arg-type]
            offering.duration_minutes,
            not_before=now,
        )
        chosen = next((s for s in fresh if s.canonical == session.selected_time), None)
        if chosen is None:
            logger.warning(
                "Slot conflict for %s: staff=%s %s %s",
                redact_phone(session.customer_phone),
                session.staff_id,
                session.selected_date,
                session.selected_time,
            )
            raise SlotConflictError(
                f"{session.selected_date} {session.selected_time} is no longer available",
                fresh_slots=fresh,
            )

        request = BookingRequest(
            tenant_id=session.tenant_id,
            customer_phone=session.customer_phone,
            customer_name=session.customer_name or settings.business.default_customer_name,
            service_id=offering.id,
            staff_id=session.staff_id,
            scheduled_at=to_instant(chosen.on_date, chosen.start, self._resolver.tz),
            duration_minutes=offering.duration_minutes,
            amount=offering.price,
            currency=settings.business.currency,
            notes=settings.business.booking_notes,
        )
        booking = self._bookings.insert_booking(request)
        logger.info(
            "Booking %s committed for %s on %s at %s",
            booking.id, redact_phone(session.customer_phone),
            session.selected_date, session.selected_time,
        )
        return booking


def _get_or_raise(store: BookingStore, tenant_id: str, booking_id: str) -> Booking:
    booking = store.get_booking(tenant_id, booking_id)
    if booking is None:
        raise BookingNotFoundError(f"Booking {booking_id} not found")
    return booking


def confirm_booking(store: BookingStore, tenant_id: str, booking_id: str) -> Booking:
    """Dashboard action: mark a pending booking confirmed."""
    booking = _get_or_raise(store, tenant_id, booking_id)
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidStatusChangeError("Cannot confirm a cancelled booking")
    if booking.status == BookingStatus.CONFIRMED:
        return booking
    updated = store.update_status(tenant_id, booking_id, BookingStatus.CONFIRMED)
    logger.info("Booking confirmed: %s", booking_id)
    return updated


def cancel_booking(store: BookingStore, tenant_id: str, booking_id: str) -> Booking:
    """Dashboard action: cancel a booking, freeing its slot on the next resolver read."""
    booking = _get_or_raise(store, tenant_id, booking_id)
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidStatusChangeError("Booking is already cancelled")
    if booking.status == BookingStatus.COMPLETED:
        raise InvalidStatusChangeError("Cannot cancel a completed booking")
    updated = store.update_status(tenant_id, booking_id, BookingStatus.CANCELLED)
    logger.info("Booking cancelled: %s", booking_id)
    return updated


def complete_booking(store: BookingStore, tenant_id: str, booking_id: str) -> Booking:
    """Dashboard action: mark an attended appointment completed."""
    booking = _get_or_raise(store, tenant_id, booking_id)
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidStatusChangeError("Cannot complete a cancelled booking")
    updated = store.update_status(tenant_id, booking_id, BookingStatus.COMPLETED)
    logger.info("Booking completed: %s", booking_id)
    return updated
