"""Reply text construction for each booking step.

Business-specific values are injected from configuration, not hardcoded.
Menus are numbered from 1 so customers can answer with the position.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from salon_booking.config import settings
from salon_booking.schemas.schedule_schema import Offering, StaffMember, TimeSlot
from salon_booking.tools.time_normalizer import format_date_label

_biz = settings.business

TEMPORARILY_UNAVAILABLE = (
    "Sorry, booking is temporarily unavailable. Please try again in a moment."
)
NO_SERVICES = "I'm sorry, no services are currently available. Please contact us directly."
BOOKING_CANCELLED = (
    "Your booking has been cancelled. Type 'book' whenever you'd like to start again."
)
SESSION_EXPIRED = "Your previous booking chat timed out, so let's start fresh."
INPUT_TOO_LONG = "That message is a bit long. Please reply with just your choice."
SELECTION_UNAVAILABLE = "Sorry, one of your selections is no longer available."
CONFIRM_PROMPT = (
    "Please type 'yes' or 'confirm' to book the appointment, or 'no' to cancel this booking."
)

# Category keywords checked in order; the first hit picks the emoji.
SERVICE_EMOJIS: list[tuple[tuple[str, ...], str]] = [
    (("hair", "cut", "color", "colour", "style"), "💇‍♀️"),
    (("nail", "manicure", "pedicure", "polish"), "💅"),
    (("facial", "skin", "treatment"), "✨"),
    (("massage", "spa"), "🧘‍♀️"),
    (("makeup", "bridal", "party"), "💄"),
    (("wax", "threading"), "🪒"),
]
DEFAULT_EMOJI = "✨"


def service_emoji(name: str, category: Optional[str] = None) -> str:
    text = f"{name} {category or ''}".lower()
    for keywords, emoji in SERVICE_EMOJIS:
        if any(k in text for k in keywords):
            return emoji
    return DEFAULT_EMOJI


def format_price(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"{_biz.currency_symbol}{int(amount):,}"
    return f"{_biz.currency_symbol}{amount:,.2f}"


def build_greeting() -> str:
    return (
        f"Hi! 👋 Welcome to {_biz.name}! "
        "To book an appointment, please type 'book appointment' or 'book'."
    )


def build_service_menu(offerings: list[Offering], error_hint: Optional[str] = None) -> str:
    """Numbered service list, optionally prefixed with why the last reply failed."""
    lines = [
        f"{i}. {service_emoji(o.name, o.category)} {o.name} – {format_price(o.price)}"
        for i, o in enumerate(offerings, start=1)
    ]
    if error_hint:
        header = f"{error_hint} Please select from our available services:"
    else:
        header = (
            f"Hi! 👋 Welcome to {_biz.name}! I'm here to help you book an appointment.\n\n"
            "Here are our services:"
        )
    return (
        f"{header}\n\n" + "\n".join(lines)
        + "\n\nReply with the number or name of the service to book."
    )


def build_date_menu(
    dates: list[date], offering: Optional[Offering] = None, error_hint: Optional[str] = None
) -> str:
    parts: list[str] = []
    if error_hint:
        parts.append(error_hint)
    if offering is not None:
        parts.append(
            f"Great choice! You selected: {offering.name}\n"
            f"💰 Price: {format_price(offering.price)}\n"
            f"⏰ Duration: {offering.duration_minutes} minutes"
        )
    parts.append("When would you like to book this service?")
    parts.append("\n".join(f"{i}. {format_date_label(d)}" for i, d in enumerate(dates, start=1)))
    parts.append("Please reply with the date number, 'today', 'tomorrow', or a date like 21/10/2026.")
    return "\n\n".join(parts)


def build_no_availability(on_date: date, dates: list[date]) -> str:
    return build_date_menu(
        dates,
        error_hint=(
            f"Sorry, there are no free slots on {format_date_label(on_date)}. "
            "Please pick another date."
        ),
    )


def build_slot_menu(
    slots: list[TimeSlot], on_date: date, error_hint: Optional[str] = None
) -> str:
    parts: list[str] = []
    if error_hint:
        parts.append(error_hint)
    parts.append(f"Here are the available time slots for {format_date_label(on_date)}:")
    parts.append("\n".join(f"{i}. {s.label}" for i, s in enumerate(slots, start=1)))
    parts.append("Please reply with the time (e.g. '10 am' or '14:30') or the slot number.")
    return "\n\n".join(parts)


def build_staff_menu(
    staff: list[StaffMember], slot_label: str, error_hint: Optional[str] = None
) -> str:
    lines = []
    for i, member in enumerate(staff, start=1):
        specialization = ", ".join(member.specializations) or "General Services"
        lines.append(f"{i}. {member.name} - {specialization}")
    parts: list[str] = []
    if error_hint:
        parts.append(error_hint)
    else:
        parts.append(f"Excellent! You selected: {slot_label}")
    parts.append("Here are our available staff members:")
    parts.append("\n".join(lines))
    parts.append("Please reply with the staff member number or name.")
    return "\n\n".join(parts)


def build_confirmation_summary(
    customer_name: str,
    offering: Offering,
    on_date: date,
    slot_label: str,
    staff: StaffMember,
) -> str:
    """Read-back of every selection before the commit guard runs."""
    return (
        "Perfect! Here's your appointment summary:\n\n"
        f"👤 Customer: {customer_name}\n"
        f"💇 Service: {offering.name}\n"
        f"💰 Price: {format_price(offering.price)}\n"
        f"⏰ Duration: {offering.duration_minutes} minutes\n"
        f"📅 Date: {format_date_label(on_date)}\n"
        f"🕘 Time: {slot_label}\n"
        f"👩‍💼 Staff: {staff.name}\n\n"
        f"{CONFIRM_PROMPT}"
    )


def build_booking_confirmed(
    booking_id: str,
    offering: Offering,
    on_date: date,
    slot_label: str,
    staff: StaffMember,
) -> str:
    return (
        "🎉 Appointment Booked Successfully!\n\n"
        f"Booking ID: {booking_id}\n"
        f"📅 Date: {format_date_label(on_date)}\n"
        f"⏰ Time: {slot_label}\n"
        f"💇 Service: {offering.name}\n"
        f"👩‍💼 Staff: {staff.name}\n"
        f"💰 Price: {format_price(offering.price)}\n\n"
        f"Thank you for choosing {_biz.name}! We look forward to seeing you! ✨"
    )


def build_slot_conflict(slots: list[TimeSlot], on_date: date, taken_label: str) -> str:
    return build_slot_menu(
        slots,
        on_date,
        error_hint=(
            f"Sorry, {taken_label} was just booked by someone else and is no longer available."
        ),
    )
