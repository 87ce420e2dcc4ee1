"""Shared test fixtures and helpers."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from zoneinfo import ZoneInfo

import pytest

from salon_booking.conversation.booking_flow import BookingConversation
from salon_booking.conversation.session_store import InMemorySessionStore
from salon_booking.conversation.state_machine import BookingStateMachine
from salon_booking.schemas.booking_schema import BookingRequest, BookingStatus
from salon_booking.schemas.conversation_schema import BookingStep, ConversationSession
from salon_booking.schemas.schedule_schema import Offering, StaffAvailabilityRule, StaffMember
from salon_booking.tools.availability import AvailabilityResolver
from salon_booking.tools.booking import BookingCommitGuard
from salon_booking.tools.stores import (
    InMemoryBookingStore,
    InMemoryOfferingStore,
    InMemoryScheduleStore,
)

TENANT = "salon-1"
TZ = ZoneInfo("Asia/Kolkata")
# Saturday 17 October 2026, 08:00 salon time: before opening, so every slot today is still open.
NOW = datetime(2026, 10, 17, 8, 0, tzinfo=TZ)
MONDAY = date(2026, 10, 19)
PHONE = "+919876543210"


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now += timedelta(minutes=minutes)


def make_rule(
    staff_id: str = "staff-1",
    day_of_week: int = 1,
    start: time = time(9, 0),
    end: time = time(17, 0),
    break_start: Optional[time] = time(12, 0),
    break_end: Optional[time] = time(13, 0),
    max_appointments: int = 1,
    is_available: bool = True,
) -> StaffAvailabilityRule:
    """Helper to create a StaffAvailabilityRule with the usual salon hours."""
    return StaffAvailabilityRule(
        staff_id=staff_id,
        day_of_week=day_of_week,
        start_time=start,
        end_time=end,
        break_start=break_start,
        break_end=break_end,
        max_appointments=max_appointments,
        is_available=is_available,
    )


def make_booking_request(
    staff_id: str = "staff-1",
    on_date: date = MONDAY,
    at: time = time(10, 0),
    duration_minutes: int = 60,
    status: BookingStatus = BookingStatus.PENDING,
    customer_phone: str = "+919000000001",
) -> BookingRequest:
    """Helper to create a BookingRequest at a salon-local wall-clock time."""
    return BookingRequest(
        tenant_id=TENANT,
        customer_phone=customer_phone,
        customer_name="Walk-in",
        service_id="svc-color",
        staff_id=staff_id,
        scheduled_at=datetime.combine(on_date, at, tzinfo=TZ),
        duration_minutes=duration_minutes,
        amount=Decimal("2500"),
        currency="INR",
        status=status,
    )


def make_session(
    step: BookingStep = BookingStep.CONFIRMATION,
    service_id: Optional[str] = "svc-cut",
    selected_date: Optional[date] = MONDAY,
    selected_time: Optional[str] = "10:00",
    staff_id: Optional[str] = "staff-1",
    customer_phone: str = PHONE,
    customer_name: Optional[str] = None,
) -> ConversationSession:
    """Helper to create a session that has already made its selections."""
    return ConversationSession(
        tenant_id=TENANT,
        customer_phone=customer_phone,
        customer_name=customer_name,
        step=step,
        service_id=service_id,
        selected_date=selected_date,
        selected_time=selected_time,
        staff_id=staff_id,
        created_at=NOW,
        updated_at=NOW,
        expires_at=NOW + timedelta(minutes=30),
    )


@pytest.fixture
def state_machine():
    return BookingStateMachine()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def offering_store():
    store = InMemoryOfferingStore()
    store.add(Offering(id="svc-cut", tenant_id=TENANT, name="Haircut",
                       price=Decimal("500"), duration_minutes=30, category="hair",
                       display_order=1))
    store.add(Offering(id="svc-color", tenant_id=TENANT, name="Hair Color",
                       price=Decimal("2500"), duration_minutes=60, category="hair",
                       display_order=2))
    store.add(Offering(id="svc-facial", tenant_id=TENANT, name="Classic Facial",
                       price=Decimal("1200"), duration_minutes=60, category="skin",
                       display_order=3, is_active=False))
    return store


@pytest.fixture
def schedule_store():
    """Priya does cuts and color, Anita only color; both work every day 09:00-17:00."""
    store = InMemoryScheduleStore()
    store.add_staff(StaffMember(id="staff-1", tenant_id=TENANT, name="Priya",
                                specializations=["Hair Styling"],
                                service_ids=["svc-cut", "svc-color"]))
    store.add_staff(StaffMember(id="staff-2", tenant_id=TENANT, name="Anita",
                                specializations=["Coloring"],
                                service_ids=["svc-color"]))
    for staff_id in ("staff-1", "staff-2"):
        for day in range(7):
            store.set_rule(make_rule(staff_id=staff_id, day_of_week=day))
    return store


@pytest.fixture
def booking_store():
    return InMemoryBookingStore(TZ)


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def resolver(schedule_store, booking_store):
    return AvailabilityResolver(schedule_store, booking_store, TZ, slot_interval_minutes=30)


@pytest.fixture
def commit_guard(resolver, booking_store):
    return BookingCommitGuard(resolver, booking_store)


@pytest.fixture
def flow(offering_store, schedule_store, booking_store, session_store, clock):
    return BookingConversation(
        offering_store,
        schedule_store,
        booking_store,
        session_store,
        tz=TZ,
        clock=clock,
        session_ttl=timedelta(minutes=30),
        booking_window_days=7,
    )


def send(flow: BookingConversation, text: str, phone: str = PHONE):
    """Send one customer message to the demo tenant."""
    return flow.handle_message(TENANT, phone, text)
