"""
Store interfaces consumed by the booking core, with in-memory backends.

In production these are backed by the dashboard-managed tables (staff,
staff_availability, staff_time_off, offerings, transactions). The core only
reads schedules and offerings, and only the commit guard writes bookings.
Every read goes to the backend; nothing is cached between requests.
"""

import logging
import threading
import uuid
from datetime import date, datetime, timezone, tzinfo
from typing import Optional, Protocol

from salon_booking.schemas.booking_schema import Booking, BookingRequest, BookingStatus
from salon_booking.schemas.schedule_schema import (
    Offering,
    StaffAvailabilityRule,
    StaffMember,
    TimeOff,
)
from salon_booking.utils import to_wall_clock

logger = logging.getLogger(__name__)


class StoreUnavailableError(Exception):
    """Raised when an underlying data store cannot be reached."""


class BookingNotFoundError(LookupError):
    """Raised when a booking id does not exist for the tenant."""


class InvalidStatusChangeError(ValueError):
    """Raised when a dashboard status change is not allowed."""


class ScheduleStore(Protocol):
    def get_availability_rule(
        self, staff_id: str, day_of_week: int
    ) -> Optional[StaffAvailabilityRule]: ...

    def get_time_off(self, staff_id: str, start: date, end: date) -> list[TimeOff]: ...

    def list_staff_for_service(self, tenant_id: str, service_id: str) -> list[StaffMember]: ...

    def get_staff(self, staff_id: str) -> Optional[StaffMember]: ...


class BookingStore(Protocol):
    def list_bookings(self, staff_id: str, on_date: date) -> list[Booking]: ...

    def insert_booking(self, request: BookingRequest) -> Booking: ...

    def get_booking(self, tenant_id: str, booking_id: str) -> Optional[Booking]: ...

    def update_status(
        self, tenant_id: str, booking_id: str, status: BookingStatus
    ) -> Booking: ...


class OfferingStore(Protocol):
    def list_active_offerings(self, tenant_id: str) -> list[Offering]: ...

    def get_offering(self, tenant_id: str, offering_id: str) -> Optional[Offering]: ...


class InMemoryScheduleStore:
    """Dict-backed schedule store used by tests and the console demo."""

    def __init__(self) -> None:
        self._staff: dict[str, StaffMember] = {}
        self._rules: dict[tuple[str, int], StaffAvailabilityRule] = {}
        self._time_off: list[TimeOff] = []
        self._lock = threading.Lock()

    def add_staff(self, staff: StaffMember) -> None:
        with self._lock:
            self._staff[staff.id] = staff

    def set_rule(self, rule: StaffAvailabilityRule) -> None:
        with self._lock:
            self._rules[(rule.staff_id, rule.day_of_week)] = rule

    def add_time_off(self, time_off: TimeOff) -> None:
        with self._lock:
            self._time_off.append(time_off)

    def get_availability_rule(
        self, staff_id: str, day_of_week: int
    ) -> Optional[StaffAvailabilityRule]:
        with self._lock:
            return self._rules.get((staff_id, day_of_week))

    def get_time_off(self, staff_id: str, start: date, end: date) -> list[TimeOff]:
        with self._lock:
            return [
                t for t in self._time_off
                if t.staff_id == staff_id and t.start_date <= end and start <= t.end_date
            ]

    def list_staff_for_service(self, tenant_id: str, service_id: str) -> list[StaffMember]:
        with self._lock:
            staff = [
                s for s in self._staff.values()
                if s.tenant_id == tenant_id and s.is_active and service_id in s.service_ids
            ]
        return sorted(staff, key=lambda s: s.name)

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        with self._lock:
            return self._staff.get(staff_id)


class InMemoryOfferingStore:
    """Dict-backed offering catalog."""

    def __init__(self) -> None:
        self._offerings: dict[str, Offering] = {}
        self._lock = threading.Lock()

    def add(self, offering: Offering) -> None:
        with self._lock:
            self._offerings[offering.id] = offering

    def list_active_offerings(self, tenant_id: str) -> list[Offering]:
        with self._lock:
            active = [
                o for o in self._offerings.values()
                if o.tenant_id == tenant_id and o.is_active
            ]
        return sorted(active, key=lambda o: (o.display_order, o.name))

    def get_offering(self, tenant_id: str, offering_id: str) -> Optional[Offering]:
        with self._lock:
            offering = self._offerings.get(offering_id)
        if offering is None or offering.tenant_id != tenant_id:
            return None
        return offering


class InMemoryBookingStore:
    """Dict-backed booking table.

    ``list_bookings`` filters on the tenant-local calendar date, the same
    way the SQL backend filters ``DATE(scheduled_at AT TIME ZONE tz)``.
    """

    def __init__(self, tz: tzinfo) -> None:
        self._tz = tz
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _new_id() -> str:
        return f"BK-{uuid.uuid4().hex[:8].upper()}"

    def list_bookings(self, staff_id: str, on_date: date) -> list[Booking]:
        with self._lock:
            bookings = [
                b for b in self._bookings.values()
                if b.staff_id == staff_id and to_wall_clock(b.scheduled_at, self._tz)[0] == on_date
            ]
        return sorted(bookings, key=lambda b: b.scheduled_at)

    def insert_booking(self, request: BookingRequest) -> Booking:
        with self._lock:
            booking_id = self._new_id()
            while booking_id in self._bookings:
                booking_id = self._new_id()
            booking = Booking(id=booking_id, **request.model_dump())
            self._bookings[booking.id] = booking
        logger.info(
            "Booking inserted: %s staff=%s at %s",
            booking.id, booking.staff_id, booking.scheduled_at.isoformat(),
        )
        return booking

    def get_booking(self, tenant_id: str, booking_id: str) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
        if booking is None or booking.tenant_id != tenant_id:
            return None
        return booking

    def update_status(
        self, tenant_id: str, booking_id: str, status: BookingStatus
    ) -> Booking:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or booking.tenant_id != tenant_id:
                raise BookingNotFoundError(f"Booking {booking_id} not found")
            updated = booking.model_copy(
                update={"status": status, "updated_at": datetime.now(timezone.utc)}
            )
            self._bookings[booking_id] = updated
        return updated

    def all(self) -> list[Booking]:
        with self._lock:
            return list(self._bookings.values())
