"""
Staff availability resolver.

Turns a staff member's weekly rule, break, time-off and live bookings into
concrete bookable slots. All slot arithmetic is done on tenant-local
wall-clock minutes; booking instants are converted to wall clock once, on
the way out of the booking store, so a "9 AM" booking stays 9 AM no matter
what offset the store reports it in.

Usage:
    resolver = AvailabilityResolver(schedule_store, booking_store, tz)
    slots = resolver.get_available_slots("staff-1", date(2026, 10, 19), 60)
"""

import logging
from datetime import date, datetime, tzinfo
from typing import Optional

from salon_booking.config import settings
from salon_booking.schemas.schedule_schema import StaffAvailabilityRule, StaffMember, TimeSlot
from salon_booking.tools.stores import BookingStore, ScheduleStore
from salon_booking.utils import (
    day_of_week,
    minutes_of,
    overlaps,
    time_from_minutes,
    to_wall_clock,
)

logger = logging.getLogger(__name__)


class AvailabilityResolver:
    """Computes bookable slots from live schedule and booking data."""

    def __init__(
        self,
        schedule_store: ScheduleStore,
        booking_store: BookingStore,
        tz: tzinfo,
        slot_interval_minutes: int = settings.scheduling.slot_interval_minutes,
    ) -> None:
        self._schedule = schedule_store
        self._bookings = booking_store
        self._tz = tz
        self._interval = slot_interval_minutes

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def _booked_intervals(self, staff_id: str, on_date: date) -> list[tuple[int, int]]:
        """Active bookings on ``on_date`` as local [start, end) minute pairs."""
        intervals = []
        for booking in self._bookings.list_bookings(staff_id, on_date):
            if not booking.is_active:
                continue
            booked_date, booked_time = to_wall_clock(booking.scheduled_at, self._tz)
            if booked_date != on_date:
                continue
            start = minutes_of(booked_time)
            intervals.append((start, start + booking.duration_minutes))
        return intervals

    def _in_break(self, rule: StaffAvailabilityRule, start: int) -> bool:
        # The break blocks any slot cell that starts inside it; a service may
        # run into the break only from a cell that started before it.
        if not rule.has_break:
            return False
        return overlaps(
            start,
            start + self._interval,
            minutes_of(rule.break_start),  # type: ignore[arg-type]
            minutes_of(rule.break_end),  # type: ignore[arg-type]
        )

    def get_available_slots(
        self,
        staff_id: str,
        on_date: date,
        duration_minutes: int,
        not_before: Optional[datetime] = None,
    ) -> list[TimeSlot]:
        """
        Return the ordered bookable slots for one staff member on one date.

        Args:
            staff_id: Staff member to resolve.
            on_date: Tenant-local calendar date.
            duration_minutes: Length of the requested service.
            not_before: Optional instant; slots starting at or before it are dropped.

        Returns:
            Slots in ascending start order. Empty when the staff member is off.
        """
        if duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")

        rule = self._schedule.get_availability_rule(staff_id, day_of_week(on_date))
        if rule is None or not rule.is_available:
            logger.debug("No working hours for staff %s on %s", staff_id, on_date)
            return []
        if any(t.covers(on_date) for t in self._schedule.get_time_off(staff_id, on_date, on_date)):
            logger.debug("Staff %s has time off on %s", staff_id, on_date)
            return []

        earliest = -1
        if not_before is not None:
            today, now_time = to_wall_clock(not_before, self._tz)
            if on_date < today:
                return []
            if on_date == today:
                earliest = minutes_of(now_time)

        booked = self._booked_intervals(staff_id, on_date)
        day_start = minutes_of(rule.start_time)
        day_end = minutes_of(rule.end_time)

        slots: list[TimeSlot] = []
        start = day_start
        while start + duration_minutes <= day_end:
            end = start + duration_minutes
            if start > earliest and not self._in_break(rule, start):
                concurrent = sum(1 for b_start, b_end in booked if overlaps(start, end, b_start, b_end))
                if concurrent < rule.max_appointments:
                    slots.append(
                        TimeSlot(
                            on_date=on_date,
                            start=time_from_minutes(start),
                            end=time_from_minutes(end),
                        )
                    )
            start += self._interval
        return slots

    def get_staff_slots(
        self,
        tenant_id: str,
        service_id: str,
        on_date: date,
        duration_minutes: int,
        not_before: Optional[datetime] = None,
    ) -> list[tuple[StaffMember, list[TimeSlot]]]:
        """Slots for every active staff member who performs the service.

        Staff with no free slot on the date are omitted.
        """
        results = []
        for staff in self._schedule.list_staff_for_service(tenant_id, service_id):
            slots = self.get_available_slots(staff.id, on_date, duration_minutes, not_before)
            if slots:
                results.append((staff, slots))
        return results

    def is_slot_available(
        self,
        staff_id: str,
        on_date: date,
        canonical_time: str,
        duration_minutes: int,
        not_before: Optional[datetime] = None,
    ) -> bool:
        """Whether ``canonical_time`` is still among the staff member's free slots."""
        slots = self.get_available_slots(staff_id, on_date, duration_minutes, not_before)
        return any(slot.canonical == canonical_time for slot in slots)


def merge_slot_times(
    staff_slots: list[tuple[StaffMember, list[TimeSlot]]],
) -> list[TimeSlot]:
    """Union of start times across staff, one slot per canonical time, ascending."""
    merged: dict[str, TimeSlot] = {}
    for _, slots in staff_slots:
        for slot in slots:
            merged.setdefault(slot.canonical, slot)
    return [merged[key] for key in sorted(merged)]


def staff_free_at(
    staff_slots: list[tuple[StaffMember, list[TimeSlot]]],
    canonical_time: str,
) -> list[StaffMember]:
    """Staff whose slot list contains the chosen time."""
    return [
        staff for staff, slots in staff_slots
        if any(slot.canonical == canonical_time for slot in slots)
    ]

