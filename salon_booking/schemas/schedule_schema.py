"""Staff schedule, offering, and derived time-slot models."""

from datetime import date, time
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from salon_booking.utils import format_time_label, to_canonical


class Offering(BaseModel):
    """A bookable service from the tenant's catalog."""
    id: str
    tenant_id: str
    name: str
    price: Decimal
    duration_minutes: int = Field(gt=0)
    category: Optional[str] = None
    is_active: bool = True
    display_order: int = 0


class StaffMember(BaseModel):
    """A staff member and the offerings they can perform."""
    id: str
    tenant_id: str
    name: str
    specializations: list[str] = Field(default_factory=list)
    service_ids: list[str] = Field(default_factory=list)
    is_active: bool = True


class StaffAvailabilityRule(BaseModel):
    """Recurring working hours for one staff member on one day of the week.

    ``day_of_week`` uses Sunday as 0. When a break is present it must lie
    strictly inside the working window.
    """
    staff_id: str
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    break_start: Optional[time] = None
    break_end: Optional[time] = None
    is_available: bool = True
    max_appointments: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_window(self) -> "StaffAvailabilityRule":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("break_start and break_end must be set together")
        if self.break_start is not None and self.break_end is not None:
            if not self.start_time < self.break_start < self.break_end < self.end_time:
                raise ValueError("break must lie strictly inside the working window")
        return self

    @property
    def has_break(self) -> bool:
        return self.break_start is not None


class TimeOff(BaseModel):
    """Inclusive date range during which a staff member takes no bookings."""
    staff_id: str
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_range(self) -> "TimeOff":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def covers(self, on_date: date) -> bool:
        return self.start_date <= on_date <= self.end_date


class TimeSlot(BaseModel):
    """A candidate appointment interval in tenant-local wall-clock time."""
    on_date: date
    start: time
    end: time
    available: bool = True

    @property
    def canonical(self) -> str:
        return to_canonical(self.start)

    @property
    def label(self) -> str:
        return format_time_label(self.start)
