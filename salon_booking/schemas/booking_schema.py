"""Booking data models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses that still occupy a staff member's time.
ACTIVE_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.COMPLETED}
)


class BookingRequest(BaseModel):
    """Validated booking data handed to the booking store."""
    tenant_id: str
    customer_phone: str
    customer_name: str
    service_id: str
    staff_id: str
    scheduled_at: datetime
    duration_minutes: int = Field(gt=0)
    amount: Decimal
    currency: str
    notes: str = ""
    status: BookingStatus = BookingStatus.PENDING
    payment_status: str = "pending"

    @field_validator("scheduled_at")
    @classmethod
    def _require_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("scheduled_at must be timezone-aware")
        return value


class Booking(BookingRequest):
    """A persisted appointment."""
    id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
