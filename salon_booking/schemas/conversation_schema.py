"""Chat session and bot reply schemas."""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStep(str, Enum):
    """Steps of the booking conversation, in the order they are visited."""
    IDLE = "idle"
    SERVICE_SELECTION = "service_selection"
    DATE_SELECTION = "date_selection"
    TIME_SELECTION = "time_selection"
    STAFF_SELECTION = "staff_selection"
    CONFIRMATION = "confirmation"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ConversationSession(BaseModel):
    """Per-(tenant, phone) booking progress.

    ``selected_date`` and ``selected_time`` are tenant-local wall-clock
    values; they only become an absolute instant inside the commit guard.
    """
    tenant_id: str
    customer_phone: str
    customer_name: Optional[str] = None
    step: BookingStep = BookingStep.IDLE
    service_id: Optional[str] = None
    selected_date: Optional[date] = None
    selected_time: Optional[str] = None
    staff_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @property
    def key(self) -> tuple[str, str]:
        return (self.tenant_id, self.customer_phone)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def touch(self, now: datetime, ttl: timedelta) -> None:
        self.updated_at = now
        self.expires_at = now + ttl

    def clear_selections(self) -> None:
        """Drop every booking choice so nothing leaks into the next attempt."""
        self.service_id = None
        self.selected_date = None
        self.selected_time = None
        self.staff_id = None


class BotReply(BaseModel):
    """What the transport layer sends back to the customer."""
    reply_text: str
    session_state: BookingStep
    booking_id: Optional[str] = None
    options: list[str] = Field(default_factory=list)
