"""Demo salon catalog, staff roster and weekly hours for the console demo and tests."""

import logging
from datetime import time, tzinfo
from decimal import Decimal
from typing import NamedTuple, Optional

from salon_booking.config import settings
from salon_booking.schemas.schedule_schema import Offering, StaffAvailabilityRule, StaffMember
from salon_booking.tools.stores import (
    InMemoryBookingStore,
    InMemoryOfferingStore,
    InMemoryScheduleStore,
)

logger = logging.getLogger(__name__)

DEMO_TENANT_ID = "bella-salon"

OFFERING_CATALOG: list[dict] = [
    {"id": "svc-haircut", "name": "Haircut", "price": "500", "duration_minutes": 30,
     "category": "hair", "display_order": 1},
    {"id": "svc-color", "name": "Hair Color", "price": "2500", "duration_minutes": 90,
     "category": "hair", "display_order": 2},
    {"id": "svc-facial", "name": "Classic Facial", "price": "1200", "duration_minutes": 60,
     "category": "skin", "display_order": 3},
    {"id": "svc-manicure", "name": "Manicure", "price": "600", "duration_minutes": 45,
     "category": "nails", "display_order": 4},
    {"id": "svc-bridal", "name": "Bridal Makeup", "price": "8000", "duration_minutes": 120,
     "category": "makeup", "display_order": 5},
]

STAFF_ROSTER: list[dict] = [
    {"id": "staff-priya", "name": "Priya", "specializations": ["Hair Styling", "Coloring"],
     "service_ids": ["svc-haircut", "svc-color", "svc-bridal"]},
    {"id": "staff-anita", "name": "Anita", "specializations": ["Skin Care", "Nails"],
     "service_ids": ["svc-facial", "svc-manicure", "svc-haircut"]},
]

# Monday to Saturday, 09:00-18:00 with a lunch break; closed Sunday (day 0).
WORKING_DAYS = range(1, 7)
DAY_START = time(9, 0)
DAY_END = time(18, 0)
LUNCH_START = time(13, 0)
LUNCH_END = time(14, 0)


class DemoStores(NamedTuple):
    offerings: InMemoryOfferingStore
    schedule: InMemoryScheduleStore
    bookings: InMemoryBookingStore


def build_demo_stores(tenant_id: str = DEMO_TENANT_ID, tz: Optional[tzinfo] = None) -> DemoStores:
    """Create in-memory stores populated with the demo salon."""
    offerings = InMemoryOfferingStore()
    for entry in OFFERING_CATALOG:
        offerings.add(Offering(tenant_id=tenant_id, **{**entry, "price": Decimal(entry["price"])}))

    schedule = InMemoryScheduleStore()
    for entry in STAFF_ROSTER:
        schedule.add_staff(StaffMember(tenant_id=tenant_id, **entry))
        for day in WORKING_DAYS:
            schedule.set_rule(
                StaffAvailabilityRule(
                    staff_id=entry["id"],
                    day_of_week=day,
                    start_time=DAY_START,
                    end_time=DAY_END,
                    break_start=LUNCH_START,
                    break_end=LUNCH_END,
                    max_appointments=settings.scheduling.default_max_appointments,
                )
            )

    logger.debug(
        "Seeded %d offerings and %d staff for %s",
        len(OFFERING_CATALOG), len(STAFF_ROSTER), tenant_id,
    )
    return DemoStores(offerings, schedule, InMemoryBookingStore(tz or settings.business.tz))
