# services/reservation-service/src/apps/core/services/availability_rules.py
"""
Availability Rules

Pure checks on a candidate interval. No database access, no clock reads.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone

from .policy import SchedulingPolicy


@dataclass(frozen=True)
class BusinessHoursCheck:
    valid: bool
    message: Optional[str] = None

    def __bool__(self):
        return self.valid


def format_hour(hour: int) -> str:
    """Render an hour of day as ``9:00 AM`` / ``9:00 PM``."""
    hour = hour % 24
    suffix = 'AM' if hour < 12 else 'PM'
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"


def _local(instant: datetime) -> datetime:
    if timezone.is_aware(instant):
        return timezone.localtime(instant)
    return instant


def is_on_valid_slot_boundary(instant: datetime, policy: SchedulingPolicy) -> bool:
    """True if the minute component falls on the slot grid (0 or 30 by default)."""
    return _local(instant).minute % policy.slot_interval_minutes == 0


def is_within_business_hours(
    start: datetime,
    end: datetime,
    policy: SchedulingPolicy
) -> BusinessHoursCheck:
    """
    Check that a reservation fits inside business hours.

    Both instants are evaluated in the server's local time zone. The end
    must not be later than the closing hour of the day the reservation
    starts on. The end is compared at minute precision, so seconds past
    closing are ignored.
    """
    start_local = _local(start)
    end_local = _local(end)

    if start_local.hour < policy.business_hours_start:
        return BusinessHoursCheck(
            False,
            f"Reservations must start at {format_hour(policy.business_hours_start)} or later"
        )

    day_start = start_local.replace(hour=0, minute=0, second=0, microsecond=0)
    closing = day_start + timedelta(hours=policy.business_hours_end)

    if end_local.replace(second=0, microsecond=0) > closing:
        return BusinessHoursCheck(
            False,
            f"Reservations must end by {format_hour(policy.business_hours_end)}"
        )

    return BusinessHoursCheck(True)
