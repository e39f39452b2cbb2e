# services/reservation-service/src/apps/core/services/policy.py
"""
Scheduling Policy

Business-hour, slot and gap values, read from ``settings.RESERVATION_POLICY``.
"""

from dataclasses import dataclass
from datetime import timedelta

from django.conf import settings


DEFAULT_POLICY = {
    'BUSINESS_HOURS_START': 9,
    'BUSINESS_HOURS_END': 21,
    'SLOT_INTERVAL_MINUTES': 30,
    'MIN_GAP_MINUTES': 60,
}


@dataclass(frozen=True)
class SchedulingPolicy:
    """Immutable set of scheduling constants injected into the rule checks."""

    business_hours_start: int = 9
    business_hours_end: int = 21
    slot_interval_minutes: int = 30
    min_gap_minutes: int = 60

    def __post_init__(self):
        if not 0 <= self.business_hours_start < self.business_hours_end <= 24:
            raise ValueError(
                f"Invalid business hours: {self.business_hours_start}-{self.business_hours_end}"
            )
        if self.slot_interval_minutes <= 0 or 60 % self.slot_interval_minutes:
            raise ValueError(
                f"Slot interval must divide an hour, got {self.slot_interval_minutes}"
            )
        if self.min_gap_minutes < 0:
            raise ValueError("Minimum gap cannot be negative")

    @classmethod
    def from_settings(cls) -> 'SchedulingPolicy':
        config = {**DEFAULT_POLICY, **getattr(settings, 'RESERVATION_POLICY', {})}
        return cls(
            business_hours_start=int(config['BUSINESS_HOURS_START']),
            business_hours_end=int(config['BUSINESS_HOURS_END']),
            slot_interval_minutes=int(config['SLOT_INTERVAL_MINUTES']),
            min_gap_minutes=int(config['MIN_GAP_MINUTES']),
        )

    @property
    def min_gap(self) -> timedelta:
        return timedelta(minutes=self.min_gap_minutes)

    @property
    def min_gap_label(self) -> str:
        """Human form of the gap, e.g. ``1 hour`` or ``45 minutes``."""
        hours, minutes = divmod(self.min_gap_minutes, 60)
        if hours and not minutes:
            return f"{hours} hour" if hours == 1 else f"{hours} hours"
        return f"{self.min_gap_minutes} minutes"
