# services/reservation-service/src/apps/core/services/conflict_detector.py
"""
Conflict Detector

Enforces the minimum gap between a provider's active reservations.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from django.db.models import Q, QuerySet

from apps.core.models import Reservation
from .policy import SchedulingPolicy

logger = logging.getLogger(__name__)


class ConflictDetector:
    """
    Decides whether a candidate interval may be placed on a provider's calendar.

    An existing active reservation R conflicts with ``[start, end)`` if any of:

    1. R ends inside the buffer before the candidate:
       ``R.end > start - gap and R.end <= start``
    2. R starts inside the buffer after the candidate:
       ``R.start < end + gap and R.start >= end``
    3. R overlaps the candidate:
       ``R.start < end and R.end > start``
    """

    def __init__(self, policy: SchedulingPolicy = None):
        self.policy = policy or SchedulingPolicy.from_settings()

    def conflicting_reservations(
        self,
        provider_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[uuid.UUID] = None,
    ) -> QuerySet:
        gap = self.policy.min_gap
        buffer_start = start - gap
        buffer_end = end + gap

        ends_too_close_before = Q(end_time__gt=buffer_start) & Q(end_time__lte=start)
        starts_too_close_after = Q(start_time__lt=buffer_end) & Q(start_time__gte=end)
        overlaps = Q(start_time__lt=end) & Q(end_time__gt=start)

        queryset = Reservation.active_for_provider(provider_id).filter(
            ends_too_close_before | starts_too_close_after | overlaps
        )

        if exclude_reservation_id:
            queryset = queryset.exclude(id=exclude_reservation_id)

        return queryset

    def has_required_gap(
        self,
        provider_id: uuid.UUID,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """True if no active reservation of the provider conflicts with the interval."""
        return not self.conflicting_reservations(
            provider_id, start, end, exclude_reservation_id
        ).exists()
