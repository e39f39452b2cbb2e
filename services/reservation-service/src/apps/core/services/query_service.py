# services/reservation-service/src/apps/core/services/query_service.py
"""
Reservation Query Service

Read-side listings: filtered lists, date windows, public projection
and pending summaries.
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime, date, time, timedelta
from typing import Optional, List, Tuple, Any

from django.db.models import Count, QuerySet
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.models import Person, Reservation
from .exceptions import ReservationValidationError

logger = logging.getLogger(__name__)


@dataclass
class PendingSummary:
    total_count: int
    provider_id: Optional[uuid.UUID]
    reservations: List[Reservation]
    counts_by_provider: Optional[List[dict]] = field(default=None)


class ReservationQueryService:
    """Reservation listings. Nothing here writes."""

    # ==========================================================================
    # Date windows
    # ==========================================================================

    def current_week_range(self, now: datetime = None) -> Tuple[datetime, datetime]:
        """Monday 00:00 to Sunday 23:59:59.999999 of the current local week."""
        today = timezone.localtime(now or timezone.now()).date()
        monday = today - timedelta(days=today.weekday())
        sunday = monday + timedelta(days=6)
        return self._day_start(monday), self._day_end(sunday)

    def resolve_date_range(
        self,
        start_date: Any = None,
        end_date: Any = None,
        now: datetime = None,
    ) -> Tuple[datetime, datetime]:
        """
        Explicit range when both bounds are given, else the current week.

        Bounds are widened to whole local days.
        """
        if not (start_date and end_date):
            return self.current_week_range(now)

        start_day = self._parse_day(start_date)
        end_day = self._parse_day(end_date)

        if start_day > end_day:
            raise ReservationValidationError('start_date must be before or equal to end_date')

        return self._day_start(start_day), self._day_end(end_day)

    # ==========================================================================
    # Listings
    # ==========================================================================

    def list_reservations(
        self,
        customer_id=None,
        provider_id=None,
        variant_id=None,
        service_id=None,
        status=None,
    ) -> QuerySet:
        return self._filtered(
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
            status=status,
        ).order_by('start_time')

    def list_in_range(
        self,
        start: datetime,
        end: datetime,
        customer_id=None,
        provider_id=None,
        variant_id=None,
        service_id=None,
        status=None,
    ) -> QuerySet:
        return self._filtered(
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
            status=status,
        ).filter(
            start_time__gte=start,
            start_time__lte=end,
        ).order_by('start_time')

    def list_public_in_range(
        self,
        start: datetime,
        end: datetime,
        provider_id=None,
        variant_id=None,
        service_id=None,
    ) -> QuerySet:
        """Confirmed and completed reservations only."""
        return self.list_in_range(
            start,
            end,
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
        ).filter(status__in=Reservation.PUBLIC_STATUSES)

    def list_pending(
        self,
        customer_id=None,
        provider_id=None,
        variant_id=None,
        service_id=None,
    ) -> QuerySet:
        return self._filtered(
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
            status=Reservation.Status.PENDING,
        ).order_by('start_time')

    def pending_summary(self, provider_id=None, variant_id=None, service_id=None) -> PendingSummary:
        """
        Pending reservations with their total.

        Without a provider filter the count is also grouped per provider.
        """
        queryset = self._filtered(
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
            status=Reservation.Status.PENDING,
        ).order_by('start_time')

        reservations = list(queryset)
        summary = PendingSummary(
            total_count=len(reservations),
            provider_id=provider_id,
            reservations=reservations,
        )

        if not provider_id:
            grouped = (
                queryset.order_by()
                .values('provider_id')
                .annotate(count=Count('id'))
                .order_by('-count', 'provider_id')
            )
            providers = Person.objects.in_bulk([row['provider_id'] for row in grouped])
            summary.counts_by_provider = [
                {
                    'provider_id': row['provider_id'],
                    'count': row['count'],
                    'provider': providers.get(row['provider_id']),
                }
                for row in grouped
            ]

        return summary

    def list_customer_reservations(
        self,
        customer_id,
        provider_id=None,
        variant_id=None,
        service_id=None,
        status=None,
    ) -> QuerySet:
        """A customer's own reservations, most recent start first."""
        return self._filtered(
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            service_id=service_id,
            status=status,
        ).order_by('-start_time')

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def _filtered(
        self,
        customer_id=None,
        provider_id=None,
        variant_id=None,
        service_id=None,
        status=None,
    ) -> QuerySet:
        filters = {}
        if customer_id:
            filters['customer_id'] = customer_id
        if provider_id:
            filters['provider_id'] = provider_id
        if variant_id:
            filters['variant_id'] = variant_id
        if service_id:
            # Service is reached through the variant
            filters['variant__service_id'] = service_id
        if status:
            filters['status'] = status

        return Reservation.with_relations().filter(**filters)

    def _parse_day(self, value: Any) -> date:
        if isinstance(value, datetime):
            return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
        if isinstance(value, date):
            return value

        text = str(value).strip()
        try:
            parsed = parse_date(text)
            if parsed is None:
                moment = parse_datetime(text)
                if moment is not None:
                    return self._parse_day(moment)
        except ValueError:
            parsed = None

        if parsed is None:
            raise ReservationValidationError('Invalid date format')
        return parsed

    def _day_start(self, day: date) -> datetime:
        return timezone.make_aware(datetime.combine(day, time.min))

    def _day_end(self, day: date) -> datetime:
        return timezone.make_aware(datetime.combine(day, time.max))
