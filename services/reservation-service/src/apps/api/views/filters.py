# services/reservation-service/src/apps/api/views/filters.py
"""
API Filters

Query-string filters for reservation listings.
"""

import django_filters
from rest_framework.exceptions import ValidationError

from apps.core.models import Reservation


class ReservationFilter(django_filters.FilterSet):
    """Filter for reservation queries."""

    customer_id = django_filters.UUIDFilter()
    provider_id = django_filters.UUIDFilter()
    variant_id = django_filters.UUIDFilter()
    service_id = django_filters.UUIDFilter(field_name='variant__service_id')
    status = django_filters.ChoiceFilter(choices=Reservation.Status.choices)

    class Meta:
        model = Reservation
        fields = ['customer_id', 'provider_id', 'variant_id', 'service_id', 'status']

    @classmethod
    def parse(cls, query_params, exclude=()) -> dict:
        """
        Validate query parameters and return the non-empty values.

        Raises a DRF ``ValidationError`` for malformed ids or statuses.
        """
        filterset = cls(query_params, queryset=Reservation.objects.none())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)

        return {
            name: value
            for name, value in filterset.form.cleaned_data.items()
            if value not in (None, '') and name not in exclude
        }
