# services/reservation-service/src/apps/api/serializers/__init__.py
"""
Reservation API Serializers
"""

from .reservation_serializers import (
    PersonSummarySerializer,
    ProviderSummarySerializer,
    ProviderProfileSerializer,
    ServiceSummarySerializer,
    ServiceCatalogSerializer,
    VariantSummarySerializer,
    ReservationSerializer,
    PublicReservationSerializer,
    ReservationRequestSerializer,
    ReservationCreateSerializer,
    ReservationUpdateSerializer,
    ReservationRejectSerializer,
    DateRangeQuerySerializer,
)

__all__ = [
    'PersonSummarySerializer',
    'ProviderSummarySerializer',
    'ProviderProfileSerializer',
    'ServiceSummarySerializer',
    'ServiceCatalogSerializer',
    'VariantSummarySerializer',
    'ReservationSerializer',
    'PublicReservationSerializer',
    'ReservationRequestSerializer',
    'ReservationCreateSerializer',
    'ReservationUpdateSerializer',
    'ReservationRejectSerializer',
    'DateRangeQuerySerializer',
]
