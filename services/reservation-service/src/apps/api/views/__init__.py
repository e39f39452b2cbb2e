# services/reservation-service/src/apps/api/views/__init__.py
"""
Reservation API Views
"""

from .reservation_views import (
    ReservationViewSet,
    ReservationRequestView,
    MyReservationsView,
)

__all__ = [
    'ReservationViewSet',
    'ReservationRequestView',
    'MyReservationsView',
]
