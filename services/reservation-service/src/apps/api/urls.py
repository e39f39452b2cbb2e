# services/reservation-service/src/apps/api/urls.py
"""
Reservation API URL Configuration

Defines all API routes for the reservation service.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ReservationViewSet,
    ReservationRequestView,
    MyReservationsView,
)

app_name = 'api'

router = DefaultRouter(trailing_slash=False)
router.register(r'reservations', ReservationViewSet, basename='reservation')

urlpatterns = [
    # Router URLs
    path('', include(router.urls)),

    # Self-service
    path('reservation-request', ReservationRequestView.as_view(), name='reservation-request'),
    path('my-reservations', MyReservationsView.as_view(), name='my-reservations'),
]
