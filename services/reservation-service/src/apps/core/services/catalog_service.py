# services/reservation-service/src/apps/core/services/catalog_service.py
"""
Catalog Service

Read access to services, variants and providers for the scheduler,
plus deactivation under row locks.
"""

import logging
import uuid

from django.db import transaction
from django.db.models import QuerySet

from apps.core.models import Person, Service, ServiceVariant, Reservation
from .exceptions import ReservationNotFoundError, VariantNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    """Catalog lookups used by reservation placement and reporting."""

    def find_variant_by_id(self, variant_id: uuid.UUID, lock: bool = False) -> ServiceVariant:
        """
        Return the variant joined with its service.

        With ``lock=True`` the variant and service rows stay locked until the
        surrounding transaction ends, so a concurrent deactivation waits.
        """
        queryset = ServiceVariant.objects.select_related('service')
        if lock:
            queryset = queryset.select_for_update()

        try:
            return queryset.get(id=variant_id)
        except ServiceVariant.DoesNotExist:
            raise VariantNotFoundError()

    def list_active_services(self) -> QuerySet:
        return Service.objects.active().order_by('name')

    def list_active_variants(self) -> QuerySet:
        return ServiceVariant.objects.active().select_related('service').filter(service__is_active=True)

    def list_providers(self) -> QuerySet:
        return Person.providers().order_by('first_name', 'last_name')

    # ==========================================================================
    # Administration
    # ==========================================================================

    @transaction.atomic
    def deactivate_variant(self, variant_id: uuid.UUID) -> ServiceVariant:
        variant = self.find_variant_by_id(variant_id, lock=True)
        if variant.is_active:
            variant.is_active = False
            variant.save(update_fields=['is_active', 'updated_at'])
            logger.info(f"Deactivated service variant {variant_id}")
        return variant

    @transaction.atomic
    def deactivate_service(self, service_id: uuid.UUID) -> Service:
        try:
            service = Service.objects.select_for_update().get(id=service_id)
        except Service.DoesNotExist:
            raise ReservationNotFoundError('Service not found')

        if service.is_active:
            service.is_active = False
            service.save(update_fields=['is_active', 'updated_at'])
            logger.info(f"Deactivated service {service_id}")
        return service

    def upcoming_reservation_count(self, variant_id: uuid.UUID) -> int:
        """Active reservations still referencing a variant."""
        return Reservation.objects.filter(variant_id=variant_id).exclude(
            status__in=Reservation.TERMINAL_STATUSES
        ).count()
