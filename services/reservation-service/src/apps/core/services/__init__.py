# services/reservation-service/src/apps/core/services/__init__.py
"""
Reservation Service Business Logic
"""

from .exceptions import (
    ReservationServiceError,
    ReservationValidationError,
    ReservationConflictError,
    ReservationNotFoundError,
    VariantNotFoundError,
    ProviderNotFoundError,
    CustomerNotFoundError,
    PackageCreditNotFoundError,
    ReservationStateError,
    VariantUnavailableError,
    PackageCreditError,
)
from .policy import SchedulingPolicy
from .availability_rules import (
    BusinessHoursCheck,
    format_hour,
    is_on_valid_slot_boundary,
    is_within_business_hours,
)
from .conflict_detector import ConflictDetector
from .catalog_service import CatalogService
from .notifications import ReservationNotifier
from .reservation_service import ReservationService
from .query_service import ReservationQueryService, PendingSummary


__all__ = [
    # Services
    'ReservationService',
    'ReservationQueryService',
    'CatalogService',
    'ConflictDetector',
    'ReservationNotifier',

    # Rules
    'SchedulingPolicy',
    'BusinessHoursCheck',
    'format_hour',
    'is_on_valid_slot_boundary',
    'is_within_business_hours',
    'PendingSummary',

    # Exceptions
    'ReservationServiceError',
    'ReservationValidationError',
    'ReservationConflictError',
    'ReservationNotFoundError',
    'VariantNotFoundError',
    'ProviderNotFoundError',
    'CustomerNotFoundError',
    'PackageCreditNotFoundError',
    'ReservationStateError',
    'VariantUnavailableError',
    'PackageCreditError',
]
