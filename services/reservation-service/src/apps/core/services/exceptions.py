# services/reservation-service/src/apps/core/services/exceptions.py
"""
Reservation Service Exceptions

Raised by the service layer. The API layer maps ``kind`` to HTTP status.
"""

from shared.common.exceptions import DomainError, ErrorKind


class ReservationServiceError(DomainError):
    """Base exception for reservation service errors."""
    pass


class ReservationValidationError(ReservationServiceError):
    """Reservation input failed validation."""
    kind = ErrorKind.VALIDATION
    error_code = 'validation_error'


class ReservationConflictError(ReservationValidationError):
    """Candidate interval violates the provider's gap rule."""
    error_code = 'reservation_conflict'
    default_message = 'There must be at least 1 hour gap between reservations for this provider'

    def __init__(self, message=None, conflicts=None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class ReservationNotFoundError(ReservationServiceError):
    kind = ErrorKind.NOT_FOUND
    error_code = 'not_found'
    default_message = 'Reservation not found'


class VariantNotFoundError(ReservationNotFoundError):
    default_message = 'Service variant not found'


class ProviderNotFoundError(ReservationNotFoundError):
    default_message = 'Provider not found'


class CustomerNotFoundError(ReservationNotFoundError):
    default_message = 'Customer not found'


class PackageCreditNotFoundError(ReservationNotFoundError):
    default_message = 'Package credit not found'


class ReservationStateError(ReservationServiceError):
    """Invalid reservation state or precondition."""
    kind = ErrorKind.INVALID_STATE
    error_code = 'invalid_state'


class VariantUnavailableError(ReservationStateError):
    default_message = 'Service variant is not currently available'


class PackageCreditError(ReservationStateError):
    """Package credit cannot be applied to the reservation."""
    pass
