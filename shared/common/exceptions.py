# shared/common/exceptions.py
"""
Domain Exception Base and DRF Exception Handler
"""

import logging
from typing import Dict, Any, Optional
from rest_framework import status
from rest_framework.views import exception_handler
from rest_framework.response import Response
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR KINDS
# =============================================================================

class ErrorKind:
    """Transport-agnostic error categories raised by service layers."""

    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    INVALID_STATE = 'invalid_state'


KIND_STATUS_CODES = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
}


# =============================================================================
# BASE EXCEPTIONS
# =============================================================================

class DomainError(Exception):
    """
    Base class for errors raised by service layers.

    Service code never deals with HTTP. Each error carries a ``kind``
    which the exception handler below turns into a status code.
    """

    kind = ErrorKind.VALIDATION
    error_code = 'error'
    default_message = 'The request could not be processed.'

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.extra_data = extra_data or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return KIND_STATUS_CODES.get(self.kind, status.HTTP_400_BAD_REQUEST)


# =============================================================================
# EXCEPTION HANDLER
# =============================================================================

def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    Custom exception handler for DRF.
    Provides consistent ``{"error": ..., "message": ...}`` bodies.
    """

    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, DomainError):
        body = {'error': exc.error_code, 'message': exc.message}
        body.update(exc.extra_data)
        return Response(body, status=exc.status_code)

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        return format_error_response(exc, response)

    if isinstance(exc, DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        return Response(
            {
                'error': 'validation_error',
                'message': 'Validation error',
                'details': errors,
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    if isinstance(exc, Http404):
        return Response(
            {'error': 'not_found', 'message': str(exc) or 'Resource not found'},
            status=status.HTTP_404_NOT_FOUND
        )

    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
        }
    )

    return Response(
        {
            'error': 'internal_error',
            'message': 'An unexpected error occurred. Please try again later.',
            'request_id': request_id,
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def format_error_response(exc, response: Response) -> Response:
    """Format DRF-handled errors in the same structure."""

    error_data = {
        'error': get_error_code(exc),
        'message': get_error_message(exc, response),
    }

    # Field-level validation errors from serializers
    if isinstance(response.data, dict) and 'detail' not in response.data:
        error_data['details'] = response.data
    elif isinstance(response.data, list):
        error_data['details'] = response.data

    response.data = error_data
    return response


def get_error_code(exc) -> str:
    codes = getattr(exc, 'default_code', None)
    return codes if isinstance(codes, str) else 'error'


def get_error_message(exc, response: Response) -> str:
    """Extract error message from exception or response"""

    if hasattr(exc, 'detail'):
        if isinstance(exc.detail, str):
            return str(exc.detail)
        if isinstance(exc.detail, list) and exc.detail:
            return str(exc.detail[0])
        if isinstance(exc.detail, dict):
            if 'detail' in exc.detail:
                return str(exc.detail['detail'])
            return 'Invalid request data'

    if isinstance(response.data, dict):
        return str(response.data.get('detail', response.data))

    return str(response.data)
