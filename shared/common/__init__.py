# Shared Common Library for the salon booking services.
# Authentication, permissions, error handling, middleware and model mixins
# used by every service in this repository.

__version__ = "1.0.0"

from .exceptions import (
    ErrorKind,
    DomainError,
    custom_exception_handler,
)

__all__ = [
    '__version__',
    'ErrorKind',
    'DomainError',
    'custom_exception_handler',
]
