# services/reservation-service/src/apps/core/models/__init__.py
"""
Reservation Service Models
"""

from .person import Person
from .catalog import Service, ServiceVariant, Package, PackageItem, PackageCredit
from .reservation import Reservation

__all__ = [
    'Person',
    'Service',
    'ServiceVariant',
    'Package',
    'PackageItem',
    'PackageCredit',
    'Reservation',
]
