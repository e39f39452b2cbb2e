# services/reservation-service/src/tests/conftest.py
"""
Pytest Configuration and Fixtures

Provides common fixtures for reservation service tests.
"""

import uuid
from datetime import datetime, time, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from shared.common.authentication import JWTTokenGenerator


@pytest.fixture
def api_client():
    """Provide API client for testing."""
    return APIClient()


@pytest.fixture
def booking_day():
    """A weekday one week from now, far enough ahead to never be in the past."""
    return timezone.localdate() + timedelta(days=7)


@pytest.fixture
def at(booking_day):
    """Build an aware local datetime on the booking day."""
    def _at(hour, minute=0, day=None):
        return timezone.make_aware(datetime.combine(day or booking_day, time(hour, minute)))

    return _at


# ==========================================================================
# People
# ==========================================================================

@pytest.fixture
def create_person():
    """Factory fixture for creating people."""
    from apps.core.models import Person

    def _create_person(**kwargs):
        suffix = uuid.uuid4().hex[:8]
        defaults = {
            'first_name': 'Test',
            'last_name': f'Person {suffix}',
            'email': f'person-{suffix}@example.com',
            'role': Person.Role.CUSTOMER,
        }
        defaults.update(kwargs)

        return Person.objects.create(**defaults)

    return _create_person


@pytest.fixture
def customer(create_person):
    return create_person(first_name='Jane', last_name='Doe', email='jane@example.com')


@pytest.fixture
def provider(create_person):
    from apps.core.models import Person

    return create_person(
        first_name='Mia',
        last_name='Lind',
        email='mia@example.com',
        role=Person.Role.PROVIDER,
        title='Massage Therapist',
    )


@pytest.fixture
def admin_person(create_person):
    from apps.core.models import Person

    return create_person(
        first_name='Ada',
        last_name='Admin',
        email='admin@example.com',
        role=Person.Role.ADMIN,
    )


# ==========================================================================
# Catalog
# ==========================================================================

@pytest.fixture
def create_service():
    """Factory fixture for creating services."""
    from apps.core.models import Service

    def _create_service(**kwargs):
        defaults = {'name': 'Swedish Massage'}
        defaults.update(kwargs)
        return Service.objects.create(**defaults)

    return _create_service


@pytest.fixture
def create_variant(create_service):
    """Factory fixture for creating service variants."""
    from apps.core.models import ServiceVariant

    def _create_variant(**kwargs):
        if 'service' not in kwargs:
            kwargs['service'] = create_service()
        defaults = {
            'name': '60 minutes',
            'duration_minutes': 60,
            'price': Decimal('80.00'),
        }
        defaults.update(kwargs)
        return ServiceVariant.objects.create(**defaults)

    return _create_variant


@pytest.fixture
def variant(create_variant):
    """A 60 minute variant."""
    return create_variant()


@pytest.fixture
def create_package_credit(variant):
    """Factory fixture for package credits covering ``variant`` by default."""
    from apps.core.models import Package, PackageItem, PackageCredit

    def _create_package_credit(customer, quantity=5, used_quantity=0, expires_at=None, item_variant=None):
        package = Package.objects.create(name='Five Sessions', price=Decimal('350.00'))
        item = PackageItem.objects.create(
            package=package,
            variant=item_variant or variant,
            quantity=quantity,
        )
        return PackageCredit.objects.create(
            customer=customer,
            package_item=item,
            used_quantity=used_quantity,
            expires_at=expires_at,
        )

    return _create_package_credit


# ==========================================================================
# Reservations
# ==========================================================================

@pytest.fixture
def create_reservation(customer, provider, variant):
    """
    Factory fixture for creating reservations directly, bypassing the
    placement rules.
    """
    from apps.core.models import Reservation

    def _create_reservation(start_time, **kwargs):
        defaults = {
            'customer': customer,
            'provider': provider,
            'variant': variant,
            'status': Reservation.Status.CONFIRMED,
        }
        defaults.update(kwargs)
        if 'end_time' not in defaults:
            defaults['end_time'] = start_time + timedelta(minutes=defaults['variant'].duration_minutes)

        return Reservation.objects.create(start_time=start_time, **defaults)

    return _create_reservation


# ==========================================================================
# Authentication
# ==========================================================================

@pytest.fixture
def auth_headers_for():
    """Build a bearer Authorization header for a person."""
    def _auth_headers_for(person, user_type=None):
        token = JWTTokenGenerator.generate_access_token(
            user_id=person.id,
            user_type=user_type or person.role,
            email=person.email,
        )
        return {'HTTP_AUTHORIZATION': f'Bearer {token}'}

    return _auth_headers_for


@pytest.fixture
def customer_headers(auth_headers_for, customer):
    return auth_headers_for(customer)


@pytest.fixture
def staff_headers(auth_headers_for, admin_person):
    return auth_headers_for(admin_person)
