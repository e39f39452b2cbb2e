# services/reservation-service/src/tests/integration/test_reservation_api.py
"""
Integration Tests for Reservation API

Tests API endpoints with full request/response cycle.
"""

import uuid
from datetime import timedelta

import pytest
from django.core import mail
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.models import Reservation
from shared.common.authentication import JWTTokenGenerator


@pytest.mark.django_db
class TestReservationCrudAPI:
    """Integration tests for the reservation resource."""

    def setup_method(self):
        self.client = APIClient()

    def test_list_reservations(self, at, create_reservation):
        create_reservation(at(14))
        create_reservation(at(10))

        response = self.client.get('/api/reservations')

        assert response.status_code == status.HTTP_200_OK
        assert isinstance(response.data, list)
        assert [r['start_time'] for r in response.data] == sorted(r['start_time'] for r in response.data)
        assert response.data[0]['customer']['email'] == 'jane@example.com'
        assert response.data[0]['variant']['service']['name'] == 'Swedish Massage'

    def test_list_filtered_by_status(self, at, create_reservation):
        create_reservation(at(10))
        create_reservation(at(14), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations', {'status': 'pending'})

        assert len(response.data) == 1
        assert response.data[0]['status'] == 'pending'

    def test_list_invalid_filter(self):
        response = self.client.get('/api/reservations', {'provider_id': 'nope'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'provider_id' in response.data['details']

    def test_list_invalid_limit(self):
        response = self.client.get('/api/reservations', {'limit': 0})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_page(self, at, create_reservation):
        reservations = [create_reservation(at(hour)) for hour in (10, 12, 14, 16)]

        response = self.client.get('/api/reservations', {'limit': 2, 'offset': 1})

        assert response.status_code == status.HTTP_200_OK
        assert [r['id'] for r in response.data] == [str(r.id) for r in reservations[1:3]]

    def test_list_offset_without_limit(self, at, create_reservation):
        reservations = [create_reservation(at(hour)) for hour in (10, 12, 14)]

        response = self.client.get('/api/reservations', {'offset': 2})

        assert [r['id'] for r in response.data] == [str(reservations[2].id)]

    def test_list_limit_not_a_number(self):
        response = self.client.get('/api/reservations', {'limit': 'ten'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'limit' in response.data['details']

    def test_list_negative_offset(self):
        response = self.client.get('/api/reservations', {'offset': -1})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'offset' in response.data['details']

    def test_retrieve(self, at, create_reservation):
        reservation = create_reservation(at(10))

        response = self.client.get(f'/api/reservations/{reservation.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(reservation.id)
        assert response.data['duration_minutes'] == 60
        assert response.data['status_display'] == 'Confirmed'

    def test_retrieve_missing(self):
        response = self.client.get(f'/api/reservations/{uuid.uuid4()}')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {'error': 'not_found', 'message': 'Reservation not found'}

    def test_create_requires_authentication(self, customer, provider, variant, at):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_forbidden_for_customer(self, customer, provider, variant, at, customer_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
        }, format='json', **customer_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_create(self, customer, provider, variant, at, staff_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
            'notes': 'Deep tissue',
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'confirmed'
        assert response.data['end_time'] == at(11).isoformat().replace('+00:00', 'Z')
        assert response.data['notes'] == 'Deep tissue'

    def test_create_missing_fields(self, customer, staff_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'validation_error'
        assert response.data['message'].startswith('Missing required fields')

    def test_create_before_opening(self, customer, provider, variant, at, staff_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(8, 30).isoformat(),
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == 'Reservations must start at 9:00 AM or later'

    def test_create_off_slot(self, customer, provider, variant, at, staff_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10, 15).isoformat(),
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'half-hour' in response.data['message']

    def test_create_gap_conflict(
        self, customer, provider, variant, create_variant, at, create_reservation, staff_headers
    ):
        create_reservation(at(10))
        short = create_variant(name='30 minutes', duration_minutes=30)
        payload = {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(short.id),
        }

        response = self.client.post(
            '/api/reservations', {**payload, 'start_time': at(11, 30).isoformat()},
            format='json', **staff_headers
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'reservation_conflict'
        assert 'at least 1 hour gap' in response.data['message']

        response = self.client.post(
            '/api/reservations', {**payload, 'start_time': at(12).isoformat()},
            format='json', **staff_headers
        )
        assert response.status_code == status.HTTP_201_CREATED

    def test_create_unknown_variant(self, customer, provider, at, staff_headers):
        response = self.client.post('/api/reservations', {
            'customer_id': str(customer.id),
            'provider_id': str(provider.id),
            'variant_id': str(uuid.uuid4()),
            'start_time': at(10).isoformat(),
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Service variant not found'

    def test_update(self, at, create_reservation):
        reservation = create_reservation(at(10))

        response = self.client.put(f'/api/reservations/{reservation.id}', {
            'start_time': at(14).isoformat(),
            'notes': 'Moved',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['notes'] == 'Moved'
        reservation.refresh_from_db()
        assert reservation.end_time == at(15)

    def test_update_rejects_end_time(self, at, create_reservation):
        reservation = create_reservation(at(10))

        response = self.client.put(f'/api/reservations/{reservation.id}', {
            'end_time': at(13).isoformat(),
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_time' in response.data['details']

    def test_update_invalid_transition(self, at, create_reservation):
        reservation = create_reservation(at(10), status=Reservation.Status.CANCELLED)

        response = self.client.put(f'/api/reservations/{reservation.id}', {
            'status': 'confirmed',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid_state'

    def test_delete(self, at, create_reservation):
        reservation = create_reservation(at(10))

        response = self.client.delete(f'/api/reservations/{reservation.id}')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'message': 'Reservation deleted successfully'}
        assert not Reservation.objects.filter(id=reservation.id).exists()

    def test_delete_missing(self):
        response = self.client.delete(f'/api/reservations/{uuid.uuid4()}')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestReservationCalendarAPI:
    """Integration tests for date-range, public and pending views."""

    def setup_method(self):
        self.client = APIClient()

    def test_index(self, at, booking_day, create_reservation):
        create_reservation(at(10))
        create_reservation(at(10, day=booking_day + timedelta(days=2)))

        response = self.client.get('/api/reservations/index', {
            'start_date': booking_day.isoformat(),
            'end_date': booking_day.isoformat(),
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['date_range']['start'].startswith(booking_day.isoformat())
        assert [u['email'] for u in response.data['users']] == ['jane@example.com']
        assert response.data['services'][0]['variants'][0]['duration_minutes'] == 60
        assert len(response.data['variants']) == 1

    def test_index_defaults_to_current_week(self):
        response = self.client.get('/api/reservations/index')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 0

    def test_index_inverted_range(self):
        response = self.client.get('/api/reservations/index', {
            'start_date': '2030-02-03',
            'end_date': '2030-02-01',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == 'start_date must be before or equal to end_date'

    def test_public_hides_customer_data(self, at, booking_day, create_reservation):
        create_reservation(at(10), notes='private')
        create_reservation(at(14), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/public', {
            'start_date': booking_day.isoformat(),
            'end_date': booking_day.isoformat(),
        })

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        public = response.data['reservations'][0]
        assert 'customer' not in public
        assert 'customer_id' not in public
        assert 'notes' not in public
        assert public['provider']['first_name'] == 'Mia'
        assert 'email' not in response.data['providers'][0]

    def test_public_ignores_status_filter(self, at, booking_day, create_reservation):
        create_reservation(at(14), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/public', {
            'start_date': booking_day.isoformat(),
            'end_date': booking_day.isoformat(),
            'status': 'pending',
        })

        assert response.data['count'] == 0

    def test_pending(self, at, create_reservation):
        create_reservation(at(10))
        create_reservation(at(14), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/pending')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['reservations'][0]['status'] == 'pending'

    def test_pending_count_is_total_when_paged(self, at, create_reservation):
        for hour in (10, 13, 16):
            create_reservation(at(hour), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/pending', {'limit': 1})

        assert response.data['count'] == 3
        assert len(response.data['reservations']) == 1

    def test_pending_count(self, at, provider, create_reservation):
        create_reservation(at(10), status=Reservation.Status.PENDING)
        create_reservation(at(14), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/pending/count')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_count'] == 2
        assert response.data['provider_id'] is None
        assert response.data['counts_by_provider'][0]['count'] == 2
        assert response.data['counts_by_provider'][0]['provider']['id'] == str(provider.id)

    def test_pending_count_for_provider(self, at, provider, create_reservation):
        create_reservation(at(10), status=Reservation.Status.PENDING)

        response = self.client.get('/api/reservations/pending/count', {'provider_id': str(provider.id)})

        assert response.data['total_count'] == 1
        assert 'counts_by_provider' not in response.data


@pytest.mark.django_db
class TestApprovalAPI:
    """Integration tests for approve and reject."""

    def setup_method(self):
        self.client = APIClient()

    def test_approve(self, at, create_reservation, staff_headers, django_capture_on_commit_callbacks):
        reservation = create_reservation(at(10), status=Reservation.Status.PENDING)

        with django_capture_on_commit_callbacks(execute=True):
            response = self.client.patch(
                f'/api/reservations/{reservation.id}/approve', **staff_headers
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Reservation approved successfully'
        assert response.data['reservation']['status'] == 'confirmed'
        assert mail.outbox[0].to == ['jane@example.com']

    def test_approve_requires_staff(self, at, create_reservation, customer_headers):
        reservation = create_reservation(at(10), status=Reservation.Status.PENDING)

        response = self.client.patch(
            f'/api/reservations/{reservation.id}/approve', **customer_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_approve_confirmed(self, at, create_reservation, staff_headers):
        reservation = create_reservation(at(10))

        response = self.client.patch(
            f'/api/reservations/{reservation.id}/approve', **staff_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid_state'

    def test_reject_twice(self, at, create_reservation, staff_headers):
        reservation = create_reservation(at(10), status=Reservation.Status.PENDING)

        response = self.client.patch(
            f'/api/reservations/{reservation.id}/reject',
            {'reason': 'no availability'},
            format='json',
            **staff_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reservation']['status'] == 'cancelled'
        assert '[REJECTED] no availability' in response.data['reservation']['notes']

        response = self.client.patch(
            f'/api/reservations/{reservation.id}/reject',
            {'reason': 'again'},
            format='json',
            **staff_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'invalid_state'

    def test_approve_missing(self, staff_headers):
        response = self.client.patch(f'/api/reservations/{uuid.uuid4()}/approve', **staff_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestCustomerAPI:
    """Integration tests for customer self-service endpoints."""

    def setup_method(self):
        self.client = APIClient()

    def test_request_reservation(self, customer, provider, variant, at, customer_headers):
        response = self.client.post('/api/reservation-request', {
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
        }, format='json', **customer_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['customer_id'] == str(customer.id)

    def test_request_ignores_customer_in_body(
        self, customer, provider, variant, at, customer_headers, create_person
    ):
        other = create_person()

        response = self.client.post('/api/reservation-request', {
            'customer_id': str(other.id),
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
        }, format='json', **customer_headers)

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['customer_id'] == str(customer.id)

    def test_request_requires_customer_token(self, provider, variant, at, staff_headers):
        response = self.client.post('/api/reservation-request', {
            'provider_id': str(provider.id),
            'variant_id': str(variant.id),
            'start_time': at(10).isoformat(),
        }, format='json', **staff_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_request_anonymous(self):
        response = self.client.post('/api/reservation-request', {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response['WWW-Authenticate'] == 'Bearer'

    def test_expired_token(self, customer):
        token = JWTTokenGenerator.generate_access_token(
            customer.id, 'customer', lifetime=timedelta(seconds=-10)
        )

        response = self.client.get('/api/my-reservations', HTTP_AUTHORIZATION=f'Bearer {token}')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_my_reservations(self, at, create_reservation, create_person, customer_headers):
        create_reservation(at(10))
        create_reservation(at(14))
        create_reservation(at(16), customer=create_person())

        response = self.client.get('/api/my-reservations', **customer_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        starts = [r['start_time'] for r in response.data['reservations']]
        assert starts == sorted(starts, reverse=True)

    def test_user_reservations_self(self, at, customer, create_reservation, customer_headers):
        create_reservation(at(10))

        response = self.client.get(f'/api/reservations/user/{customer.id}', **customer_headers)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_my_reservations_page(self, at, create_reservation, customer_headers):
        for hour in (10, 13, 16):
            create_reservation(at(hour))

        response = self.client.get('/api/my-reservations', {'limit': 2}, **customer_headers)

        assert response.data['count'] == 3
        assert len(response.data['reservations']) == 2

    def test_user_reservations_uppercase_id(self, at, customer, create_reservation, customer_headers):
        create_reservation(at(10))

        response = self.client.get(
            f'/api/reservations/user/{str(customer.id).upper()}', **customer_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1

    def test_user_reservations_of_someone_else(self, create_person, customer_headers):
        other = create_person()

        response = self.client.get(f'/api/reservations/user/{other.id}', **customer_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestHealthEndpoints:

    def setup_method(self):
        self.client = APIClient()

    def test_health(self):
        response = self.client.get('/health')

        assert response.status_code == status.HTTP_200_OK

    def test_ready(self):
        response = self.client.get('/ready')

        assert response.status_code == status.HTTP_200_OK
