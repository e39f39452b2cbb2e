# services/reservation-service/src/tests/integration/test_admin.py
"""
Integration Tests for the Reservation Admin
"""

import pytest
from django.contrib.messages import get_messages

from apps.core.models import Reservation


@pytest.mark.django_db
class TestReservationAdmin:
    """The admin edits notes only and routes approvals through the service."""

    changelist_url = '/admin/core/reservation/'

    def setup_method(self):
        self.change_url = '/admin/core/reservation/{}/change/'

    def test_change_page(self, admin_client, at, create_reservation):
        reservation = create_reservation(at(10))

        response = admin_client.get(self.change_url.format(reservation.id))

        assert response.status_code == 200

    def test_schedule_fields_are_read_only(self, admin_client, at, create_reservation, create_person):
        reservation = create_reservation(at(10))

        response = admin_client.post(self.change_url.format(reservation.id), {
            'customer': str(create_person().id),
            'start_time_0': at(15).date().isoformat(),
            'start_time_1': '15:00:00',
            'status': 'completed',
            'notes': 'Prefers a quiet room',
            '_save': 'Save',
        })

        assert response.status_code == 302
        reservation.refresh_from_db()
        assert reservation.notes == 'Prefers a quiet room'
        assert reservation.start_time == at(10)
        assert reservation.end_time == at(11)
        assert reservation.status == Reservation.Status.CONFIRMED

    def test_add_is_disabled(self, admin_client):
        response = admin_client.get(f'{self.changelist_url}add/')

        assert response.status_code == 403

    def test_approve_action(self, admin_client, at, create_reservation):
        reservation = create_reservation(at(10), status=Reservation.Status.PENDING)

        response = admin_client.post(self.changelist_url, {
            'action': 'approve',
            '_selected_action': [str(reservation.id)],
        })

        assert response.status_code == 302
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CONFIRMED

    def test_reject_action(self, admin_client, at, create_reservation):
        reservation = create_reservation(at(10), status=Reservation.Status.PENDING)

        admin_client.post(self.changelist_url, {
            'action': 'reject',
            '_selected_action': [str(reservation.id)],
        })

        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CANCELLED

    def test_approve_confirmed_reports_error(self, admin_client, at, create_reservation):
        reservation = create_reservation(at(10))

        response = admin_client.post(self.changelist_url, {
            'action': 'approve',
            '_selected_action': [str(reservation.id)],
        })

        messages = [str(m) for m in get_messages(response.wsgi_request)]
        assert any('Only pending reservations can be approved' in m for m in messages)
        reservation.refresh_from_db()
        assert reservation.status == Reservation.Status.CONFIRMED
