# services/reservation-service/src/apps/core/services/notifications.py
"""
Reservation Notifications

Best-effort e-mails for reservation transitions. Nothing here raises:
a failed notification is logged and never affects the reservation.
"""

import logging
from typing import List, Optional

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone

from apps.core.models import Person, Reservation

logger = logging.getLogger(__name__)


class EmailTemplate:
    PENDING = 'reservation_pending'
    CONFIRMATION = 'reservation_confirmation'
    CANCELLED = 'reservation_cancelled'


class ReservationNotifier:
    """Builds reservation e-mails and queues them on the Celery worker."""

    def notify_admins_of_pending_reservation(self, reservation: Reservation) -> bool:
        return self._dispatch(
            EmailTemplate.PENDING,
            reservation,
            'New reservation request: {service_name} on {date}',
            admins=True,
        )

    def notify_customer_of_approved_reservation(self, reservation: Reservation) -> bool:
        return self._dispatch(
            EmailTemplate.CONFIRMATION,
            reservation,
            'Your reservation has been confirmed',
        )

    def notify_customer_of_rejected_reservation(
        self,
        reservation: Reservation,
        reason: Optional[str] = None
    ) -> bool:
        return self._dispatch(
            EmailTemplate.CANCELLED,
            reservation,
            'Your reservation request was declined',
            reason=reason,
        )

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def get_admin_recipients(self) -> List[str]:
        emails = list(
            Person.objects.active().filter(role=Person.Role.ADMIN).values_list('email', flat=True)
        )
        for email in getattr(settings, 'RESERVATION_ADMIN_EMAILS', []):
            if email not in emails:
                emails.append(email)
        return emails

    def build_context(self, reservation: Reservation, reason: Optional[str] = None) -> dict:
        start = timezone.localtime(reservation.start_time)
        customer = reservation.customer
        return {
            'first_name': customer.first_name,
            'customer_name': customer.full_name,
            'customer_email': customer.email,
            'service_name': reservation.variant.service.name,
            'variant_name': reservation.variant.name,
            'provider_name': reservation.provider.full_name,
            'date': start.strftime('%A, %B %d, %Y'),
            'time': start.strftime('%H:%M'),
            'duration': reservation.duration_minutes,
            'notes': reservation.notes,
            'reason': reason,
        }

    def _dispatch(
        self,
        template: str,
        reservation: Reservation,
        subject: str,
        admins: bool = False,
        reason: Optional[str] = None,
    ) -> bool:
        from apps.core.tasks import send_reservation_email

        recipients = []
        try:
            if admins:
                recipients = self.get_admin_recipients()
            else:
                recipients = [reservation.customer.email]
            context = self.build_context(reservation, reason=reason)
            subject = subject.format(**context)
            body = render_to_string(f'reservations/email/{template}.txt', context)
            html_body = render_to_string(f'reservations/email/{template}.html', context)
            send_reservation_email.delay(
                recipients=recipients,
                subject=subject,
                body=body,
                html_body=html_body,
                template=template,
            )
        except Exception as e:
            logger.error(f"Failed to queue '{template}' notification: {e}")
            return False

        logger.info(f"Queued '{template}' notification for {len(recipients)} recipient(s)")
        return True
