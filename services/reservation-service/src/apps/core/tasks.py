# services/reservation-service/src/apps/core/tasks.py
"""
Celery Tasks for Reservation Service

Asynchronous delivery of reservation e-mails.
"""

import logging
from typing import Dict, Any, List, Optional

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def send_reservation_email(
    recipients: List[str],
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    template: str = None,
) -> Dict[str, Any]:
    """
    Send one reservation e-mail.

    Delivery is best-effort: failures are logged and never retried.

    Args:
        recipients: e-mail addresses
        subject: subject line
        body: plain-text body
        html_body: optional HTML alternative
        template: template name, for logging only

    Returns:
        Dict with send result
    """
    recipients = [r for r in recipients if r]
    if not recipients:
        logger.warning(f"Reservation email '{template}' has no recipients")
        return {'success': False, 'error': 'No recipients'}

    try:
        message = EmailMultiAlternatives(
            subject=subject,
            body=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=recipients,
        )
        if html_body:
            message.attach_alternative(html_body, 'text/html')
        message.send(fail_silently=False)
    except Exception as e:
        logger.error(f"Failed to send reservation email '{template}' to {recipients}: {e}")
        return {'success': False, 'error': str(e)}

    logger.info(f"Reservation email '{template}' sent to {len(recipients)} recipient(s)")
    return {'success': True, 'recipients': len(recipients)}
