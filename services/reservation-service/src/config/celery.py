"""
Celery application for the Reservation Service.

Reads every ``CELERY_*`` value from Django settings.
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.base')

app = Celery('reservation_service')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks(['apps.core'])
