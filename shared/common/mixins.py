# shared/common/mixins.py
"""
Model Mixins

Abstract bases shared by people, catalog entries and reservations.
"""

import uuid
from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """UUID primary key, safe to expose in URLs and tokens."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ActiveQuerySet(models.QuerySet):

    def active(self):
        return self.filter(is_active=True)

    def inactive(self):
        return self.filter(is_active=False)


class ActiveMixin(models.Model):
    """
    Soft on/off switch.

    Deactivated providers, services and variants keep their history
    but can no longer take new reservations.
    """

    is_active = models.BooleanField(default=True, db_index=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        abstract = True
