# services/reservation-service/src/apps/core/models/person.py
"""
Person Model

Single identity table for customers, providers and administrators.
"""

from django.db import models

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin


class Person(UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin, models.Model):
    """
    A party that can book or provide services.

    The scheduler only asks whether a person can provide services
    (``is_provider``); which role backs that answer is not its concern.
    """

    class Role(models.TextChoices):
        CUSTOMER = 'customer', 'Customer'
        PROVIDER = 'provider', 'Provider'
        ADMIN = 'admin', 'Administrator'

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=30, blank=True, null=True)

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CUSTOMER,
        db_index=True
    )

    # Provider profile
    title = models.CharField(max_length=100, blank=True, null=True)
    bio = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'people'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.full_name} ({self.role})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_provider(self) -> bool:
        """Providers and admins can take bookings."""
        return self.role in (self.Role.PROVIDER, self.Role.ADMIN)

    @property
    def is_staff_member(self) -> bool:
        return self.role in (self.Role.PROVIDER, self.Role.ADMIN)

    @classmethod
    def providers(cls):
        return cls.objects.active().filter(role__in=[cls.Role.PROVIDER, cls.Role.ADMIN])
