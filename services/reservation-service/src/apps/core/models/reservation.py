# services/reservation-service/src/apps/core/models/reservation.py
"""
Reservation Model

A customer's time-bound booking of one service variant with one provider.
"""

from django.db import models
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class Reservation(UUIDPrimaryKeyMixin, TimestampMixin, models.Model):
    """
    Reservation of a provider's time.

    ``end_time`` is always derived from ``start_time`` and the variant's
    duration by the lifecycle service; clients never set it directly.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        CONFIRMED = 'confirmed', 'Confirmed'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'
        NO_SHOW = 'no_show', 'No Show'

    # Statuses that do not block a provider's calendar
    INACTIVE_STATUSES = (Status.CANCELLED, Status.NO_SHOW)
    TERMINAL_STATUSES = (Status.CANCELLED, Status.COMPLETED, Status.NO_SHOW)
    PUBLIC_STATUSES = (Status.CONFIRMED, Status.COMPLETED)

    ALLOWED_TRANSITIONS = {
        Status.PENDING: (
            Status.CONFIRMED, Status.CANCELLED, Status.COMPLETED, Status.NO_SHOW,
        ),
        Status.CONFIRMED: (
            Status.CANCELLED, Status.COMPLETED, Status.NO_SHOW,
        ),
        Status.CANCELLED: (),
        Status.COMPLETED: (),
        Status.NO_SHOW: (),
    }

    customer = models.ForeignKey(
        'core.Person',
        on_delete=models.CASCADE,
        related_name='reservations'
    )
    provider = models.ForeignKey(
        'core.Person',
        on_delete=models.CASCADE,
        related_name='provided_reservations'
    )
    variant = models.ForeignKey(
        'core.ServiceVariant',
        on_delete=models.PROTECT,
        related_name='reservations'
    )
    package_credit = models.ForeignKey(
        'core.PackageCredit',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='reservations'
    )

    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'reservations'
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['provider', 'start_time', 'end_time']),
            models.Index(fields=['customer', 'start_time']),
            models.Index(fields=['status', 'start_time']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F('start_time')),
                name='valid_reservation_times'
            ),
        ]

    def __str__(self):
        return f"{self.provider_id} {self.start_time:%Y-%m-%d %H:%M} ({self.status})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() / 60)

    @property
    def is_active(self) -> bool:
        return self.status not in self.INACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def is_past(self) -> bool:
        return self.end_time < timezone.now()

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in self.ALLOWED_TRANSITIONS.get(self.status, ())

    # ==========================================================================
    # Query helpers
    # ==========================================================================

    @classmethod
    def with_relations(cls):
        """Queryset joined with customer, provider, variant and service."""
        return cls.objects.select_related(
            'customer', 'provider', 'variant', 'variant__service', 'package_credit'
        )

    @classmethod
    def active_for_provider(cls, provider_id):
        return cls.objects.filter(provider_id=provider_id).exclude(
            status__in=cls.INACTIVE_STATUSES
        )
