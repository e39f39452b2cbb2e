# services/reservation-service/src/apps/core/models/catalog.py
"""
Catalog Models

Services, their bookable variants, packages and purchased package credits.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from shared.common.mixins import UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin


class Service(UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin, models.Model):
    """A service offered by the business (e.g. massage)."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'services'
        ordering = ['name']

    def __str__(self):
        return self.name


class ServiceVariant(UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin, models.Model):
    """
    Bookable configuration of a service with its own duration and price.

    Deactivated variants stay referenced by past reservations.
    """

    service = models.ForeignKey(
        Service,
        on_delete=models.CASCADE,
        related_name='variants'
    )
    name = models.CharField(max_length=255)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        db_table = 'service_variants'
        ordering = ['service__name', 'duration_minutes']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration_minutes__gte=1),
                name='variant_duration_positive'
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name='variant_price_non_negative'
            ),
        ]

    def __str__(self):
        return f"{self.service.name} - {self.name} ({self.duration_minutes} min)"

    @property
    def is_bookable(self) -> bool:
        return self.is_active and self.service.is_active


class Package(UUIDPrimaryKeyMixin, TimestampMixin, ActiveMixin, models.Model):
    """Bundle of variants sold together."""

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    class Meta:
        db_table = 'packages'
        ordering = ['name']

    def __str__(self):
        return self.name


class PackageItem(UUIDPrimaryKeyMixin, models.Model):
    package = models.ForeignKey(
        Package,
        on_delete=models.CASCADE,
        related_name='items'
    )
    variant = models.ForeignKey(
        ServiceVariant,
        on_delete=models.PROTECT,
        related_name='package_items'
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )

    class Meta:
        db_table = 'package_items'
        constraints = [
            models.UniqueConstraint(
                fields=['package', 'variant'],
                name='unique_package_variant'
            ),
        ]

    def __str__(self):
        return f"{self.package.name}: {self.quantity} x {self.variant.name}"


class PackageCredit(UUIDPrimaryKeyMixin, TimestampMixin, models.Model):
    """
    A customer's purchased entitlement to one package item.

    Each reservation paid out of the credit uses one unit.
    """

    customer = models.ForeignKey(
        'core.Person',
        on_delete=models.CASCADE,
        related_name='package_credits'
    )
    package_item = models.ForeignKey(
        PackageItem,
        on_delete=models.PROTECT,
        related_name='credits'
    )
    used_quantity = models.PositiveIntegerField(default=0)
    purchased_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        db_table = 'package_credits'
        ordering = ['-purchased_at']

    def __str__(self):
        return f"{self.customer_id}: {self.remaining} x {self.package_item.variant.name}"

    @property
    def remaining(self) -> int:
        return max(self.package_item.quantity - self.used_quantity, 0)

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= timezone.now()
