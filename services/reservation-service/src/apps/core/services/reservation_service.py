# services/reservation-service/src/apps/core/services/reservation_service.py
"""
Reservation Service

Core business logic for placing and changing reservations.
"""

import uuid
import logging
from datetime import datetime, timedelta
from typing import Optional, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from apps.core.models import Person, PackageCredit, Reservation, ServiceVariant
from .availability_rules import is_on_valid_slot_boundary, is_within_business_hours
from .catalog_service import CatalogService
from .conflict_detector import ConflictDetector
from .exceptions import (
    CustomerNotFoundError,
    PackageCreditError,
    PackageCreditNotFoundError,
    ProviderNotFoundError,
    ReservationConflictError,
    ReservationNotFoundError,
    ReservationStateError,
    ReservationValidationError,
    VariantUnavailableError,
)
from .notifications import ReservationNotifier
from .policy import SchedulingPolicy

logger = logging.getLogger(__name__)

LOOKUP_ERRORS = (ValueError, DjangoValidationError)


class ReservationService:
    """
    Service for managing reservations.

    Handles:
    - Placement (staff create, customer request)
    - Rescheduling and status changes
    - Approval / rejection
    - Package credit consumption

    Every placement runs inside a transaction that first locks the
    provider's row, so two bookings for one provider are checked and
    written one after the other.
    """

    UPDATABLE_FIELDS = (
        'start_time', 'variant_id', 'provider_id', 'customer_id', 'notes', 'status',
    )
    RESCHEDULE_FIELDS = ('start_time', 'variant_id', 'provider_id')

    def __init__(
        self,
        policy: SchedulingPolicy = None,
        notifier: ReservationNotifier = None,
        conflict_detector: ConflictDetector = None,
        catalog: CatalogService = None,
    ):
        self.policy = policy or SchedulingPolicy.from_settings()
        self.notifier = notifier or ReservationNotifier()
        self.conflict_detector = conflict_detector or ConflictDetector(self.policy)
        self.catalog = catalog or CatalogService()

    # ==========================================================================
    # Placement
    # ==========================================================================

    def create_reservation(
        self,
        customer_id: uuid.UUID = None,
        provider_id: uuid.UUID = None,
        variant_id: uuid.UUID = None,
        start_time: Any = None,
        notes: str = None,
        package_credit_id: uuid.UUID = None,
    ) -> Reservation:
        """Staff-created reservation, confirmed immediately."""
        return self._place_reservation(
            status=Reservation.Status.CONFIRMED,
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            start_time=start_time,
            notes=notes,
            package_credit_id=package_credit_id,
        )

    def request_reservation(
        self,
        customer_id: uuid.UUID = None,
        provider_id: uuid.UUID = None,
        variant_id: uuid.UUID = None,
        start_time: Any = None,
        notes: str = None,
        package_credit_id: uuid.UUID = None,
    ) -> Reservation:
        """Customer self-service request, pending until staff approve it."""
        return self._place_reservation(
            status=Reservation.Status.PENDING,
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            start_time=start_time,
            notes=notes,
            package_credit_id=package_credit_id,
        )

    def _place_reservation(
        self,
        status: str,
        customer_id,
        provider_id,
        variant_id,
        start_time,
        notes,
        package_credit_id,
    ) -> Reservation:
        self._require_fields(
            customer_id=customer_id,
            provider_id=provider_id,
            variant_id=variant_id,
            start_time=start_time,
        )

        start = self._parse_start(start_time)
        self._validate_start(start, 'Cannot create reservations for past dates or times')

        with transaction.atomic():
            provider = self._lock_provider(provider_id)
            customer = self._get_customer(customer_id)
            variant = self._get_bookable_variant(variant_id)

            end = self._compute_end(start, variant)
            self._validate_business_hours(start, end)
            self._ensure_gap(provider.id, start, end)

            credit = None
            if package_credit_id:
                credit = self._consume_credit(package_credit_id, customer, variant)

            reservation = Reservation.objects.create(
                customer=customer,
                provider=provider,
                variant=variant,
                package_credit=credit,
                start_time=start,
                end_time=end,
                status=status,
                notes=notes,
            )

            logger.info(
                f"Reservation {reservation.id} created ({status}) for provider "
                f"{provider.id} at {start.isoformat()}"
            )

            result = self.get_reservation(reservation.id)
            if status == Reservation.Status.PENDING:
                transaction.on_commit(
                    lambda: self.notifier.notify_admins_of_pending_reservation(result),
                    robust=True,
                )

        return result

    # ==========================================================================
    # Reads
    # ==========================================================================

    def get_reservation(self, reservation_id: uuid.UUID) -> Reservation:
        """Reservation joined with customer, provider, variant and service."""
        try:
            return Reservation.with_relations().get(id=reservation_id)
        except (Reservation.DoesNotExist, *LOOKUP_ERRORS):
            raise ReservationNotFoundError()

    # ==========================================================================
    # Changes
    # ==========================================================================

    @transaction.atomic
    def update_reservation(self, reservation_id: uuid.UUID, **changes) -> Reservation:
        """
        Apply a partial update.

        Changing the start, the variant or the provider recomputes the end
        time and re-runs the business-hours and gap checks, excluding the
        reservation itself from the gap check.
        """
        unknown = sorted(set(changes) - set(self.UPDATABLE_FIELDS))
        if unknown:
            raise ReservationValidationError(f"Unknown fields: {', '.join(unknown)}")

        reservation = self._get_for_update(reservation_id)
        previous_status = reservation.status

        new_status = changes.get('status')
        if new_status is not None and new_status != previous_status:
            self._validate_transition(reservation, new_status)

        reschedule = {
            key: changes[key] for key in self.RESCHEDULE_FIELDS
            if changes.get(key) is not None
        }
        if reschedule:
            if reservation.is_terminal:
                raise ReservationStateError(
                    f"Cannot reschedule reservation with status '{reservation.status}'"
                )
            self._reschedule(reservation, **reschedule)

        if changes.get('customer_id') is not None:
            reservation.customer = self._get_customer(changes['customer_id'])

        if reservation.package_credit_id and (
            changes.get('variant_id') is not None or changes.get('customer_id') is not None
        ):
            self._check_linked_credit(reservation)

        if 'notes' in changes:
            reservation.notes = changes['notes']

        if new_status is not None and new_status != previous_status:
            reservation.status = new_status
            if new_status == Reservation.Status.CANCELLED:
                self._release_credit(reservation)

        reservation.save()

        logger.info(
            f"Reservation {reservation.id} updated: {', '.join(sorted(changes)) or 'no changes'}"
        )
        return self.get_reservation(reservation.id)

    def _reschedule(self, reservation: Reservation, start_time=None, variant_id=None, provider_id=None):
        if start_time is not None:
            start = self._parse_start(start_time)
            self._validate_start(start, 'Cannot update reservation to a past date or time')
        else:
            start = reservation.start_time

        provider = self._lock_provider(provider_id or reservation.provider_id)
        variant = self._get_bookable_variant(variant_id or reservation.variant_id)

        end = self._compute_end(start, variant)
        self._validate_business_hours(start, end)
        self._ensure_gap(provider.id, start, end, exclude_reservation_id=reservation.id)

        reservation.provider = provider
        reservation.variant = variant
        reservation.start_time = start
        reservation.end_time = end

    @transaction.atomic
    def approve_reservation(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = self._get_for_update(reservation_id)

        if reservation.status != Reservation.Status.PENDING:
            raise ReservationStateError(
                f"Cannot approve reservation with status '{reservation.status}'. "
                f"Only pending reservations can be approved."
            )

        reservation.status = Reservation.Status.CONFIRMED
        reservation.save(update_fields=['status', 'updated_at'])

        logger.info(f"Reservation {reservation.id} approved")

        result = self.get_reservation(reservation.id)
        transaction.on_commit(
            lambda: self.notifier.notify_customer_of_approved_reservation(result),
            robust=True,
        )
        return result

    @transaction.atomic
    def reject_reservation(self, reservation_id: uuid.UUID, reason: Optional[str] = None) -> Reservation:
        reservation = self._get_for_update(reservation_id)

        if reservation.status != Reservation.Status.PENDING:
            raise ReservationStateError(
                f"Cannot reject reservation with status '{reservation.status}'. "
                f"Only pending reservations can be rejected."
            )

        reservation.status = Reservation.Status.CANCELLED
        if reason:
            rejection_note = f"[REJECTED] {reason}"
            reservation.notes = (
                f"{reservation.notes}\n{rejection_note}" if reservation.notes else rejection_note
            )
        self._release_credit(reservation)
        reservation.save(update_fields=['status', 'notes', 'updated_at'])

        logger.info(f"Reservation {reservation.id} rejected")

        result = self.get_reservation(reservation.id)
        transaction.on_commit(
            lambda: self.notifier.notify_customer_of_rejected_reservation(result, reason),
            robust=True,
        )
        return result

    @transaction.atomic
    def delete_reservation(self, reservation_id: uuid.UUID) -> None:
        reservation = self._get_for_update(reservation_id)

        if not reservation.is_terminal:
            self._release_credit(reservation)

        reservation.delete()
        logger.info(f"Reservation {reservation_id} deleted")

    # ==========================================================================
    # Validation
    # ==========================================================================

    def _require_fields(self, **fields) -> None:
        missing = [name for name, value in fields.items() if value in (None, '')]
        if missing:
            raise ReservationValidationError(f"Missing required fields: {', '.join(missing)}")

    def _parse_start(self, value: Any) -> datetime:
        if isinstance(value, datetime):
            parsed = value
        else:
            try:
                parsed = parse_datetime(str(value).strip())
            except ValueError:
                parsed = None
            if parsed is None:
                raise ReservationValidationError('Invalid date format for start_time')

        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed

    def _compute_end(self, start: datetime, variant: ServiceVariant) -> datetime:
        try:
            return start + timedelta(minutes=variant.duration_minutes)
        except OverflowError:
            raise ReservationValidationError('Reservation end time is out of range')

    def _validate_start(self, start: datetime, past_message: str) -> None:
        if start < timezone.now():
            raise ReservationValidationError(past_message)

        if not is_on_valid_slot_boundary(start, self.policy):
            raise ReservationValidationError(
                'Reservation time must be on the hour (e.g., 9:00) or half-hour (e.g., 9:30)'
            )

    def _validate_business_hours(self, start: datetime, end: datetime) -> None:
        check = is_within_business_hours(start, end, self.policy)
        if not check.valid:
            raise ReservationValidationError(check.message)

    def _ensure_gap(self, provider_id, start, end, exclude_reservation_id=None) -> None:
        conflicts = self.conflict_detector.conflicting_reservations(
            provider_id, start, end, exclude_reservation_id
        )
        conflict_ids = list(conflicts.values_list('id', flat=True))
        if conflict_ids:
            logger.warning(
                f"Rejected placement for provider {provider_id} at {start.isoformat()}: "
                f"conflicts with {[str(c) for c in conflict_ids]}"
            )
            raise ReservationConflictError(
                f"There must be at least {self.policy.min_gap_label} gap "
                f"between reservations for this provider",
                conflicts=conflict_ids,
            )

    def _validate_transition(self, reservation: Reservation, new_status: str) -> None:
        if new_status not in Reservation.Status.values:
            raise ReservationValidationError(f"Invalid status '{new_status}'")

        if not reservation.can_transition_to(new_status):
            raise ReservationStateError(
                f"Cannot change reservation status from '{reservation.status}' to '{new_status}'"
            )

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def _get_for_update(self, reservation_id) -> Reservation:
        try:
            return Reservation.objects.select_for_update().get(id=reservation_id)
        except (Reservation.DoesNotExist, *LOOKUP_ERRORS):
            raise ReservationNotFoundError()

    def _lock_provider(self, provider_id) -> Person:
        try:
            provider = Person.objects.select_for_update().get(id=provider_id)
        except (Person.DoesNotExist, *LOOKUP_ERRORS):
            raise ProviderNotFoundError()

        if not provider.is_provider:
            raise ReservationValidationError('Selected person cannot take reservations')
        if not provider.is_active:
            raise ReservationStateError('Provider is not currently available')
        return provider

    def _get_customer(self, customer_id) -> Person:
        try:
            return Person.objects.get(id=customer_id)
        except (Person.DoesNotExist, *LOOKUP_ERRORS):
            raise CustomerNotFoundError()

    def _get_bookable_variant(self, variant_id) -> ServiceVariant:
        variant = self.catalog.find_variant_by_id(variant_id, lock=True)
        if not variant.is_bookable:
            raise VariantUnavailableError()
        return variant

    # ==========================================================================
    # Package credits
    # ==========================================================================

    def _consume_credit(self, credit_id, customer: Person, variant: ServiceVariant) -> PackageCredit:
        try:
            credit = PackageCredit.objects.select_for_update().select_related(
                'package_item'
            ).get(id=credit_id)
        except (PackageCredit.DoesNotExist, *LOOKUP_ERRORS):
            raise PackageCreditNotFoundError()

        self._ensure_credit_applies(credit, customer.id, variant.id)
        if credit.is_expired:
            raise PackageCreditError('Package credit has expired')
        if credit.remaining <= 0:
            raise PackageCreditError('Package credit has no remaining sessions')

        credit.used_quantity += 1
        credit.save(update_fields=['used_quantity', 'updated_at'])
        logger.info(f"Package credit {credit.id} used ({credit.remaining} remaining)")
        return credit

    def _ensure_credit_applies(self, credit: PackageCredit, customer_id, variant_id) -> None:
        if credit.customer_id != customer_id:
            raise PackageCreditError('Package credit does not belong to this customer')
        if credit.package_item.variant_id != variant_id:
            raise PackageCreditError('Package credit does not cover this service variant')

    def _check_linked_credit(self, reservation: Reservation) -> None:
        """A linked credit must still match the reservation's customer and variant."""
        credit = PackageCredit.objects.select_related('package_item').get(
            id=reservation.package_credit_id
        )
        self._ensure_credit_applies(credit, reservation.customer_id, reservation.variant_id)

    def _release_credit(self, reservation: Reservation) -> None:
        if not reservation.package_credit_id:
            return

        credit = PackageCredit.objects.select_for_update().get(id=reservation.package_credit_id)
        if credit.used_quantity > 0:
            credit.used_quantity -= 1
            credit.save(update_fields=['used_quantity', 'updated_at'])
            logger.info(f"Package credit {credit.id} restored by reservation {reservation.id}")
