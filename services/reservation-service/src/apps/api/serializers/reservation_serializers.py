# services/reservation-service/src/apps/api/serializers/reservation_serializers.py
"""
Reservation Serializers

Input serializers only check shape; scheduling rules live in the service layer.
"""

from rest_framework import serializers

from apps.core.models import Person, Service, ServiceVariant, Reservation


# =============================================================================
# Related summaries
# =============================================================================

class PersonSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Person
        fields = ['id', 'first_name', 'last_name', 'email', 'phone', 'role']


class ProviderSummarySerializer(serializers.ModelSerializer):
    """Provider fields safe for anonymous callers."""

    class Meta:
        model = Person
        fields = ['id', 'first_name', 'last_name', 'title']


class ProviderProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Person
        fields = ['id', 'first_name', 'last_name', 'title', 'bio', 'is_active']


class ServiceSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ['id', 'name', 'description']


class VariantSummarySerializer(serializers.ModelSerializer):
    service_id = serializers.UUIDField(read_only=True)
    service = ServiceSummarySerializer(read_only=True)

    class Meta:
        model = ServiceVariant
        fields = ['id', 'service_id', 'name', 'duration_minutes', 'price', 'is_active', 'service']


class VariantOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceVariant
        fields = ['id', 'name', 'duration_minutes', 'price', 'is_active']


class ServiceCatalogSerializer(serializers.ModelSerializer):
    """Active service with its active variants."""

    variants = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'is_active', 'variants']

    def get_variants(self, obj) -> list:
        variants = [v for v in obj.variants.all() if v.is_active]
        return VariantOptionSerializer(variants, many=True).data


# =============================================================================
# Reservation output
# =============================================================================

class ReservationSerializer(serializers.ModelSerializer):
    """Reservation with customer, provider and variant joined."""

    customer_id = serializers.UUIDField(read_only=True)
    provider_id = serializers.UUIDField(read_only=True)
    variant_id = serializers.UUIDField(read_only=True)
    package_credit_id = serializers.UUIDField(read_only=True, allow_null=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    duration_minutes = serializers.IntegerField(read_only=True)
    customer = PersonSummarySerializer(read_only=True)
    provider = PersonSummarySerializer(read_only=True)
    variant = VariantSummarySerializer(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'customer_id', 'provider_id', 'variant_id', 'package_credit_id',
            'start_time', 'end_time', 'duration_minutes',
            'status', 'status_display', 'notes',
            'customer', 'provider', 'variant',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class PublicVariantSerializer(serializers.ModelSerializer):
    service_id = serializers.UUIDField(read_only=True)
    service = ServiceSummarySerializer(read_only=True)

    class Meta:
        model = ServiceVariant
        fields = ['id', 'service_id', 'name', 'duration_minutes', 'price', 'service']


class PublicReservationSerializer(serializers.ModelSerializer):
    """
    Anonymous-safe projection.

    No customer identity, notes or package credit.
    """

    provider_id = serializers.UUIDField(read_only=True)
    variant_id = serializers.UUIDField(read_only=True)
    provider = ProviderSummarySerializer(read_only=True)
    variant = PublicVariantSerializer(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            'id', 'provider_id', 'variant_id',
            'start_time', 'end_time', 'status',
            'provider', 'variant',
        ]
        read_only_fields = fields


# =============================================================================
# Reservation input
# =============================================================================

class ReservationRequestSerializer(serializers.Serializer):
    """Customer self-service request. The customer comes from the token."""

    provider_id = serializers.UUIDField(required=False, allow_null=True)
    variant_id = serializers.UUIDField(required=False, allow_null=True)
    start_time = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    package_credit_id = serializers.UUIDField(required=False, allow_null=True)


class ReservationCreateSerializer(ReservationRequestSerializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)


class ReservationUpdateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False)
    provider_id = serializers.UUIDField(required=False)
    variant_id = serializers.UUIDField(required=False)
    start_time = serializers.CharField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=Reservation.Status.choices, required=False)

    def validate(self, attrs):
        # end_time is derived, never accepted
        if 'end_time' in self.initial_data:
            raise serializers.ValidationError(
                {'end_time': 'End time is computed from the start time and variant duration.'}
            )
        return attrs


class ReservationRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# =============================================================================
# Query parameters
# =============================================================================

class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.CharField(required=False, allow_blank=True)
    end_date = serializers.CharField(required=False, allow_blank=True)
