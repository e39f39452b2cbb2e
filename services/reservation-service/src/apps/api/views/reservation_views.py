# services/reservation-service/src/apps/api/views/reservation_views.py
"""
Reservation API Views

Thin HTTP layer over the reservation services. Domain errors propagate
to the shared exception handler, which maps them to status codes.
"""

import logging

from rest_framework import generics, viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.services import (
    CatalogService,
    ReservationQueryService,
    ReservationService,
)
from apps.api.serializers import (
    DateRangeQuerySerializer,
    PersonSummarySerializer,
    ProviderProfileSerializer,
    PublicReservationSerializer,
    ReservationCreateSerializer,
    ReservationRejectSerializer,
    ReservationRequestSerializer,
    ReservationSerializer,
    ReservationUpdateSerializer,
    ServiceCatalogSerializer,
    VariantSummarySerializer,
)
from shared.common.pagination import OffsetPagination
from shared.common.permissions import IsAuthenticated, IsCustomer, IsSelf, IsStaff
from .filters import ReservationFilter

logger = logging.getLogger(__name__)

UUID_PATTERN = r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}'


def date_range_params(request) -> dict:
    serializer = DateRangeQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class ReservationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for reservation management.

    Staff create, approve and reject; everything else is open
    except per-user history, which is limited to its owner.
    """

    serializer_class = ReservationSerializer
    lookup_value_regex = UUID_PATTERN
    pagination_class = OffsetPagination

    permission_classes_by_action = {
        'create': [IsStaff],
        'approve': [IsStaff],
        'reject': [IsStaff],
        'user_reservations': [IsSelf],
    }

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.reservation_service = ReservationService()
        self.query_service = ReservationQueryService()
        self.catalog_service = CatalogService()

    def get_permissions(self):
        classes = self.permission_classes_by_action.get(self.action, [AllowAny])
        return [permission() for permission in classes]

    def get_serializer_class(self):
        """Return appropriate serializer based on action."""
        if self.action == 'create':
            return ReservationCreateSerializer
        elif self.action == 'update':
            return ReservationUpdateSerializer
        elif self.action == 'reject':
            return ReservationRejectSerializer
        return ReservationSerializer

    # ==========================================================================
    # CRUD
    # ==========================================================================

    def list(self, request):
        """Filtered list, ordered by start time."""
        filters = ReservationFilter.parse(request.query_params)
        page = self.paginate_queryset(self.query_service.list_reservations(**filters))
        return self.get_paginated_response(ReservationSerializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        reservation = self.reservation_service.get_reservation(pk)
        return Response(ReservationSerializer(reservation).data)

    def create(self, request):
        """Staff-created reservation (confirmed)."""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = self.reservation_service.create_reservation(**serializer.validated_data)
        return Response(
            ReservationSerializer(reservation).data,
            status=status.HTTP_201_CREATED
        )

    def update(self, request, pk=None):
        """Partial update; only the supplied fields change."""
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        reservation = self.reservation_service.update_reservation(pk, **serializer.validated_data)
        return Response(ReservationSerializer(reservation).data)

    def destroy(self, request, pk=None):
        self.reservation_service.delete_reservation(pk)
        return Response({'message': 'Reservation deleted successfully'})

    # ==========================================================================
    # Date-range views
    # ==========================================================================

    @action(detail=False, methods=['get'])
    def index(self, request):
        """Reservations in a date range (current week by default) with catalog data."""
        start, end = self.query_service.resolve_date_range(**date_range_params(request))
        filters = ReservationFilter.parse(request.query_params)
        reservations = list(self.query_service.list_in_range(start, end, **filters))

        customers = {r.customer.id: r.customer for r in reservations}
        services = self.catalog_service.list_active_services().prefetch_related('variants')

        return Response({
            'date_range': {
                'start': start.isoformat(),
                'end': end.isoformat(),
            },
            'count': len(reservations),
            'reservations': ReservationSerializer(reservations, many=True).data,
            'services': ServiceCatalogSerializer(services, many=True).data,
            'variants': VariantSummarySerializer(
                self.catalog_service.list_active_variants(), many=True
            ).data,
            'users': PersonSummarySerializer(list(customers.values()), many=True).data,
        })

    @action(detail=False, methods=['get'])
    def public(self, request):
        """Confirmed and completed reservations, without customer data."""
        start, end = self.query_service.resolve_date_range(**date_range_params(request))
        filters = ReservationFilter.parse(request.query_params, exclude=('customer_id', 'status'))
        reservations = list(self.query_service.list_public_in_range(start, end, **filters))

        services = self.catalog_service.list_active_services().prefetch_related('variants')

        return Response({
            'date_range': {
                'start': start.isoformat(),
                'end': end.isoformat(),
            },
            'count': len(reservations),
            'reservations': PublicReservationSerializer(reservations, many=True).data,
            'services': ServiceCatalogSerializer(services, many=True).data,
            'providers': ProviderProfileSerializer(
                self.catalog_service.list_providers(), many=True
            ).data,
        })

    # ==========================================================================
    # Pending approval
    # ==========================================================================

    @action(detail=False, methods=['get'])
    def pending(self, request):
        filters = ReservationFilter.parse(request.query_params, exclude=('status',))
        page = self.paginate_queryset(self.query_service.list_pending(**filters))

        return Response({
            'count': self.paginator.count,
            'reservations': ReservationSerializer(page, many=True).data,
        })

    @action(detail=False, methods=['get'], url_path='pending/count')
    def pending_count(self, request):
        filters = ReservationFilter.parse(request.query_params, exclude=('customer_id', 'status'))
        summary = self.query_service.pending_summary(**filters)

        data = {
            'total_count': summary.total_count,
            'provider_id': summary.provider_id,
            'reservations': ReservationSerializer(summary.reservations, many=True).data,
        }
        if summary.counts_by_provider is not None:
            data['counts_by_provider'] = [
                {
                    'provider_id': row['provider_id'],
                    'count': row['count'],
                    'provider': ProviderProfileSerializer(row['provider']).data
                    if row['provider'] else None,
                }
                for row in summary.counts_by_provider
            ]
        return Response(data)

    @action(detail=True, methods=['patch'])
    def approve(self, request, pk=None):
        reservation = self.reservation_service.approve_reservation(pk)
        return Response({
            'message': 'Reservation approved successfully',
            'reservation': ReservationSerializer(reservation).data,
        })

    @action(detail=True, methods=['patch'])
    def reject(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = self.reservation_service.reject_reservation(
            pk, reason=serializer.validated_data.get('reason')
        )
        return Response({
            'message': 'Reservation rejected successfully',
            'reservation': ReservationSerializer(reservation).data,
        })

    # ==========================================================================
    # Customer history
    # ==========================================================================

    @action(detail=False, methods=['get'], url_path=rf'user/(?P<user_id>{UUID_PATTERN})')
    def user_reservations(self, request, user_id=None):
        """A customer's own reservations, newest first."""
        filters = ReservationFilter.parse(request.query_params, exclude=('customer_id',))
        page = self.paginate_queryset(
            self.query_service.list_customer_reservations(user_id, **filters)
        )
        return self.get_paginated_response(ReservationSerializer(page, many=True).data)


class ReservationRequestView(APIView):
    """Customer self-service reservation request (pending)."""

    permission_classes = [IsCustomer]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.reservation_service = ReservationService()

    def post(self, request):
        serializer = ReservationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        reservation = self.reservation_service.request_reservation(
            customer_id=request.user.id,
            **serializer.validated_data
        )
        return Response(
            ReservationSerializer(reservation).data,
            status=status.HTTP_201_CREATED
        )


class MyReservationsView(generics.GenericAPIView):
    """The authenticated caller's reservations, newest first."""

    serializer_class = ReservationSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = OffsetPagination

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.query_service = ReservationQueryService()

    def get(self, request):
        filters = ReservationFilter.parse(request.query_params, exclude=('customer_id',))
        page = self.paginate_queryset(
            self.query_service.list_customer_reservations(request.user.id, **filters)
        )

        return Response({
            'count': self.paginator.count,
            'reservations': ReservationSerializer(page, many=True).data,
        })
