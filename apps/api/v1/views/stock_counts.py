# apps/api/v1/views/stock_counts.py
"""
ViewSet for Stock Counts.

Every mutation is delegated to StockCountService. Service errors are
returned as {'detail', 'code', ...} with the status code the error maps to.
"""
from datetime import date
from django.contrib.auth import get_user_model
from rest_framework import viewsets, mixins, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from apps.api.permissions import CanApproveStockCounts
from apps.stock_counts.exceptions import StockCountError
from apps.stock_counts.services import StockCountService
from apps.api.v1.serializers.stock_counts import (
    StockCountItemSerializer,
    StockCountListSerializer,
    StockCountDetailSerializer,
    StockCountCreateSerializer,
    StockCountFromBinSerializer,
    AddItemsSerializer,
    SaveCountsSerializer,
    ReviewSerializer,
    StockCountStatsSerializer,
    CounterStatsSerializer,
    GenerateCountsSerializer,
    GenerationResultSerializer,
)


def _error_response(exc):
    return Response(exc.to_dict(), status=exc.status_code)


@extend_schema_view(
    list=extend_schema(tags=['stock-counts'], summary='List stock counts'),
    retrieve=extend_schema(tags=['stock-counts'], summary='Get stock count with items'),
    create=extend_schema(
        tags=['stock-counts'],
        summary='Create a stock count',
        request=StockCountCreateSerializer,
        responses={201: StockCountDetailSerializer},
    ),
    destroy=extend_schema(tags=['stock-counts'], summary='Delete a draft stock count'),
)
class StockCountViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for StockCount model.

    Supports creating, starting or claiming, recording counts, submitting,
    and reviewing (approve/reject/recount).
    """
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'location', 'assigned_to', 'count_type']
    search_fields = ['stock_count_number', 'location_name', 'bin_code']
    ordering_fields = ['stock_count_number', 'created_at', 'due_date', 'status']
    ordering = ['-created_at', '-id']

    def get_queryset(self):
        qs = StockCountService().list_counts().with_line_stats()
        if self.action != 'list':
            qs = qs.prefetch_related('items')
        return qs

    def get_serializer_class(self):
        if self.action == 'list':
            return StockCountListSerializer
        return StockCountDetailSerializer

    def get_service(self):
        return StockCountService(self.request.user)

    def _detail(self, count_id, status_code=status.HTTP_200_OK):
        count = self.get_queryset().get(pk=count_id)
        serializer = StockCountDetailSerializer(count, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = StockCountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            count = self.get_service().create_count(**serializer.validated_data)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk, status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        try:
            self.get_service().delete_count(pk)
        except StockCountError as e:
            return _error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=['stock-counts'],
        summary="Create a stock count from a bin's current stock",
        request=StockCountFromBinSerializer,
        responses={201: StockCountDetailSerializer},
    )
    @action(detail=False, methods=['post'], url_path='from-bin')
    def from_bin(self, request):
        serializer = StockCountFromBinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            count = self.get_service().create_count_from_bin(**serializer.validated_data)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk, status.HTTP_201_CREATED)

    @extend_schema(
        tags=['stock-counts'],
        summary='Add items to a draft stock count',
        request=AddItemsSerializer,
        responses={201: StockCountDetailSerializer},
    )
    @action(detail=True, methods=['post'])
    def items(self, request, pk=None):
        serializer = AddItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self.get_service().add_items(pk, serializer.validated_data['items'])
        except StockCountError as e:
            return _error_response(e)
        return self._detail(pk, status.HTTP_201_CREATED)

    @extend_schema(tags=['stock-counts'], summary='Start a draft stock count', request=None)
    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        """Transition from draft to in_progress."""
        try:
            count = self.get_service().start_count(pk)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(tags=['stock-counts'], summary='Claim an unassigned stock count and start it', request=None)
    @action(detail=True, methods=['post'])
    def claim(self, request, pk=None):
        try:
            count = self.get_service().claim_count(pk, user=request.user)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(
        tags=['stock-counts'],
        summary='Record counted quantities',
        request=SaveCountsSerializer,
        responses={200: StockCountItemSerializer(many=True)},
    )
    @action(detail=True, methods=['patch'])
    def counts(self, request, pk=None):
        """Record counted quantities for several lines. All or nothing."""
        serializer = SaveCountsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            lines = self.get_service().save_counts(pk, serializer.validated_data['counts'])
        except StockCountError as e:
            return _error_response(e)
        return Response(StockCountItemSerializer(lines, many=True).data)

    @extend_schema(tags=['stock-counts'], summary='Submit a stock count for review', request=None)
    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        try:
            count = self.get_service().submit_count(pk)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(
        tags=['stock-counts'],
        summary='Approve a stock count and adjust inventory',
        request=ReviewSerializer,
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, CanApproveStockCounts])
    def approve(self, request, pk=None):
        """Approve: apply variances to inventory, then mark approved."""
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            count = self.get_service().approve_count(pk, notes=serializer.validated_data['notes'])
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(
        tags=['stock-counts'],
        summary='Reject a stock count and clear its counts',
        request=ReviewSerializer,
    )
    @action(detail=True, methods=['post'], permission_classes=[IsAuthenticated, CanApproveStockCounts])
    def reject(self, request, pk=None):
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            count = self.get_service().reject_count(pk, notes=serializer.validated_data['notes'])
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(tags=['stock-counts'], summary='Reopen a rejected stock count', request=None)
    @action(detail=True, methods=['post'])
    def recount(self, request, pk=None):
        try:
            count = self.get_service().recount(pk)
        except StockCountError as e:
            return _error_response(e)
        return self._detail(count.pk)

    @extend_schema(tags=['stock-counts'], summary='Stock count dashboard statistics', responses={200: StockCountStatsSerializer})
    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(StockCountStatsSerializer(self.get_service().get_stats()).data)

    @extend_schema(
        tags=['stock-counts'],
        summary='Unclaimed scheduled counts due on a day',
        parameters=[OpenApiParameter('date', date, description='Defaults to today')],
        responses={200: StockCountListSerializer(many=True)},
    )
    @action(detail=False, methods=['get'])
    def available(self, request):
        day = request.query_params.get('date')
        if day:
            try:
                day = date.fromisoformat(day)
            except ValueError:
                return Response({'detail': f'Invalid date: {day}'}, status=status.HTTP_400_BAD_REQUEST)
        counts = self.get_service().list_available(day).with_line_stats()
        return Response(StockCountListSerializer(counts, many=True, context=self.get_serializer_context()).data)

    @extend_schema(
        tags=['stock-counts'],
        summary="Generate the day's scheduled counts",
        request=GenerateCountsSerializer,
        responses={200: GenerationResultSerializer},
    )
    @action(detail=False, methods=['post'], permission_classes=[IsAuthenticated, CanApproveStockCounts])
    def generate(self, request):
        """Create unassigned counts for every bin of the locations scheduled on date."""
        serializer = GenerateCountsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_service().generate_scheduled_counts(serializer.validated_data.get('date'))
        return Response(GenerationResultSerializer(result, context=self.get_serializer_context()).data)

    @extend_schema(
        tags=['stock-counts'],
        summary='Performance statistics for a counter',
        parameters=[OpenApiParameter('user', int, description='Defaults to the current user; reviewers only')],
        responses={200: CounterStatsSerializer},
    )
    @action(detail=False, methods=['get'], url_path='counter-stats')
    def counter_stats(self, request):
        user = request.user
        user_id = request.query_params.get('user')
        if user_id and user_id != str(user.pk):
            if not user_id.isdigit():
                return Response({'detail': f'Invalid user id: {user_id}'}, status=status.HTTP_400_BAD_REQUEST)
            if not CanApproveStockCounts().has_permission(request, self):
                return Response(
                    {'detail': CanApproveStockCounts.message},
                    status=status.HTTP_403_FORBIDDEN,
                )
            user = get_user_model().objects.filter(pk=user_id).first()
            if user is None:
                return Response({'detail': f'User {user_id} does not exist.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(CounterStatsSerializer(self.get_service().get_counter_stats(user)).data)
