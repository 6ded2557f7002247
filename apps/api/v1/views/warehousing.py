# apps/api/v1/views/warehousing.py
"""
ViewSets for Warehousing models: Location, Bin.
"""
from django.db.models import Count
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.warehousing.models import Location, Bin
from apps.warehousing.services import LocationDirectory
from apps.api.v1.serializers.warehousing import (
    LocationSerializer, BinSerializer, StockLevelSerializer,
)


@extend_schema_view(
    list=extend_schema(tags=['warehousing'], summary='List all locations'),
    retrieve=extend_schema(tags=['warehousing'], summary='Get location details'),
)
class LocationViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only directory of stock locations."""
    serializer_class = LocationSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active']
    search_fields = ['code', 'name']
    ordering_fields = ['code', 'name', 'created_at']
    ordering = ['code']

    def get_queryset(self):
        return Location.objects.annotate(bin_count=Count('bins'))

    @extend_schema(
        tags=['warehousing'],
        summary='List bins for a location',
        responses={200: BinSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def bins(self, request, pk=None):
        """List all bins in this location."""
        location = self.get_object()
        serializer = BinSerializer(location.bins.all(), many=True, context={'request': request})
        return Response(serializer.data)


@extend_schema_view(
    list=extend_schema(tags=['warehousing'], summary='List all bins'),
    retrieve=extend_schema(tags=['warehousing'], summary='Get bin details'),
)
class BinViewSet(viewsets.ReadOnlyModelViewSet):
    """Read-only directory of bins."""
    serializer_class = BinSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['location', 'is_active']
    search_fields = ['code', 'description']
    ordering_fields = ['location__code', 'code', 'created_at']
    ordering = ['location__code', 'code']

    def get_queryset(self):
        return Bin.objects.select_related('location').all()

    @extend_schema(
        tags=['warehousing'],
        summary='List stock held in a bin',
        responses={200: StockLevelSerializer(many=True)}
    )
    @action(detail=True, methods=['get'])
    def stock(self, request, pk=None):
        """Positive stock levels in this bin."""
        bin_ = self.get_object()
        levels = LocationDirectory().get_bin_stock(bin_.pk)
        return Response(StockLevelSerializer(levels, many=True).data)
