# apps/api/v1/views/items.py
"""
ViewSets for Item model.
"""
from decimal import Decimal
from django.db.models import Sum, Value, DecimalField
from django.db.models.functions import Coalesce
from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from apps.items.models import Item
from apps.items.services import CatalogService
from apps.api.v1.serializers.items import ItemSerializer, ItemLookupSerializer


@extend_schema_view(
    list=extend_schema(tags=['items'], summary='List all items'),
    retrieve=extend_schema(tags=['items'], summary='Get item details'),
)
class ItemViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for Item model.

    Read-only catalog with on-hand quantity and barcode lookup.
    """
    serializer_class = ItemSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['is_active']
    search_fields = ['sku', 'name', 'barcode']
    ordering_fields = ['sku', 'name', 'created_at']
    ordering = ['sku']

    def get_queryset(self):
        return Item.objects.annotate(
            current_stock=Coalesce(
                Sum('stock_levels__quantity'),
                Value(Decimal('0')),
                output_field=DecimalField(max_digits=14, decimal_places=4),
            ),
        )

    @extend_schema(
        tags=['items'],
        summary='Look up an item by barcode, SKU or serial barcode',
        parameters=[OpenApiParameter('barcode', str, required=True)],
        responses={200: ItemLookupSerializer},
    )
    @action(detail=False, methods=['get'])
    def lookup(self, request):
        """Resolve a scanned code to an item."""
        code = request.query_params.get('barcode', '').strip()
        if not code:
            return Response({'detail': 'barcode is required.'}, status=status.HTTP_400_BAD_REQUEST)

        catalog = CatalogService()
        item = catalog.resolve_item_by_barcode(code)
        if item is None:
            return Response({'detail': f'No item found for {code}.'}, status=status.HTTP_404_NOT_FOUND)
        return Response(ItemLookupSerializer(catalog.resolve_item(item.pk)).data)
