# apps/api/v1/serializers/items.py
"""
Serializers for Item model.
"""
from rest_framework import serializers
from apps.items.models import Item


class ItemSerializer(serializers.ModelSerializer):
    """Serializer for Item with on-hand quantity across all locations."""
    current_stock = serializers.DecimalField(max_digits=14, decimal_places=4, read_only=True)

    class Meta:
        model = Item
        fields = [
            'id', 'sku', 'name', 'barcode', 'description', 'is_active',
            'current_stock', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class ItemLookupSerializer(serializers.Serializer):
    """Result of a barcode lookup."""
    id = serializers.IntegerField()
    name = serializers.CharField()
    sku = serializers.CharField()
    current_stock = serializers.DecimalField(max_digits=14, decimal_places=4)
