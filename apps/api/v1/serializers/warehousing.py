# apps/api/v1/serializers/warehousing.py
"""
Serializers for Warehousing models: Location, Bin, StockLevel.
"""
from rest_framework import serializers
from apps.warehousing.models import Location, Bin, StockLevel


class BinSerializer(serializers.ModelSerializer):
    """Serializer for Bin model."""
    location_code = serializers.CharField(source='location.code', read_only=True)

    class Meta:
        model = Bin
        fields = [
            'id', 'location', 'location_code', 'code', 'description',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class LocationSerializer(serializers.ModelSerializer):
    """Serializer for Location model."""
    bin_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Location
        fields = [
            'id', 'code', 'name', 'is_active', 'notes', 'bin_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']


class StockLevelSerializer(serializers.ModelSerializer):
    item_sku = serializers.CharField(source='item.sku', read_only=True)
    item_name = serializers.CharField(source='item.name', read_only=True)
    bin_code = serializers.CharField(source='bin.code', read_only=True, allow_null=True)

    class Meta:
        model = StockLevel
        fields = ['id', 'item', 'item_sku', 'item_name', 'location', 'bin', 'bin_code', 'quantity']
        read_only_fields = fields
