# apps/api/v1/serializers/stock_counts.py
"""
Serializers for Stock Count models and workflow actions.

Counts and lines are read-only through these serializers; every change
goes through StockCountService via the action input serializers below.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.items.models import Item
from apps.warehousing.models import Location, Bin
from apps.stock_counts.models import StockCount, StockCountItem, accuracy_percentage

User = get_user_model()


# =============================================================================
# READ SERIALIZERS
# =============================================================================

class StockCountItemSerializer(serializers.ModelSerializer):
    """Serializer for one count line. Variance and status are derived."""

    class Meta:
        model = StockCountItem
        fields = [
            'id', 'stock_count', 'item', 'item_name', 'sku',
            'bin', 'bin_code', 'expected_quantity', 'counted_quantity',
            'variance', 'status', 'counted_at', 'notes', 'applied_delta',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class StockCountListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for count listings.

    Line statistics come from StockCountQuerySet.with_line_stats()
    annotations when present, otherwise they are computed from the lines.
    """
    total_items = serializers.SerializerMethodField()
    counted_items = serializers.SerializerMethodField()
    matched_items = serializers.SerializerMethodField()
    mismatched_items = serializers.SerializerMethodField()
    accuracy_percentage = serializers.SerializerMethodField()

    class Meta:
        model = StockCount
        fields = [
            'id', 'stock_count_number', 'status', 'count_type',
            'location', 'location_name', 'bin', 'bin_code',
            'assigned_to', 'assigned_to_name', 'assigned_by_name',
            'due_date', 'auto_generated',
            'approved_by', 'approved_at', 'reviewed_by', 'reviewed_by_name',
            'review_round', 'notes',
            'started_at', 'submitted_at', 'rejected_at',
            'total_items', 'counted_items', 'matched_items',
            'mismatched_items', 'accuracy_percentage',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def _summary(self, obj):
        if hasattr(obj, 'counted_items'):
            return {
                'total_items': obj.total_items,
                'counted_items': obj.counted_items,
                'matched_items': obj.matched_items,
                'mismatched_items': obj.counted_items - obj.matched_items,
                'accuracy_percentage': accuracy_percentage(obj.matched_items, obj.counted_items),
            }
        cache = self.context.setdefault('_summaries', {})
        if obj.pk not in cache:
            cache[obj.pk] = obj.summary()
        return cache[obj.pk]

    def get_total_items(self, obj) -> int:
        return self._summary(obj)['total_items']

    def get_counted_items(self, obj) -> int:
        return self._summary(obj)['counted_items']

    def get_matched_items(self, obj) -> int:
        return self._summary(obj)['matched_items']

    def get_mismatched_items(self, obj) -> int:
        return self._summary(obj)['mismatched_items']

    def get_accuracy_percentage(self, obj) -> str:
        return str(self._summary(obj)['accuracy_percentage'])


class StockCountDetailSerializer(StockCountListSerializer):
    items = StockCountItemSerializer(many=True, read_only=True)

    class Meta(StockCountListSerializer.Meta):
        fields = StockCountListSerializer.Meta.fields + ['items']
        read_only_fields = fields


# =============================================================================
# ACTION INPUT SERIALIZERS
# =============================================================================

class StockCountItemInputSerializer(serializers.Serializer):
    """One expected line for a new or draft count."""
    item = serializers.PrimaryKeyRelatedField(queryset=Item.objects.all())
    expected_quantity = serializers.DecimalField(
        max_digits=14, decimal_places=4,
        help_text="System quantity expected at the bin/location"
    )
    bin = serializers.PrimaryKeyRelatedField(
        queryset=Bin.objects.all(), required=False, allow_null=True,
        help_text="Bin holding the item (defaults to the count's bin)"
    )


class StockCountCreateSerializer(serializers.Serializer):
    """Serializer for creating a stock count."""
    location = serializers.PrimaryKeyRelatedField(queryset=Location.objects.all())
    bin = serializers.PrimaryKeyRelatedField(queryset=Bin.objects.all(), required=False, allow_null=True)
    assigned_to = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    count_type = serializers.ChoiceField(choices=StockCount.COUNT_TYPE_CHOICES, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    items = StockCountItemInputSerializer(many=True, required=False, default=list)


class StockCountFromBinSerializer(serializers.Serializer):
    """Serializer for creating a count from a bin's current stock."""
    bin = serializers.PrimaryKeyRelatedField(queryset=Bin.objects.all())
    assigned_to = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    count_type = serializers.ChoiceField(choices=StockCount.COUNT_TYPE_CHOICES, required=False)
    due_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AddItemsSerializer(serializers.Serializer):
    items = StockCountItemInputSerializer(many=True, allow_empty=False)


class CountEntrySerializer(serializers.Serializer):
    """A counted quantity for one line."""
    line_id = serializers.IntegerField(help_text="StockCountItem ID")
    counted_quantity = serializers.DecimalField(
        max_digits=14, decimal_places=4,
        help_text="Actual counted quantity"
    )
    notes = serializers.CharField(required=False, allow_blank=True)


class SaveCountsSerializer(serializers.Serializer):
    counts = CountEntrySerializer(many=True, allow_empty=False)


class ReviewSerializer(serializers.Serializer):
    """Optional notes for approve/reject."""
    notes = serializers.CharField(required=False, allow_blank=True, default='')


# =============================================================================
# READ MODELS
# =============================================================================

class StockCountStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    draft = serializers.IntegerField()
    in_progress = serializers.IntegerField()
    submitted = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()
    avg_accuracy = serializers.DecimalField(max_digits=5, decimal_places=2)


class CounterStatsSerializer(serializers.Serializer):
    total_counts = serializers.IntegerField()
    completed_counts = serializers.IntegerField()
    pending_counts = serializers.IntegerField()
    submitted_counts = serializers.IntegerField()
    avg_accuracy = serializers.DecimalField(max_digits=5, decimal_places=2)


class GenerateCountsSerializer(serializers.Serializer):
    """Input for generating scheduled counts."""
    date = serializers.DateField(required=False, allow_null=True, help_text="Defaults to today")


class GenerationResultSerializer(serializers.Serializer):
    date = serializers.DateField()
    generated = StockCountListSerializer(many=True)
    skipped = serializers.IntegerField()
    empty = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())
