# apps/warehousing/admin.py
"""
Django admin configuration for Warehousing models.
"""
from django.contrib import admin
from .models import Location, Bin, StockLevel, InventoryAdjustment


class BinInline(admin.TabularInline):
    """Inline editor for Bins within a Location."""
    model = Bin
    extra = 3
    fields = ['code', 'description', 'is_active']


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    """Admin interface for Location."""
    list_display = ['code', 'name', 'is_active', 'bin_count']
    list_filter = ['is_active']
    search_fields = ['name', 'code']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = [
        (None, {
            'fields': ['code', 'name', 'is_active']
        }),
        ('Notes', {
            'fields': ['notes'],
            'classes': ['collapse']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]

    inlines = [BinInline]

    def bin_count(self, obj):
        return obj.bins.count()
    bin_count.short_description = 'Bins'


@admin.register(Bin)
class BinAdmin(admin.ModelAdmin):
    """Admin interface for Bin."""
    list_display = ['code', 'location', 'description', 'is_active']
    list_filter = ['location', 'is_active']
    search_fields = ['code', 'location__name', 'location__code']
    raw_id_fields = ['location']


@admin.register(StockLevel)
class StockLevelAdmin(admin.ModelAdmin):
    """Admin interface for StockLevel."""
    list_display = ['item', 'location', 'bin', 'quantity', 'updated_at']
    list_filter = ['location']
    search_fields = ['item__sku', 'item__name', 'bin__code']
    raw_id_fields = ['item', 'location', 'bin']


@admin.register(InventoryAdjustment)
class InventoryAdjustmentAdmin(admin.ModelAdmin):
    """Read-only ledger view of applied adjustments."""
    list_display = ['idempotency_key', 'item', 'location', 'bin', 'delta', 'quantity_after', 'created_at']
    list_filter = ['location', 'created_at']
    search_fields = ['idempotency_key', 'reference', 'item__sku']
    readonly_fields = [
        'idempotency_key', 'item', 'location', 'bin', 'delta',
        'quantity_after', 'reference', 'created_by', 'created_at', 'updated_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
