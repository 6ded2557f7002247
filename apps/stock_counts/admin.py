# apps/stock_counts/admin.py
"""
Django admin configuration for Stock Count models.

Counts are moved through their workflow by StockCountService, so the
admin exposes status and quantities read-only.
"""
from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin
from .models import StockCount, StockCountItem, CountSchedule, CountScheduleOverride


class StockCountItemInline(admin.TabularInline):
    """Read-only view of count lines."""
    model = StockCountItem
    extra = 0
    can_delete = False
    fields = [
        'sku', 'item_name', 'bin_code', 'expected_quantity', 'counted_quantity',
        'variance', 'status', 'applied_delta',
    ]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StockCount)
class StockCountAdmin(SimpleHistoryAdmin):
    """Admin interface for StockCount with history tracking."""
    list_display = [
        'stock_count_number', 'location_name', 'bin_code', 'count_type',
        'status', 'assigned_to_name', 'due_date', 'created_at'
    ]
    list_filter = ['status', 'count_type', 'auto_generated', 'location']
    search_fields = ['stock_count_number', 'location_name', 'bin_code', 'assigned_to_name']
    readonly_fields = [
        'stock_count_number', 'status', 'location_name', 'bin_code',
        'assigned_to_name', 'assigned_by_name', 'approved_by', 'approved_at',
        'reviewed_by', 'reviewed_by_name', 'review_round',
        'started_at', 'submitted_at', 'rejected_at', 'created_at', 'updated_at',
    ]
    raw_id_fields = ['location', 'bin', 'assigned_to', 'assigned_by']
    date_hierarchy = 'created_at'

    fieldsets = [
        (None, {
            'fields': ['stock_count_number', 'status', 'count_type']
        }),
        ('Where', {
            'fields': ['location', 'location_name', 'bin', 'bin_code']
        }),
        ('Assignment', {
            'fields': ['assigned_to', 'assigned_to_name', 'assigned_by', 'assigned_by_name', 'due_date', 'auto_generated']
        }),
        ('Review', {
            'fields': ['approved_by', 'approved_at', 'reviewed_by', 'reviewed_by_name', 'review_round', 'notes']
        }),
        ('Timestamps', {
            'fields': ['started_at', 'submitted_at', 'rejected_at', 'created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]

    inlines = [StockCountItemInline]


class CountScheduleOverrideInline(admin.TabularInline):
    model = CountScheduleOverride
    extra = 1
    fields = ['date', 'skip', 'reason']


@admin.register(CountSchedule)
class CountScheduleAdmin(admin.ModelAdmin):
    """Weekly count days per location, with holiday and extra-day overrides."""
    list_display = [
        'location', 'monday', 'tuesday', 'wednesday', 'thursday',
        'friday', 'saturday', 'sunday', 'is_active',
    ]
    list_filter = ['is_active']
    search_fields = ['location__code', 'location__name']
    raw_id_fields = ['location']
    inlines = [CountScheduleOverrideInline]
