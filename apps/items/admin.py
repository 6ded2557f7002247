# apps/items/admin.py
"""
Django admin configuration for Item models.
"""
from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin
from .models import Item


@admin.register(Item)
class ItemAdmin(SimpleHistoryAdmin):
    """Admin interface for Item with history tracking."""
    list_display = ['sku', 'name', 'barcode', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['sku', 'name', 'barcode']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = [
        (None, {
            'fields': ['sku', 'name', 'barcode']
        }),
        ('Details', {
            'fields': ['description', 'is_active']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]
