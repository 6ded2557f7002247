# apps/warehousing/models.py
"""
Storage location and on-hand stock models.

Models:
- Location: A store or warehouse where stock is held
- Bin: Storage slot within a location (aisle/rack/shelf)
- StockLevel: On-hand quantity of an item at a location (optionally a bin)
- InventoryAdjustment: Ledger of quantity changes applied to stock levels
"""
from django.db import models
from django.conf import settings
from shared.models import TimestampMixin


class Location(TimestampMixin):
    """
    Physical location holding stock.

    Example:
        - MAIN - Main Warehouse
        - STORE1 - Downtown Store
    """
    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Short code (e.g., 'MAIN', 'STORE1')"
    )
    name = models.CharField(
        max_length=100,
        help_text="Location name (e.g., 'Main Warehouse')"
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive locations are hidden from selections"
    )
    notes = models.TextField(
        blank=True,
        help_text="Notes about this location"
    )

    class Meta:
        ordering = ['code']
        indexes = [
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"


class Bin(TimestampMixin):
    """
    Storage slot within a location.

    Example bin codes:
        - A-01-01 (Aisle A, Rack 01, Shelf 01)
        - G2-FLOOR (floor stack)
    """
    location = models.ForeignKey(
        Location,
        on_delete=models.CASCADE,
        related_name='bins',
        help_text="Location this bin is in"
    )
    code = models.CharField(
        max_length=50,
        help_text="Bin identifier (e.g., 'A-01-01')"
    )
    description = models.CharField(
        max_length=255,
        blank=True,
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive bins are hidden from selections"
    )

    class Meta:
        unique_together = [('location', 'code')]
        ordering = ['location', 'code']
        indexes = [
            models.Index(fields=['location', 'is_active']),
        ]

    def __str__(self):
        return f"{self.location.code}:{self.code}"


class StockLevel(TimestampMixin):
    """
    On-hand quantity of one item at one location.

    A null bin means stock held at the location without a bin assignment.
    """
    item = models.ForeignKey(
        'items.Item',
        on_delete=models.PROTECT,
        related_name='stock_levels',
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='stock_levels',
    )
    bin = models.ForeignKey(
        Bin,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='stock_levels',
    )
    quantity = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=0,
        help_text="Quantity on hand"
    )

    class Meta:
        unique_together = [('item', 'location', 'bin')]
        indexes = [
            models.Index(fields=['item', 'location']),
            models.Index(fields=['bin']),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='stock_level_qty_non_negative'
            ),
        ]

    def __str__(self):
        where = self.bin if self.bin_id else self.location.code
        return f"{self.item.sku} @ {where}: {self.quantity}"


class InventoryAdjustment(TimestampMixin):
    """
    Audit record of a quantity change applied to a stock level.

    The idempotency_key is unique: applying the same key twice returns
    the original adjustment instead of changing stock again.
    """
    idempotency_key = models.CharField(
        max_length=200,
        unique=True,
        help_text="Caller-supplied key identifying this adjustment (e.g., 'stock-count:12:line:40')"
    )
    item = models.ForeignKey(
        'items.Item',
        on_delete=models.PROTECT,
        related_name='inventory_adjustments',
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='inventory_adjustments',
    )
    bin = models.ForeignKey(
        Bin,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='inventory_adjustments',
    )
    delta = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        help_text="Signed quantity change (positive = stock found, negative = stock lost)"
    )
    quantity_after = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        help_text="On-hand quantity after this adjustment"
    )
    reference = models.CharField(
        max_length=200,
        blank=True,
        help_text="Reference (e.g., 'SC-2026-0004 approval')"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='inventory_adjustments',
    )

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['item', 'created_at']),
        ]

    def __str__(self):
        return f"Adjust {self.item.sku} by {self.delta} ({self.idempotency_key})"
