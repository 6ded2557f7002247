# apps/items/models.py
"""
Item models for the product catalog.

Models:
- Item: Catalog entry that can be stocked, scanned and counted

Stock counts copy the item's name and SKU onto each count line, so
renaming an item never rewrites the history of past counts.
"""
from django.db import models
from simple_history.models import HistoricalRecords
from shared.models import TimestampMixin


class Item(TimestampMixin):
    """
    Product catalog entry.

    Items are identified by SKU for humans and by barcode for scanners.
    Serial-tracked units carry barcodes of the form '<SKU>/<serial>'
    which resolve back to the parent item.
    """
    sku = models.CharField(
        max_length=100,
        unique=True,
        help_text="Stock Keeping Unit"
    )
    name = models.CharField(
        max_length=255,
        help_text="Item name"
    )
    barcode = models.CharField(
        max_length=100,
        unique=True,
        null=True,
        blank=True,
        help_text="Scannable barcode (EAN/UPC or internal)"
    )
    description = models.TextField(
        blank=True,
        help_text="General description"
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Inactive items are hidden from selections"
    )

    # Audit trail
    history = HistoricalRecords()

    class Meta:
        ordering = ['sku']
        indexes = [
            models.Index(fields=['name']),
            models.Index(fields=['is_active']),
        ]

    def __str__(self):
        return f"{self.sku} - {self.name}"
