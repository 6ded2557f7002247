# apps/items/services.py
"""
Catalog lookups used by counting and scanning workflows.
"""
import logging
import re
from decimal import Decimal
from django.db import models

from .models import Item

logger = logging.getLogger(__name__)

# Serial-tracked units are labelled '<SKU>/<serial number>'
SERIAL_BARCODE_RE = re.compile(r'^(?P<sku>.+)/\d+$')


class CatalogService:
    """
    Read-only access to the item catalog.

    Usage:
        catalog = CatalogService()
        info = catalog.resolve_item(item_id)
        item = catalog.resolve_item_by_barcode('8901234567890')
    """

    def resolve_item(self, item_id):
        """
        Resolve an item id to its display fields and current stock.

        Returns:
            dict: {'id', 'name', 'sku', 'current_stock'}

        Raises:
            Item.DoesNotExist: If no item has this id
        """
        item = Item.objects.get(pk=item_id)
        current_stock = item.stock_levels.aggregate(
            total=models.Sum('quantity')
        )['total'] or Decimal('0')
        return {
            'id': item.pk,
            'name': item.name,
            'sku': item.sku,
            'current_stock': current_stock,
        }

    def resolve_item_by_barcode(self, code):
        """
        Find the active item for a scanned code.

        Tries, in order: exact barcode, exact SKU, then a serial barcode
        ('SKU-0032/1') matched to its parent SKU.

        Returns:
            Item or None if nothing matches
        """
        code = (code or '').strip()
        if not code:
            return None

        active = Item.objects.filter(is_active=True)
        item = active.filter(barcode=code).first() or active.filter(sku=code).first()
        if item is None:
            match = SERIAL_BARCODE_RE.match(code)
            if match:
                item = active.filter(sku=match.group('sku')).first()

        if item is None:
            logger.info(f'Barcode lookup found no item: code={code}')
        return item
