# apps/warehousing/services.py
"""
Service layer for locations, bins and stock adjustments.

Provides directory lookups and an idempotent, transactional way to
apply quantity changes to on-hand stock with a full audit trail.
"""
import logging
from decimal import Decimal, InvalidOperation
from django.db import transaction
from django.core.exceptions import ValidationError

from apps.items.models import Item
from .models import Location, Bin, StockLevel, InventoryAdjustment

logger = logging.getLogger(__name__)


class AdjustmentError(ValidationError):
    """An adjustment could not be applied (unknown target, stock would go negative)."""


class LocationDirectory:
    """Lookups for locations and bins."""

    def resolve_location(self, location_id):
        """
        Return the display name of a location.

        Raises:
            Location.DoesNotExist
        """
        return Location.objects.values_list('name', flat=True).get(pk=location_id)

    def resolve_bin(self, bin_id):
        """
        Return a bin's code and owning location.

        Returns:
            dict: {'code', 'location_id'}

        Raises:
            Bin.DoesNotExist
        """
        bin_ = Bin.objects.get(pk=bin_id)
        return {'code': bin_.code, 'location_id': bin_.location_id}

    def get_bin_stock(self, bin_id):
        """All positive stock levels held in a bin, ordered by item name."""
        return StockLevel.objects.filter(
            bin_id=bin_id,
            quantity__gt=0,
        ).select_related('item', 'location', 'bin').order_by('item__name', 'pk')


class InventoryAdjustmentService:
    """
    Applies signed quantity changes to stock levels.

    Every adjustment is keyed by a caller-supplied idempotency key. Replaying
    a key that was already applied returns the existing record and leaves
    stock untouched, so callers may safely retry. Reusing a key for a
    different item, bin or delta raises AdjustmentError.

    Usage:
        service = InventoryAdjustmentService(user)
        adjustment, created = service.apply_adjustment(
            item_id=item.pk,
            delta=Decimal('-2'),
            idempotency_key='stock-count:7:line:21',
            bin_id=bin.pk,
        )
    """

    def __init__(self, user=None):
        self.user = user

    def apply_adjustment(self, item_id, delta, idempotency_key, bin_id=None, location_id=None, reference=''):
        """
        Apply delta to the stock of an item at a bin or location.

        Args:
            item_id: Item PK
            delta: Signed quantity (non-zero)
            idempotency_key: Unique key for this change
            bin_id: Optional Bin PK (location is taken from the bin)
            location_id: Location PK, required when no bin is given
            reference: Optional reference string for the ledger

        Returns:
            tuple: (InventoryAdjustment, created)

        Raises:
            AdjustmentError: If the target is unknown, stock would go negative
                or the key was used for a different adjustment
        """
        try:
            delta = Decimal(str(delta))
        except InvalidOperation:
            raise AdjustmentError(f"Invalid adjustment quantity: {delta}")
        if delta == 0:
            raise AdjustmentError("Adjustment quantity must be non-zero.")

        with transaction.atomic():
            existing = InventoryAdjustment.objects.filter(idempotency_key=idempotency_key).first()
            if existing:
                if (existing.item_id, existing.bin_id, existing.delta) != (item_id, bin_id, delta):
                    raise AdjustmentError(
                        f"Idempotency key {idempotency_key} was already used for a different adjustment "
                        f"(item {existing.item_id}, delta {existing.delta})."
                    )
                logger.info(f'Adjustment replay ignored: key={idempotency_key}')
                return existing, False

            bin_, location = self._resolve_target(bin_id, location_id)
            if not Item.objects.filter(pk=item_id).exists():
                raise AdjustmentError(f"Item {item_id} does not exist.")

            level, _ = StockLevel.objects.select_for_update().get_or_create(
                item_id=item_id,
                location=location,
                bin=bin_,
                defaults={'quantity': Decimal('0')},
            )
            new_quantity = level.quantity + delta
            if new_quantity < 0:
                raise AdjustmentError(
                    f"Insufficient stock to adjust item {item_id} at {bin_ or location.code}. "
                    f"On hand: {level.quantity}, Adjustment: {delta}"
                )

            level.quantity = new_quantity
            level.save(update_fields=['quantity', 'updated_at'])

            adjustment = InventoryAdjustment.objects.create(
                idempotency_key=idempotency_key,
                item_id=item_id,
                location=location,
                bin=bin_,
                delta=delta,
                quantity_after=new_quantity,
                reference=reference,
                created_by=self.user,
            )

        logger.info(
            f'Adjustment applied: key={idempotency_key}, item={item_id}, '
            f'delta={delta}, on_hand={new_quantity}'
        )
        return adjustment, True

    def _resolve_target(self, bin_id, location_id):
        if bin_id is not None:
            try:
                bin_ = Bin.objects.select_related('location').get(pk=bin_id)
            except Bin.DoesNotExist:
                raise AdjustmentError(f"Bin {bin_id} does not exist.")
            if location_id is not None and bin_.location_id != location_id:
                raise AdjustmentError(f"Bin {bin_.code} is not in location {location_id}.")
            return bin_, bin_.location

        if location_id is None:
            raise AdjustmentError("Either a bin or a location is required.")
        try:
            return None, Location.objects.get(pk=location_id)
        except Location.DoesNotExist:
            raise AdjustmentError(f"Location {location_id} does not exist.")
