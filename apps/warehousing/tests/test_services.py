# apps/warehousing/tests/test_services.py
"""
Tests for warehousing models and services.

Test coverage:
- StockLevel non-negative constraint
- LocationDirectory lookups
- InventoryAdjustmentService: apply, replay, conflicting replay, negative stock, bad targets
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.items.models import Item
from apps.warehousing.models import Location, Bin, StockLevel, InventoryAdjustment
from apps.warehousing.services import (
    AdjustmentError, InventoryAdjustmentService, LocationDirectory,
)

User = get_user_model()


# =============================================================================
# BASE TEST CLASS
# =============================================================================

class WarehousingTestCase(TestCase):
    """Base test case with shared setup for warehousing tests."""

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='stocker', password='testpass123')
        cls.item = Item.objects.create(sku='WIDGET-001', name='Widget')
        cls.item2 = Item.objects.create(sku='WIDGET-002', name='Another Widget')
        cls.main = Location.objects.create(code='MAIN', name='Main Warehouse')
        cls.store = Location.objects.create(code='STORE1', name='Downtown Store')
        cls.bin_a = Bin.objects.create(location=cls.main, code='A-01-01')
        cls.bin_b = Bin.objects.create(location=cls.main, code='B-01-01')


# =============================================================================
# 1. Model constraints
# =============================================================================

class StockLevelModelTests(WarehousingTestCase):

    def test_quantity_non_negative_constraint(self):
        """DB constraint prevents negative on-hand quantity."""
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                StockLevel.objects.create(
                    item=self.item, location=self.main, bin=self.bin_a, quantity=Decimal('-1'),
                )


# =============================================================================
# 2. LocationDirectory
# =============================================================================

class LocationDirectoryTests(WarehousingTestCase):

    def setUp(self):
        self.directory = LocationDirectory()

    def test_resolve_location(self):
        self.assertEqual(self.directory.resolve_location(self.main.pk), 'Main Warehouse')

    def test_resolve_unknown_location(self):
        with self.assertRaises(Location.DoesNotExist):
            self.directory.resolve_location(999999)

    def test_resolve_bin(self):
        self.assertEqual(
            self.directory.resolve_bin(self.bin_a.pk),
            {'code': 'A-01-01', 'location_id': self.main.pk},
        )

    def test_resolve_unknown_bin(self):
        with self.assertRaises(Bin.DoesNotExist):
            self.directory.resolve_bin(999999)

    def test_bin_stock_only_positive(self):
        """Empty levels and other bins are excluded; results are ordered by item name."""
        StockLevel.objects.create(item=self.item, location=self.main, bin=self.bin_a, quantity=Decimal('5'))
        StockLevel.objects.create(item=self.item2, location=self.main, bin=self.bin_a, quantity=Decimal('2'))
        StockLevel.objects.create(item=self.item, location=self.main, bin=self.bin_b, quantity=Decimal('9'))
        empty = Item.objects.create(sku='EMPTY', name='Empty Item')
        StockLevel.objects.create(item=empty, location=self.main, bin=self.bin_a, quantity=Decimal('0'))

        levels = list(self.directory.get_bin_stock(self.bin_a.pk))
        self.assertEqual([level.item for level in levels], [self.item2, self.item])


# =============================================================================
# 3. InventoryAdjustmentService
# =============================================================================

class InventoryAdjustmentServiceTests(WarehousingTestCase):

    def setUp(self):
        self.service = InventoryAdjustmentService(self.user)

    def test_positive_adjustment_creates_level(self):
        """Adjusting an item with no stock level creates it."""
        adjustment, created = self.service.apply_adjustment(
            item_id=self.item.pk, delta=Decimal('4'), idempotency_key='k-1', bin_id=self.bin_a.pk,
        )
        self.assertTrue(created)
        self.assertEqual(adjustment.quantity_after, Decimal('4'))
        self.assertEqual(adjustment.location, self.main)
        self.assertEqual(adjustment.created_by, self.user)
        level = StockLevel.objects.get(item=self.item, bin=self.bin_a)
        self.assertEqual(level.quantity, Decimal('4'))

    def test_negative_adjustment(self):
        StockLevel.objects.create(item=self.item, location=self.store, quantity=Decimal('10'))
        adjustment, _ = self.service.apply_adjustment(
            item_id=self.item.pk, delta='-3', idempotency_key='k-2', location_id=self.store.pk,
        )
        self.assertEqual(adjustment.delta, Decimal('-3'))
        self.assertEqual(StockLevel.objects.get(item=self.item, location=self.store).quantity, Decimal('7'))

    def test_replay_is_ignored(self):
        """Applying the same key twice changes stock once."""
        first, created1 = self.service.apply_adjustment(
            item_id=self.item.pk, delta=Decimal('2'), idempotency_key='k-3', bin_id=self.bin_a.pk,
        )
        second, created2 = self.service.apply_adjustment(
            item_id=self.item.pk, delta=Decimal('2'), idempotency_key='k-3', bin_id=self.bin_a.pk,
        )
        self.assertTrue(created1)
        self.assertFalse(created2)
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(StockLevel.objects.get(item=self.item, bin=self.bin_a).quantity, Decimal('2'))
        self.assertEqual(InventoryAdjustment.objects.count(), 1)

    def test_insufficient_stock(self):
        StockLevel.objects.create(item=self.item, location=self.main, bin=self.bin_a, quantity=Decimal('1'))
        with self.assertRaises(AdjustmentError) as ctx:
            self.service.apply_adjustment(
                item_id=self.item.pk, delta=Decimal('-2'), idempotency_key='k-4', bin_id=self.bin_a.pk,
            )
        self.assertIn('Insufficient stock', ctx.exception.messages[0])
        self.assertEqual(StockLevel.objects.get(item=self.item, bin=self.bin_a).quantity, Decimal('1'))
        self.assertFalse(InventoryAdjustment.objects.filter(idempotency_key='k-4').exists())

    def test_zero_delta_rejected(self):
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(item_id=self.item.pk, delta=0, idempotency_key='k-5', bin_id=self.bin_a.pk)

    def test_invalid_delta_rejected(self):
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(item_id=self.item.pk, delta='abc', idempotency_key='k-6', bin_id=self.bin_a.pk)

    def test_bin_location_mismatch(self):
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(
                item_id=self.item.pk, delta=1, idempotency_key='k-7',
                bin_id=self.bin_a.pk, location_id=self.store.pk,
            )

    def test_target_required(self):
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(item_id=self.item.pk, delta=1, idempotency_key='k-8')

    def test_unknown_item(self):
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(item_id=999999, delta=1, idempotency_key='k-9', location_id=self.main.pk)

    def test_replay_with_different_delta_rejected(self):
        """A key already used for another change is refused and stock is untouched."""
        self.service.apply_adjustment(
            item_id=self.item.pk, delta=Decimal('3'), idempotency_key='k-10', bin_id=self.bin_a.pk,
        )
        with self.assertRaises(AdjustmentError) as ctx:
            self.service.apply_adjustment(
                item_id=self.item.pk, delta=Decimal('1'), idempotency_key='k-10', bin_id=self.bin_a.pk,
            )
        self.assertIn('already used', ctx.exception.messages[0])
        with self.assertRaises(AdjustmentError):
            self.service.apply_adjustment(
                item_id=self.item2.pk, delta=Decimal('3'), idempotency_key='k-10', bin_id=self.bin_a.pk,
            )
        self.assertEqual(StockLevel.objects.get(item=self.item, bin=self.bin_a).quantity, Decimal('3'))
        self.assertEqual(InventoryAdjustment.objects.count(), 1)
