# apps/stock_counts/tests/test_schedules.py
"""
Tests for scheduled count generation.

Test coverage:
- CountSchedule.is_scheduled: weekdays, holidays, forced days
- StockCountService.generate_scheduled_counts: one count per stocked active bin,
  skipping existing, empty and inactive bins; running twice creates nothing new
- Generated counts in the available pool and claimable
- generate_stock_counts management command
- POST /stock-counts/generate/ permissions
"""
from datetime import date
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.items.models import Item
from apps.stock_counts.models import (
    CountSchedule, CountScheduleOverride, StockCount, StockCountStatus,
)
from apps.stock_counts.services import StockCountService
from apps.warehousing.models import Location, Bin, StockLevel

User = get_user_model()

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)


# =============================================================================
# BASE TEST CLASS
# =============================================================================

class ScheduleTestCase(TestCase):
    """Two locations: MAIN counted on Mondays, STORE1 unscheduled."""

    @classmethod
    def setUpTestData(cls):
        cls.counter = User.objects.create_user(username='counter', password='testpass123')

        cls.main = Location.objects.create(code='MAIN', name='Main Warehouse')
        cls.store = Location.objects.create(code='STORE1', name='Downtown Store')
        cls.bin_a = Bin.objects.create(location=cls.main, code='A-01')
        cls.bin_b = Bin.objects.create(location=cls.main, code='B-01')
        cls.bin_empty = Bin.objects.create(location=cls.main, code='C-01')
        cls.bin_closed = Bin.objects.create(location=cls.main, code='D-01', is_active=False)
        cls.store_bin = Bin.objects.create(location=cls.store, code='S-01')

        cls.widget = Item.objects.create(sku='WIDGET-001', name='Widget')
        cls.gadget = Item.objects.create(sku='WIDGET-002', name='Gadget')
        for bin_, item, qty in [
            (cls.bin_a, cls.widget, '10'),
            (cls.bin_a, cls.gadget, '4'),
            (cls.bin_b, cls.widget, '7'),
            (cls.bin_closed, cls.widget, '1'),
            (cls.store_bin, cls.widget, '3'),
        ]:
            StockLevel.objects.create(item=item, location=bin_.location, bin=bin_, quantity=Decimal(qty))

        cls.schedule = CountSchedule.objects.create(location=cls.main, monday=True)

    def setUp(self):
        self.service = StockCountService()


# =============================================================================
# 1. CountSchedule
# =============================================================================

class CountScheduleModelTests(ScheduleTestCase):

    def test_regular_days(self):
        self.assertTrue(self.schedule.is_scheduled(MONDAY))
        self.assertFalse(self.schedule.is_scheduled(TUESDAY))

    def test_holiday_skips_regular_day(self):
        CountScheduleOverride.objects.create(schedule=self.schedule, date=MONDAY, reason='Public holiday')
        self.assertFalse(self.schedule.is_scheduled(MONDAY))

    def test_forced_day(self):
        CountScheduleOverride.objects.create(schedule=self.schedule, date=TUESDAY, skip=False)
        self.assertTrue(self.schedule.is_scheduled(TUESDAY))

    def test_str(self):
        self.assertEqual(str(self.schedule), f'{self.main} (Mon)')


# =============================================================================
# 2. Generation
# =============================================================================

class GenerateScheduledCountsTests(ScheduleTestCase):

    def test_one_count_per_stocked_active_bin(self):
        result = self.service.generate_scheduled_counts(MONDAY)

        counts = sorted(result['generated'], key=lambda c: c.bin_code)
        self.assertEqual([c.bin_code for c in counts], ['A-01', 'B-01'])
        self.assertEqual(result['empty'], 1)
        self.assertEqual(result['skipped'], 0)
        self.assertEqual(result['errors'], [])

        count = counts[0]
        self.assertEqual(count.status, StockCountStatus.DRAFT)
        self.assertEqual(count.count_type, 'audit')
        self.assertEqual(count.due_date, MONDAY)
        self.assertTrue(count.auto_generated)
        self.assertIsNone(count.assigned_to)
        self.assertEqual(count.notes, 'Auto-generated from schedule')
        self.assertEqual(
            sorted((line.sku, line.expected_quantity) for line in count.items.all()),
            [('WIDGET-001', Decimal('10')), ('WIDGET-002', Decimal('4'))],
        )

    def test_running_twice_creates_nothing_new(self):
        first = self.service.generate_scheduled_counts(MONDAY)
        second = self.service.generate_scheduled_counts(MONDAY)

        self.assertEqual(len(first['generated']), 2)
        self.assertEqual(second['generated'], [])
        self.assertEqual(second['skipped'], 2)
        self.assertEqual(StockCount.objects.count(), 2)

    def test_bin_with_count_due_is_skipped(self):
        self.service.create_count_from_bin(self.bin_a, due_date=MONDAY)
        result = self.service.generate_scheduled_counts(MONDAY)
        self.assertEqual([c.bin_code for c in result['generated']], ['B-01'])
        self.assertEqual(result['skipped'], 1)

    def test_unscheduled_day(self):
        result = self.service.generate_scheduled_counts(TUESDAY)
        self.assertEqual(result['generated'], [])
        self.assertFalse(StockCount.objects.exists())

    def test_inactive_schedule(self):
        CountSchedule.objects.filter(pk=self.schedule.pk).update(is_active=False)
        self.assertEqual(self.service.generate_scheduled_counts(MONDAY)['generated'], [])

    def test_generated_counts_can_be_claimed(self):
        self.service.generate_scheduled_counts(MONDAY)
        available = list(self.service.list_available(MONDAY))
        self.assertEqual([c.bin_code for c in available], ['A-01', 'B-01'])

        count = StockCountService(self.counter).claim_count(available[0].pk)
        self.assertEqual(count.status, StockCountStatus.IN_PROGRESS)
        self.assertEqual(count.assigned_to, self.counter)
        self.assertEqual([c.bin_code for c in self.service.list_available(MONDAY)], ['B-01'])


# =============================================================================
# 3. Management command
# =============================================================================

class GenerateStockCountsCommandTests(ScheduleTestCase):

    def test_command(self):
        out = StringIO()
        call_command('generate_stock_counts', '--date', MONDAY.isoformat(), stdout=out)
        self.assertEqual(StockCount.objects.filter(due_date=MONDAY, auto_generated=True).count(), 2)
        self.assertIn('Created 2 counts', out.getvalue())

        out = StringIO()
        call_command('generate_stock_counts', '--date', MONDAY.isoformat(), stdout=out)
        self.assertEqual(StockCount.objects.count(), 2)
        self.assertIn('skipped 2 already scheduled', out.getvalue())

    def test_invalid_date(self):
        with self.assertRaises(CommandError):
            call_command('generate_stock_counts', '--date', 'next monday', stdout=StringIO())


# =============================================================================
# 4. API
# =============================================================================

class GenerateCountsAPITests(ScheduleTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.reviewer = User.objects.create_user(username='reviewer', password='testpass123')
        self.reviewer.user_permissions.add(
            Permission.objects.get(codename='approve_stockcount', content_type__app_label='stock_counts')
        )

    def test_generate_requires_review_permission(self):
        self.client.force_authenticate(user=self.counter)
        response = self.client.post('/api/v1/stock-counts/generate/', {'date': MONDAY.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(StockCount.objects.exists())

    def test_generate_then_list_available(self):
        self.client.force_authenticate(user=self.reviewer)
        response = self.client.post('/api/v1/stock-counts/generate/', {'date': MONDAY.isoformat()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(c['bin_code'] for c in response.data['generated']), ['A-01', 'B-01'])
        self.assertEqual(response.data['empty'], 1)

        self.client.force_authenticate(user=self.counter)
        response = self.client.get('/api/v1/stock-counts/available/', {'date': MONDAY.isoformat()})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['bin_code'] for c in response.data], ['A-01', 'B-01'])

        response = self.client.post(f"/api/v1/stock-counts/{response.data[0]['id']}/claim/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['assigned_to'], self.counter.pk)
