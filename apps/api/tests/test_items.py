# apps/api/tests/test_items.py
"""
Tests for the catalog and warehouse directory API endpoints.

Test coverage:
- Item list, search and on-hand quantity
- Barcode lookup (plain barcode, SKU, serial barcode)
- Location and bin directory (read-only, nested bins, bin stock)
- OpenAPI schema and docs routes
"""
from decimal import Decimal
from django.test import TestCase
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework import status

from apps.items.models import Item
from apps.warehousing.models import Location, Bin, StockLevel

User = get_user_model()


# =============================================================================
# BASE TEST CLASS
# =============================================================================

class CatalogTestCase(TestCase):
    """Base test case with shared setup for catalog tests."""

    @classmethod
    def setUpTestData(cls):
        """Create shared test data (runs once per test class)."""
        cls.user = User.objects.create_user(
            username='testuser',
            email='testuser@test.com',
            password='testpass123',
        )

        cls.main = Location.objects.create(code='MAIN', name='Main Warehouse')
        cls.store = Location.objects.create(code='STORE1', name='Downtown Store')
        cls.bin_a = Bin.objects.create(location=cls.main, code='A-01')
        cls.bin_b = Bin.objects.create(location=cls.main, code='B-01')

        cls.widget = Item.objects.create(sku='SKU-0032', name='Widget', barcode='8901234567890')
        cls.gadget = Item.objects.create(sku='SKU-0033', name='Gadget')
        cls.retired = Item.objects.create(sku='OLD-1', name='Retired Widget', is_active=False)

        StockLevel.objects.create(item=cls.widget, location=cls.main, bin=cls.bin_a, quantity=Decimal('10'))
        StockLevel.objects.create(item=cls.widget, location=cls.store, quantity=Decimal('2.5'))
        StockLevel.objects.create(item=cls.gadget, location=cls.main, bin=cls.bin_a, quantity=Decimal('5'))

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)


# =============================================================================
# ITEM API TESTS
# =============================================================================

class ItemAPITests(CatalogTestCase):
    """Tests for the read-only item catalog."""

    def test_list_items(self):
        response = self.client.get('/api/v1/items/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        skus = [row['sku'] for row in response.data['results']]
        self.assertEqual(skus, ['OLD-1', 'SKU-0032', 'SKU-0033'])

    def test_filter_active(self):
        response = self.client.get('/api/v1/items/', {'is_active': 'false'})
        self.assertEqual([row['sku'] for row in response.data['results']], ['OLD-1'])

    def test_search(self):
        response = self.client.get('/api/v1/items/', {'search': 'gadget'})
        self.assertEqual([row['sku'] for row in response.data['results']], ['SKU-0033'])

    def test_current_stock_sums_all_locations(self):
        response = self.client.get(f'/api/v1/items/{self.widget.pk}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['current_stock'], '12.5000')

    def test_current_stock_defaults_to_zero(self):
        response = self.client.get(f'/api/v1/items/{self.retired.pk}/')
        self.assertEqual(response.data['current_stock'], '0.0000')

    def test_catalog_is_read_only(self):
        response = self.client.post('/api/v1/items/', {'sku': 'NEW', 'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)


class ItemLookupAPITests(CatalogTestCase):
    """Tests for GET /items/lookup/?barcode=."""

    def lookup(self, code=None):
        params = {} if code is None else {'barcode': code}
        return self.client.get('/api/v1/items/lookup/', params)

    def test_lookup_by_barcode(self):
        response = self.lookup('8901234567890')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['sku'], 'SKU-0032')
        self.assertEqual(response.data['current_stock'], '12.5000')

    def test_lookup_by_sku(self):
        response = self.lookup('SKU-0033')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.gadget.pk)

    def test_lookup_serial_barcode(self):
        """'<SKU>/<serial>' resolves to the parent item."""
        response = self.lookup('SKU-0032/1')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.widget.pk)

    def test_lookup_not_found(self):
        self.assertEqual(self.lookup('UNKNOWN').status_code, status.HTTP_404_NOT_FOUND)

    def test_lookup_missing_param(self):
        self.assertEqual(self.lookup().status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.lookup('   ').status_code, status.HTTP_400_BAD_REQUEST)


# =============================================================================
# LOCATION / BIN API TESTS
# =============================================================================

class DirectoryAPITests(CatalogTestCase):
    """Tests for the location and bin directory."""

    def test_list_locations(self):
        response = self.client.get('/api/v1/locations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        counts = {row['code']: row['bin_count'] for row in response.data['results']}
        self.assertEqual(counts, {'MAIN': 2, 'STORE1': 0})

    def test_locations_are_read_only(self):
        response = self.client.post('/api/v1/locations/', {'code': 'NEW', 'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_location_bins(self):
        response = self.client.get(f'/api/v1/locations/{self.main.pk}/bins/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['code'] for row in response.data], ['A-01', 'B-01'])

    def test_filter_bins_by_location(self):
        response = self.client.get('/api/v1/bins/', {'location': self.store.pk})
        self.assertEqual(response.data['results'], [])

    def test_bin_stock(self):
        """Only positive levels, ordered by item name."""
        response = self.client.get(f'/api/v1/bins/{self.bin_a.pk}/stock/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['item_sku'] for row in response.data], ['SKU-0033', 'SKU-0032'])
        self.assertEqual(response.data[0]['quantity'], '5.0000')

    def test_empty_bin_stock(self):
        response = self.client.get(f'/api/v1/bins/{self.bin_b.pk}/stock/')
        self.assertEqual(response.data, [])

    def test_unknown_bin(self):
        response = self.client.get('/api/v1/bins/999999/stock/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# =============================================================================
# SCHEMA / DOCS TESTS
# =============================================================================

class SchemaAPITests(CatalogTestCase):

    def test_schema_lists_stock_count_routes(self):
        response = self.client.get('/api/schema/', {'format': 'json'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        paths = response.json()['paths']
        self.assertIn('/api/v1/stock-counts/{id}/approve/', paths)
        self.assertIn('/api/v1/stock-counts/generate/', paths)
        self.assertIn('/api/v1/items/lookup/', paths)

    def test_docs_pages(self):
        for url in ['/api/docs/', '/api/redoc/']:
            response = self.client.get(url)
            self.assertEqual(response.status_code, status.HTTP_200_OK, url)
