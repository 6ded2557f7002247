"""
Security tests for authentication and authorization.

This test suite verifies JWT authentication, password storage, and the
permission that guards stock count review.
"""
import pytest
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.test import TestCase
from rest_framework.test import APIClient

from apps.items.models import Item
from apps.stock_counts.models import StockCount, StockCountStatus
from apps.stock_counts.services import StockCountService
from apps.warehousing.models import Location

User = get_user_model()


@pytest.mark.security
@pytest.mark.auth
class AuthenticationSecurityTests(TestCase):
    """
    Test authentication: password hashing and JWT issuance.
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            username="testuser",
            email="test@example.com",
            password="SecurePassword123!"
        )

    def test_password_not_stored_in_plaintext(self):
        """
        CRITICAL: Verify passwords are hashed, not stored in plaintext.

        Attack: Database compromise leads to plaintext password exposure.
        """
        user = User.objects.get(username="testuser")
        self.assertNotEqual(user.password, "SecurePassword123!")
        self.assertTrue(user.check_password("SecurePassword123!"))

    def test_invalid_login_attempts(self):
        """
        Security: Wrong credentials never yield a token.

        Attack: Brute force password guessing.
        """
        response = self.client.post('/api/v1/token/', {
            'username': 'testuser',
            'password': 'WrongPassword'
        }, format='json')
        self.assertEqual(response.status_code, 401)
        self.assertNotIn('access', response.data)

    def test_token_grants_api_access(self):
        response = self.client.post('/api/v1/token/', {
            'username': 'testuser',
            'password': 'SecurePassword123!'
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        self.assertEqual(self.client.get('/api/v1/stock-counts/').status_code, 200)

    def test_refresh_token(self):
        tokens = self.client.post('/api/v1/token/', {
            'username': 'testuser',
            'password': 'SecurePassword123!'
        }, format='json').data
        response = self.client.post('/api/v1/token/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)

    def test_forged_token_rejected(self):
        """
        Attack: Request signed with a made-up token.
        """
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not.a.real-token')
        self.assertEqual(self.client.get('/api/v1/stock-counts/').status_code, 401)

    def test_inactive_user_cannot_obtain_token(self):
        self.user.is_active = False
        self.user.save()
        response = self.client.post('/api/v1/token/', {
            'username': 'testuser',
            'password': 'SecurePassword123!'
        }, format='json')
        self.assertEqual(response.status_code, 401)


@pytest.mark.security
@pytest.mark.auth
class AuthorizationSecurityTests(TestCase):
    """
    Test that reviewing stock counts requires the approve permission.
    """

    @classmethod
    def setUpTestData(cls):
        cls.counter = User.objects.create_user(username="counter", password="Password123!")
        cls.supervisor = User.objects.create_user(username="supervisor", password="Password123!")
        cls.admin = User.objects.create_superuser(username="admin", password="Password123!")

        reviewers = Group.objects.create(name="Reviewers")
        reviewers.permissions.add(
            Permission.objects.get(codename='approve_stockcount', content_type__app_label='stock_counts')
        )
        cls.supervisor.groups.add(reviewers)

        cls.location = Location.objects.create(code='MAIN', name='Main Warehouse')
        cls.item = Item.objects.create(sku='SEC-1', name='Secure Item')

    def setUp(self):
        self.client = APIClient()
        service = StockCountService(self.counter)
        self.count = service.create_count(
            location=self.location,
            items=[{'item': self.item, 'expected_quantity': Decimal('0')}],
            assigned_to=self.counter,
        )
        service.start_count(self.count)
        line = self.count.items.get()
        service.save_counts(self.count, [(line.pk, Decimal('0'))])
        service.submit_count(self.count)

    def approve(self, user):
        self.client.force_authenticate(user=user)
        return self.client.post(f'/api/v1/stock-counts/{self.count.pk}/approve/', format='json')

    def test_unauthenticated_access_blocked(self):
        response = self.client.post(f'/api/v1/stock-counts/{self.count.pk}/approve/', format='json')
        self.assertEqual(response.status_code, 401)

    def test_function_level_access_control(self):
        """
        Attack: A counter approves their own count.
        """
        response = self.approve(self.counter)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(StockCount.objects.get(pk=self.count.pk).status, StockCountStatus.SUBMITTED)

    def test_group_permission_allows_review(self):
        response = self.approve(self.supervisor)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], StockCountStatus.APPROVED)

    def test_superuser_can_review(self):
        self.assertEqual(self.approve(self.admin).status_code, 200)

    def test_mass_assignment_vulnerability(self):
        """
        Attack: Client sets status or approval fields in the create payload.
        """
        self.client.force_authenticate(user=self.counter)
        response = self.client.post('/api/v1/stock-counts/', {
            'location': self.location.pk,
            'status': 'approved',
            'approved_by': self.admin.pk,
            'stock_count_number': 'SC-HACKED',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['status'], 'draft')
        self.assertIsNone(response.data['approved_by'])
        self.assertNotEqual(response.data['stock_count_number'], 'SC-HACKED')
