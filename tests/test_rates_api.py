"""
Tests for rate recording, activation and the rates API.
"""

from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import UserProfile
from apps.core.exceptions import CostSheetValidationError, RateNotInEffectError
from apps.rates.models import RateRecord
from apps.rates.services import RateService
from apps.rates.tasks import sync_active_rates

User = get_user_model()


def make_user(username, role):
    user = User.objects.create_user(username=username, email=f'{username}@example.com', password='x')
    UserProfile.objects.create(user=user, role=role)
    return user


class RateServiceTests(TestCase):
    """Test RateService creation and activation."""

    def test_single_active_record_per_key(self):
        first = RateService.create_rate('INTEREST', Decimal('11'), date(2024, 1, 1))
        second = RateService.create_rate('INTEREST', Decimal('12'), date(2024, 6, 1))

        first.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertTrue(second.is_active)
        self.assertEqual(RateRecord.objects.filter(kind='INTEREST', is_active=True).count(), 1)

    def test_keys_are_independent(self):
        RateService.create_rate('FUEL', Decimal('102'), date(2024, 1, 1), fuel_type='PETROL')
        RateService.create_rate('FUEL', Decimal('106'), date(2024, 1, 1), fuel_type='PETROL', city='Mumbai')
        RateService.create_rate('FUEL', Decimal('90'), date(2024, 1, 1), fuel_type='DIESEL')

        self.assertEqual(RateRecord.objects.filter(kind='FUEL', is_active=True).count(), 3)

    def test_superseded_record_cannot_be_reactivated(self):
        first = RateService.create_rate('INSURANCE', Decimal('3'), date(2024, 1, 1))
        second = RateService.create_rate('INSURANCE', Decimal('4'), date(2024, 6, 1))

        with self.assertRaises(RateNotInEffectError):
            RateService.activate(first.pk)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertTrue(second.is_active)

    def test_future_rate_does_not_displace_current(self):
        today = timezone.localdate()
        current = RateService.create_rate('INTEREST', Decimal('10'), date(2024, 1, 1))
        future = RateService.create_rate('INTEREST', Decimal('14'), today + timedelta(days=365))

        current.refresh_from_db()
        self.assertTrue(current.is_active)
        self.assertFalse(future.is_active)

        resolved = RateService.resolve('INTEREST', as_of=today)
        self.assertEqual(resolved.record_id, current.pk)

    def test_backdated_record_does_not_displace_later_one(self):
        later = RateService.create_rate('ADMIN_CHARGE', Decimal('10'), date(2024, 6, 1))
        backdated = RateService.create_rate('ADMIN_CHARGE', Decimal('99'), date(2024, 2, 1))

        later.refresh_from_db()
        self.assertTrue(later.is_active)
        self.assertFalse(backdated.is_active)
        self.assertEqual(RateService.resolve('ADMIN_CHARGE').record_id, later.pk)

    def test_active_flag_follows_resolution(self):
        """Whatever resolution picks today carries the flag, and nothing else does."""
        today = timezone.localdate()
        RateService.create_rate('INTEREST', Decimal('11'), date(2024, 1, 1))
        RateService.create_rate('INTEREST', Decimal('12'), date(2024, 6, 1))
        RateService.create_rate('INTEREST', Decimal('13'), today + timedelta(days=10))
        RateService.create_rate('INTEREST', Decimal('9'), date(2023, 1, 1))

        resolved = RateService.resolve('INTEREST', as_of=today)
        active = RateRecord.objects.get(kind='INTEREST', is_active=True)
        self.assertEqual(active.pk, resolved.record_id)
        self.assertEqual(active.value, Decimal('12'))

    def test_sync_moves_flag_when_future_rate_arrives(self):
        today = timezone.localdate()
        RateService.create_rate('INTEREST', Decimal('10'), date(2024, 1, 1))
        future = RateService.create_rate('INTEREST', Decimal('14'), today + timedelta(days=30))

        active = RateService.sync_active('INTEREST', as_of=today + timedelta(days=30))

        self.assertEqual(active.pk, future.pk)
        self.assertEqual(RateRecord.objects.filter(kind='INTEREST', is_active=True).get().pk, future.pk)

    def test_only_future_records_leave_key_inactive(self):
        record = RateService.create_rate(
            'INSURANCE', Decimal('4'), timezone.localdate() + timedelta(days=5),
        )
        self.assertFalse(record.is_active)
        self.assertTrue(RateService.resolve('INSURANCE').is_fallback)

        with self.assertRaises(RateNotInEffectError):
            RateService.activate(record.pk)

    def test_sync_task_covers_every_key(self):
        today = timezone.localdate()
        RateService.create_rate('INTEREST', Decimal('10'), date(2024, 1, 1))
        RateService.create_rate('FUEL', Decimal('100'), date(2024, 1, 1), fuel_type='PETROL')
        arriving = RateService.create_rate('FUEL', Decimal('105'), today, fuel_type='PETROL')
        RateRecord.objects.update(is_active=False)

        result = sync_active_rates.apply().get()

        self.assertEqual(result['status'], 'success')
        self.assertEqual(result['keys'], 2)
        self.assertEqual(RateRecord.objects.filter(is_active=True).count(), 2)
        arriving.refresh_from_db()
        self.assertTrue(arriving.is_active)

    def test_percentage_out_of_range(self):
        with self.assertRaises(CostSheetValidationError):
            RateService.create_rate('INTEREST', Decimal('101'), date(2024, 1, 1))

    def test_fuel_requires_fuel_type(self):
        with self.assertRaises(CostSheetValidationError):
            RateService.create_rate('FUEL', Decimal('100'), date(2024, 1, 1))

    def test_hybrid_fuel_record_rejected(self):
        with self.assertRaises(CostSheetValidationError):
            RateService.create_rate('FUEL', Decimal('100'), date(2024, 1, 1), fuel_type='HYBRID')

    def test_resolution_uses_history_not_active_flag(self):
        today = timezone.localdate()
        current = RateService.create_rate('INTEREST', Decimal('12'), today - timedelta(days=30))
        RateService.create_rate('INTEREST', Decimal('15'), today + timedelta(days=30))

        result = RateService.resolve('INTEREST', as_of=today)
        self.assertEqual(result.record_id, current.pk)

        later = RateService.resolve('INTEREST', as_of=today + timedelta(days=31))
        self.assertEqual(later.value, Decimal('15'))


class RatesAPITests(TestCase):
    """Test /api/rates endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.superadmin = make_user('root', 'SUPERADMIN')
        self.staff = make_user('sam', 'STAFF')

    def test_superadmin_records_rate(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.post('/api/rates', {
            'kind': 'INTEREST',
            'value': '11.5',
            'effective_from': '2024-04-01',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data['is_active'])
        self.assertEqual(data['value'], '11.5000')

    def test_staff_cannot_record_rate(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post('/api/rates', {
            'kind': 'INTEREST',
            'value': '11.5',
            'effective_from': '2024-04-01',
        }, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(RateRecord.objects.count(), 0)

    def test_staff_can_read_history(self):
        RateService.create_rate('INTEREST', Decimal('12'), date(2024, 1, 1))
        self.client.force_authenticate(self.staff)
        response = self.client.get('/api/rates', {'kind': 'INTEREST'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 1)

    def test_invalid_rate_returns_400(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.post('/api/rates', {
            'kind': 'FUEL',
            'value': '100',
            'effective_from': '2024-04-01',
        }, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('fuel_type', response.json()['detail'])

    def test_activate_endpoint(self):
        RateService.create_rate('INTEREST', Decimal('11'), date(2024, 1, 1))
        current = RateService.create_rate('INTEREST', Decimal('12'), date(2024, 6, 1))
        RateRecord.objects.filter(pk=current.pk).update(is_active=False)

        self.client.force_authenticate(self.superadmin)
        response = self.client.post(f'/api/rates/{current.pk}/activate')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['is_active'])
        self.assertEqual(RateRecord.objects.filter(is_active=True).get().pk, current.pk)

    def test_activate_superseded_rate_conflicts(self):
        first = RateService.create_rate('INTEREST', Decimal('11'), date(2024, 1, 1))
        current = RateService.create_rate('INTEREST', Decimal('12'), date(2024, 6, 1))

        self.client.force_authenticate(self.superadmin)
        response = self.client.post(f'/api/rates/{first.pk}/activate')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['code'], 'rate_not_in_effect')
        self.assertEqual(RateRecord.objects.filter(is_active=True).get().pk, current.pk)

    def test_future_dated_rate_is_recorded_inactive(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.post('/api/rates', {
            'kind': 'INTEREST',
            'value': '99',
            'effective_from': (timezone.localdate() + timedelta(days=30)).isoformat(),
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.json()['is_active'])
        self.assertTrue(RateService.resolve('INTEREST').is_fallback)

    def test_activate_missing_rate(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.post('/api/rates/9999/activate')
        self.assertEqual(response.status_code, 404)

    def test_current_rates_with_fallbacks(self):
        RateService.create_rate('INTEREST', Decimal('12'), date(2024, 1, 1))
        RateService.create_rate('FUEL', Decimal('104.5'), date(2024, 1, 1), fuel_type='PETROL')

        self.client.force_authenticate(self.staff)
        response = self.client.get('/api/rates/current', {
            'as_of': '2024-05-01',
            'fuel_type': 'HYBRID',
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['interest']['value'], '12.0000')
        self.assertEqual(data['fuel']['value'], '104.5000')
        self.assertFalse(data['fuel']['is_fallback'])
        self.assertTrue(data['insurance']['is_fallback'])
        self.assertEqual(data['insurance']['value'], '3.5000')
        self.assertEqual(sorted(data['fallbacks']), ['ADMIN_CHARGE', 'INSURANCE'])

    def test_requires_authentication(self):
        response = self.client.get('/api/rates/current')
        self.assertIn(response.status_code, (401, 403))
