"""
Tests for the vehicle catalogue API.
"""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.accounts.models import UserProfile
from apps.fleet.models import Vehicle

User = get_user_model()


class VehicleAPITests(TestCase):
    """Test /api/vehicles endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(username='adam', password='x')
        UserProfile.objects.create(user=self.admin, role='ADMIN')
        self.staff = User.objects.create_user(username='sam', password='x')
        UserProfile.objects.create(user=self.staff, role='STAFF')

        self.vehicle = Vehicle.objects.create(
            brand='Toyota',
            model='Innova',
            variant='GX',
            fuel_type='DIESEL',
            mileage_per_unit=Decimal('12.5'),
        )
        Vehicle.objects.create(
            brand='Tata',
            model='Nexon EV',
            fuel_type='EV',
            mileage_per_unit=Decimal('7'),
            is_active=False,
        )

    def test_list_vehicles(self):
        self.client.force_authenticate(self.staff)
        response = self.client.get('/api/vehicles')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()), 2)

    def test_list_active_only(self):
        self.client.force_authenticate(self.staff)
        response = self.client.get('/api/vehicles', {'active': 'true'})
        data = response.json()
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['display_name'], 'Toyota Innova GX')

    def test_admin_creates_vehicle(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/vehicles', {
            'brand': 'Maruti',
            'model': 'Dzire',
            'fuel_type': 'PETROL',
            'mileage_per_unit': '22.4',
            'maintenance_cost_per_km': '1.20',
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['variant'], '')
        self.assertTrue(Vehicle.objects.filter(brand='Maruti', model='Dzire').exists())

    def test_zero_mileage_rejected(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/vehicles', {
            'brand': 'Maruti',
            'model': 'Dzire',
            'fuel_type': 'PETROL',
            'mileage_per_unit': '0',
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('mileage_per_unit', response.json()['detail'])

    def test_staff_cannot_create_vehicle(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post('/api/vehicles', {
            'brand': 'Maruti',
            'model': 'Dzire',
            'fuel_type': 'PETROL',
            'mileage_per_unit': '22.4',
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_admin_retires_vehicle(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(
            f'/api/vehicles/{self.vehicle.pk}', {'is_active': False}, format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.vehicle.refresh_from_db()
        self.assertFalse(self.vehicle.is_active)

    def test_vehicle_not_found(self):
        self.client.force_authenticate(self.staff)
        response = self.client.get('/api/vehicles/9999')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['code'], 'vehicle_not_found')
