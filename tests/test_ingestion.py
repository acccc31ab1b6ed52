"""
Tests for the data ingestion Celery tasks.

Uses task.apply() with CELERY_ALWAYS_EAGER to run tasks synchronously
in the test environment.
"""

import os
import tempfile
from datetime import timedelta
from decimal import Decimal

import pandas as pd
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from apps.accounts.models import UserProfile
from apps.core.tasks import ingest_fuel_rate_data, ingest_vehicle_data
from apps.fleet.models import Vehicle
from apps.rates.models import RateRecord


@override_settings(
    CELERY_TASK_ALWAYS_EAGER=True,
    CELERY_TASK_EAGER_PROPAGATES=True,
)
class VehicleIngestionTests(TestCase):
    """Test cases for vehicle catalogue ingestion."""

    def setUp(self):
        """Create a temporary Excel file for testing."""
        self.temp_dir = tempfile.mkdtemp()

        data = {
            'Brand': ['Toyota', 'Maruti', 'Tata', ''],
            'Model': ['Innova', 'Dzire', 'Nexon EV', 'Ghost'],
            'Variant': ['GX', None, None, None],
            'Fuel Type': ['diesel', 'PETROL', 'EV', 'PETROL'],
            'Mileage': [12.5, 22.4, 7.0, 10.0],
            'Maintenance Cost Per Km': [1.5, 1.2, None, 1.0],
        }
        pd.DataFrame(data).to_excel(
            os.path.join(self.temp_dir, 'vehicles.xlsx'),
            index=False,
        )

    def test_ingest_vehicle_data(self):
        """Test successful vehicle ingestion; the row without a brand is skipped."""
        with self.settings(DATA_DIR=self.temp_dir):
            result = ingest_vehicle_data.apply().get()

        self.assertEqual(result['status'], 'success')
        self.assertEqual(result['total_rows'], 4)
        self.assertEqual(result['created'], 3)
        self.assertEqual(result['errors'], 1)

        innova = Vehicle.objects.get(brand='Toyota', model='Innova')
        self.assertEqual(innova.fuel_type, 'DIESEL')
        self.assertEqual(innova.variant, 'GX')
        self.assertEqual(innova.mileage_per_unit, Decimal('12.50'))
        self.assertEqual(Vehicle.objects.get(model='Nexon EV').maintenance_cost_per_km, Decimal('0'))

    def test_ingest_idempotent(self):
        """Test that running ingestion twice doesn't create duplicates."""
        with self.settings(DATA_DIR=self.temp_dir):
            ingest_vehicle_data.apply().get()
            result = ingest_vehicle_data.apply().get()

        self.assertEqual(result['status'], 'success')
        self.assertEqual(Vehicle.objects.count(), 3)
        self.assertEqual(result['updated'], 3)

    def test_missing_file(self):
        """Test graceful handling of missing file."""
        with self.settings(DATA_DIR='/nonexistent/path'):
            result = ingest_vehicle_data.apply().get()
        self.assertEqual(result['status'], 'error')

    def test_missing_columns(self):
        """A sheet without required columns is rejected without retrying."""
        temp_dir = tempfile.mkdtemp()
        pd.DataFrame({'brand': ['Toyota'], 'mileage': [12]}).to_excel(
            os.path.join(temp_dir, 'vehicles.xlsx'),
            index=False,
        )

        with self.settings(DATA_DIR=temp_dir):
            result = ingest_vehicle_data.apply().get()

        self.assertEqual(result['status'], 'error')
        self.assertIn('model', result['message'])
        self.assertEqual(Vehicle.objects.count(), 0)


@override_settings(
    CELERY_TASK_ALWAYS_EAGER=True,
    CELERY_TASK_EAGER_PROPAGATES=True,
)
class FuelRateIngestionTests(TestCase):
    """Test cases for fuel price ingestion."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        today = timezone.localdate()
        self.past = today - timedelta(days=60)
        self.recent = today - timedelta(days=10)
        self.future = today + timedelta(days=30)

        data = {
            'fuel_type': ['PETROL', 'PETROL', 'PETROL', 'DIESEL', 'HYBRID', 'PETROL'],
            'city': [None, None, None, 'Mumbai', None, None],
            'value': [100.5, 102.0, 105.0, 92.3, 101.0, None],
            'effective_from': [
                self.past.isoformat(),
                self.recent.isoformat(),
                self.future.isoformat(),
                self.recent.isoformat(),
                self.recent.isoformat(),
                self.recent.isoformat(),
            ],
        }
        pd.DataFrame(data).to_excel(
            os.path.join(self.temp_dir, 'fuel_rates.xlsx'),
            index=False,
        )

    def test_ingest_fuel_rates(self):
        """Hybrid rows and rows without a value are rejected."""
        with self.settings(DATA_DIR=self.temp_dir):
            result = ingest_fuel_rate_data.apply().get()

        self.assertEqual(result['status'], 'success')
        self.assertEqual(result['created'], 4)
        self.assertEqual(result['errors'], 2)
        self.assertEqual(RateRecord.objects.filter(kind='FUEL').count(), 4)

    def test_record_in_effect_today_is_active(self):
        with self.settings(DATA_DIR=self.temp_dir):
            ingest_fuel_rate_data.apply().get()

        active = RateRecord.objects.get(kind='FUEL', fuel_type='PETROL', city='', is_active=True)
        self.assertEqual(active.effective_from, self.recent)
        self.assertEqual(active.value, Decimal('102.0000'))
        self.assertTrue(
            RateRecord.objects.get(fuel_type='DIESEL', city='Mumbai').is_active
        )

    def test_ingest_idempotent(self):
        with self.settings(DATA_DIR=self.temp_dir):
            ingest_fuel_rate_data.apply().get()
            result = ingest_fuel_rate_data.apply().get()

        self.assertEqual(result['updated'], 4)
        self.assertEqual(RateRecord.objects.count(), 4)
        self.assertEqual(
            RateRecord.objects.filter(fuel_type='PETROL', is_active=True).count(), 1,
        )

    def test_missing_file(self):
        with self.settings(DATA_DIR='/nonexistent/path'):
            result = ingest_fuel_rate_data.apply().get()
        self.assertEqual(result['status'], 'error')


class TriggerIngestionTests(TestCase):
    """Test POST /api/ingest-data."""

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()
        self.admin = User.objects.create_user(username='adam', password='x')
        UserProfile.objects.create(user=self.admin, role='ADMIN')
        self.staff = User.objects.create_user(username='sam', password='x')

    def test_admin_triggers_ingestion(self):
        self.client.force_authenticate(self.admin)
        with self.settings(DATA_DIR='/nonexistent/path'):
            response = self.client.post('/api/ingest-data')

        self.assertEqual(response.status_code, 202)
        self.assertIn('vehicle_task_id', response.json())
        self.assertIn('fuel_rate_task_id', response.json())

    def test_staff_cannot_trigger(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post('/api/ingest-data')
        self.assertEqual(response.status_code, 403)
