"""
Tests for workflow notifications and notification settings.
"""

from decimal import Decimal
from smtplib import SMTPException
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from rest_framework.test import APIClient

from apps.accounts.models import UserProfile
from apps.costsheets.models import CostSheet
from apps.costsheets.workflow import Notification
from apps.fleet.models import Vehicle
from apps.notifications.models import NotificationSettings
from apps.notifications.services import NotificationService, recipients_for
from apps.notifications.tasks import send_cost_sheet_email

User = get_user_model()


class RecipientTests(TestCase):

    def setUp(self):
        self.config = NotificationSettings(
            super_admin_email='boss@example.com',
            admin_emails=['ops@example.com', 'BOSS@example.com', 'fin@example.com'],
        )

    def test_submitted_goes_to_super_admin(self):
        recipients = recipients_for(Notification.SUBMITTED, 'sam@example.com', self.config)
        self.assertEqual(recipients.to, ['boss@example.com'])
        self.assertEqual(recipients.cc, ['ops@example.com', 'fin@example.com'])

    def test_decision_goes_to_creator(self):
        recipients = recipients_for(Notification.REJECTED, 'sam@example.com', self.config)
        self.assertEqual(recipients.to, ['sam@example.com'])
        self.assertEqual(
            recipients.cc,
            ['boss@example.com', 'ops@example.com', 'fin@example.com'],
        )

    def test_no_super_admin_means_no_recipients(self):
        self.config.super_admin_email = ''
        self.assertFalse(recipients_for(Notification.SUBMITTED, 'sam@example.com', self.config))


class NotificationServiceTests(TestCase):
    """Test NotificationService.notify with eager Celery and locmem email."""

    def setUp(self):
        self.user = User.objects.create_user(
            username='sam', email='sam@example.com', password='x', first_name='Sam', last_name='Rao',
        )
        vehicle = Vehicle.objects.create(
            brand='Toyota', model='Innova', fuel_type='DIESEL', mileage_per_unit=Decimal('12'),
        )
        self.sheet = CostSheet.objects.create(
            company_name='Acme Logistics',
            vehicle=vehicle,
            tenure_years=3,
            vehicle_price=Decimal('1000000'),
            grand_total=Decimal('96485.74'),
            status='REJECTED',
            approval_remarks='Too expensive',
            created_by=self.user,
        )
        NotificationSettings.objects.create(
            pk=1,
            super_admin_email='boss@example.com',
            admin_emails=['ops@example.com'],
        )

    def test_sends_email(self):
        self.assertTrue(NotificationService.notify(Notification.REJECTED, self.sheet))

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'Cost sheet rejected - Acme Logistics')
        self.assertEqual(message.to, ['sam@example.com'])
        self.assertIn('Reason: Too expensive', message.body)
        self.assertIn('Prepared by: Sam Rao', message.body)
        self.assertIn('96485.74', message.body)

    def test_disabled_settings_skip_sending(self):
        NotificationSettings.objects.filter(pk=1).update(notifications_enabled=False)

        self.assertFalse(NotificationService.notify(Notification.REJECTED, self.sheet))
        self.assertEqual(len(mail.outbox), 0)

    def test_failures_are_swallowed(self):
        with mock.patch.object(send_cost_sheet_email, 'delay', side_effect=ConnectionError('broker down')):
            with self.assertLogs('apps.notifications.services', level='ERROR'):
                sent = NotificationService.notify(Notification.REJECTED, self.sheet)

        self.assertFalse(sent)
        self.assertEqual(len(mail.outbox), 0)

    def test_task_gives_up_after_last_retry(self):
        summary = {
            'id': 1,
            'company_name': 'Acme',
            'vehicle': 'Toyota Innova',
            'grand_total': '100.00',
            'status': 'APPROVED',
            'creator_name': 'sam',
            'remarks': '',
        }
        with mock.patch('django.core.mail.EmailMessage.send', side_effect=SMTPException('down')):
            result = send_cost_sheet_email.apply(
                args=[Notification.APPROVED, summary, ['sam@example.com']],
                retries=send_cost_sheet_email.max_retries,
            ).get()

        self.assertEqual(result['status'], 'failed')


class NotificationSettingsAPITests(TestCase):
    """Test /api/notification-settings."""

    def setUp(self):
        self.client = APIClient()
        self.superadmin = User.objects.create_user(username='root', password='x')
        UserProfile.objects.create(user=self.superadmin, role='SUPERADMIN')
        self.admin = User.objects.create_user(username='adam', password='x')
        UserProfile.objects.create(user=self.admin, role='ADMIN')
        self.staff = User.objects.create_user(username='sam', password='x')
        UserProfile.objects.create(user=self.staff, role='STAFF')

    def test_get_creates_defaults(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.get('/api/notification-settings')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['notifications_enabled'])
        self.assertEqual(response.json()['admin_emails'], [])

    def test_recipients_hidden_from_non_managers(self):
        NotificationSettings.objects.create(
            pk=1, super_admin_email='boss@example.com', admin_emails=['ops@example.com'],
        )
        for user in (self.admin, self.staff):
            self.client.force_authenticate(user)
            response = self.client.get('/api/notification-settings')
            self.assertEqual(response.status_code, 403)
            self.assertNotIn('boss@example.com', response.content.decode())

    def test_superadmin_updates(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.put('/api/notification-settings', {
            'super_admin_email': 'boss@example.com',
            'admin_emails': ['Ops@Example.com', 'ops@example.com'],
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(NotificationSettings.load().admin_emails, ['ops@example.com'])

    def test_admin_cannot_update(self):
        self.client.force_authenticate(self.admin)
        response = self.client.put('/api/notification-settings', {
            'notifications_enabled': False,
        }, format='json')
        self.assertEqual(response.status_code, 403)

    def test_enabled_requires_recipients(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.put('/api/notification-settings', {
            'admin_emails': ['ops@example.com'],
        }, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('super_admin_email', response.json()['detail'])

    def test_can_disable_without_recipients(self):
        self.client.force_authenticate(self.superadmin)
        response = self.client.put('/api/notification-settings', {
            'notifications_enabled': False,
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertFalse(NotificationSettings.load().notifications_enabled)
