"""
Celery application for the Fleet Cost Sheet System.

Beat schedule:
  sync_active_rates: daily 00:05, moves rate active flags onto records
  that came into effect overnight.
"""

import os

from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('fleet_costing')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'sync-active-rates-daily': {
        'task': 'rates.sync_active_rates',
        'schedule': crontab(hour=0, minute=5),
        'options': {'expires': 3600},
    },
}
