"""
Celery task keeping the rate active flags current.
"""

import logging

from celery import shared_task

from apps.rates.services import RateService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    name='rates.sync_active_rates',
    max_retries=3,
    default_retry_delay=60,
)
def sync_active_rates(self):
    """
    Re-derive ``is_active`` for every rate key as of today.

    Scheduled daily so a future-dated record takes the flag on the day
    it comes into effect.
    """
    try:
        keys = RateService.sync_all()
        logger.info("Rate active flags synced for %d keys", keys)
        return {'status': 'success', 'keys': keys}
    except Exception as exc:
        logger.exception("Rate active flag sync failed")
        raise self.retry(exc=exc)
