"""
Celery task for workflow emails.
"""

import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMessage

from apps.costsheets.workflow import Notification

logger = logging.getLogger(__name__)

SUBJECTS = {
    Notification.SUBMITTED: 'New cost sheet submitted - {company_name}',
    Notification.APPROVED: 'Cost sheet approved - {company_name}',
    Notification.REJECTED: 'Cost sheet rejected - {company_name}',
}


def render_body(event: str, summary: dict) -> str:
    lines = [
        f"Cost sheet #{summary['id']} for {summary['company_name']}",
        f"Vehicle: {summary['vehicle']}",
        f"Grand total (monthly): {summary['grand_total']}",
        f"Prepared by: {summary['creator_name']}",
        f"Status: {summary['status']}",
    ]
    if event == Notification.REJECTED and summary.get('remarks'):
        lines.append(f"Reason: {summary['remarks']}")
    elif summary.get('remarks'):
        lines.append(f"Remarks: {summary['remarks']}")
    if event == Notification.SUBMITTED:
        lines.append('')
        lines.append('Please review and approve or reject it.')
    return '\n'.join(lines)


@shared_task(
    bind=True,
    name='notifications.send_cost_sheet_email',
    max_retries=3,
    default_retry_delay=30,
)
def send_cost_sheet_email(self, event, summary, to, cc=None):
    """
    Send one workflow email.

    Retries on delivery failure; after the last retry the failure is
    logged and dropped, the transition is already committed.
    """
    message = EmailMessage(
        subject=SUBJECTS[event].format(company_name=summary['company_name']),
        body=render_body(event, summary),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=to,
        cc=cc or [],
    )

    try:
        sent = message.send()
    except Exception as exc:
        if self.request.retries >= self.max_retries:
            logger.exception(
                "Giving up on %s email for cost sheet %s",
                event,
                summary['id'],
            )
            return {'status': 'failed', 'event': event}
        logger.warning(
            "Email for cost sheet %s failed (%s); retrying",
            summary['id'],
            exc,
        )
        raise self.retry(exc=exc)

    logger.info(
        "Sent %s email for cost sheet %s to %s (cc %s)",
        event,
        summary['id'],
        to,
        cc,
    )
    return {'status': 'sent', 'event': event, 'sent': sent}
