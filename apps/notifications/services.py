"""
Workflow notification service.

Recipients come from NotificationSettings; delivery is queued as a
Celery task. Notifying is fire-and-forget: failures are logged and
never propagate to the transition that triggered them.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from apps.costsheets.workflow import Notification
from apps.notifications.models import NotificationSettings

logger = logging.getLogger(__name__)


@dataclass
class Recipients:
    to: List[str] = field(default_factory=list)
    cc: List[str] = field(default_factory=list)

    def __bool__(self):
        return bool(self.to)


def _unique(emails, exclude=()):
    seen = set(e.lower() for e in exclude)
    result = []
    for email in emails:
        email = (email or '').strip()
        if email and email.lower() not in seen:
            seen.add(email.lower())
            result.append(email)
    return result


def recipients_for(event: str, creator_email: str, config: NotificationSettings) -> Recipients:
    """
    Resolve who receives a workflow email.

    SUBMITTED: TO super admin, CC admins.
    APPROVED/REJECTED: TO creator, CC super admin and admins.
    """
    admins = list(config.admin_emails or [])
    if event == Notification.SUBMITTED:
        to = _unique([config.super_admin_email])
        return Recipients(to=to, cc=_unique(admins, exclude=to))
    to = _unique([creator_email])
    return Recipients(to=to, cc=_unique([config.super_admin_email] + admins, exclude=to))


def build_summary(sheet) -> dict:
    """JSON-safe summary of a cost sheet for the email task."""
    return {
        'id': sheet.pk,
        'company_name': sheet.company_name,
        'vehicle': sheet.vehicle.display_name,
        'grand_total': str(sheet.grand_total),
        'status': sheet.status,
        'creator_name': sheet.created_by.get_full_name() or sheet.created_by.get_username(),
        'remarks': sheet.approval_remarks,
    }


class NotificationService:
    """Queues workflow emails for cost sheet transitions."""

    @staticmethod
    def notify(event: str, sheet) -> bool:
        """
        Queue the email for a workflow event.

        Returns:
            True when an email was queued.
        """
        from apps.notifications.tasks import send_cost_sheet_email

        try:
            config = NotificationSettings.load()
            if not config.notifications_enabled:
                logger.info(
                    "Notifications disabled; skipping %s for cost sheet %d",
                    event,
                    sheet.pk,
                )
                return False

            recipients = recipients_for(event, sheet.created_by.email, config)
            if not recipients:
                logger.warning(
                    "No recipients for %s on cost sheet %d; check notification settings",
                    event,
                    sheet.pk,
                )
                return False

            send_cost_sheet_email.delay(
                event,
                build_summary(sheet),
                recipients.to,
                recipients.cc,
            )
        except Exception:
            logger.exception(
                "Failed to queue %s notification for cost sheet %d",
                event,
                sheet.pk,
            )
            return False

        logger.info(
            "Queued %s notification for cost sheet %d to %s",
            event,
            sheet.pk,
            recipients.to,
        )
        return True
