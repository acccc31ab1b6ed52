"""
Notification settings for the Fleet Cost Sheet System.
"""

from django.db import models


class NotificationSettings(models.Model):
    """
    Recipients for workflow emails. A single row is used.

    Submissions go to the super admin with admins copied; decisions go
    to the sheet's creator with the super admin and admins copied.
    """

    super_admin_email = models.EmailField(blank=True, default='')
    admin_emails = models.JSONField(
        default=list,
        blank=True,
        help_text="List of admin email addresses.",
    )
    notifications_enabled = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'notification_settings'
        verbose_name_plural = 'notification settings'

    def __str__(self):
        state = 'enabled' if self.notifications_enabled else 'disabled'
        return f"Notification settings ({state})"

    @classmethod
    def load(cls):
        """Return the settings row, creating it on first use."""
        instance, _ = cls.objects.get_or_create(pk=1)
        return instance
