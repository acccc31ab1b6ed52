"""
User role model for the Fleet Cost Sheet System.
"""

from django.conf import settings
from django.db import models


class Role(models.TextChoices):
    STAFF = 'STAFF', 'Staff'
    ADMIN = 'ADMIN', 'Admin'
    SUPERADMIN = 'SUPERADMIN', 'Super Admin'


class UserProfile(models.Model):
    """
    Role assignment for a user.

    Users without a profile are treated as STAFF.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile',
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STAFF,
        db_index=True,
        help_text="Role that determines the user's capabilities.",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user_profiles'

    def __str__(self):
        return f"{self.user} ({self.role})"
