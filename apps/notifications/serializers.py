"""
Notification settings serializers.
"""

from rest_framework import serializers

from apps.notifications.models import NotificationSettings


class NotificationSettingsSerializer(serializers.ModelSerializer):
    """Serializer for reading and updating notification recipients."""

    admin_emails = serializers.ListField(
        child=serializers.EmailField(),
        allow_empty=True,
        required=False,
    )

    class Meta:
        model = NotificationSettings
        fields = ('super_admin_email', 'admin_emails', 'notifications_enabled', 'updated_at')
        read_only_fields = ('updated_at',)

    def validate_admin_emails(self, value):
        """Lower-case and de-duplicate admin emails."""
        cleaned = []
        for email in value:
            email = email.strip().lower()
            if email not in cleaned:
                cleaned.append(email)
        return cleaned

    def validate(self, attrs):
        enabled = attrs.get(
            'notifications_enabled',
            getattr(self.instance, 'notifications_enabled', True),
        )
        super_admin = attrs.get(
            'super_admin_email',
            getattr(self.instance, 'super_admin_email', ''),
        )
        admins = attrs.get(
            'admin_emails',
            getattr(self.instance, 'admin_emails', []),
        )
        if enabled:
            if not super_admin:
                raise serializers.ValidationError(
                    {'super_admin_email': 'Required while notifications are enabled.'}
                )
            if not admins:
                raise serializers.ValidationError(
                    {'admin_emails': 'Add at least one admin email while notifications are enabled.'}
                )
        return attrs
