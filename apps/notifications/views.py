"""
Notification settings views.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import Capability, HasCapability
from apps.notifications.models import NotificationSettings
from apps.notifications.serializers import NotificationSettingsSerializer

logger = logging.getLogger(__name__)


class NotificationSettingsView(APIView):
    """
    GET /api/notification-settings
    PUT /api/notification-settings

    Recipient addresses are only visible to those who manage them.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    read_capability = Capability.MANAGE_NOTIFICATIONS
    required_capability = Capability.MANAGE_NOTIFICATIONS

    def get(self, request):
        config = NotificationSettings.load()
        return Response(
            NotificationSettingsSerializer(config).data,
            status=status.HTTP_200_OK,
        )

    def put(self, request):
        config = NotificationSettings.load()
        serializer = NotificationSettingsSerializer(config, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        logger.info(
            "Notification settings updated by user %s (enabled=%s)",
            request.user.pk,
            serializer.instance.notifications_enabled,
        )
        return Response(serializer.data, status=status.HTTP_200_OK)
