"""
Notification settings URL configuration.
"""

from django.urls import path

from apps.notifications.views import NotificationSettingsView

urlpatterns = [
    path(
        'notification-settings',
        NotificationSettingsView.as_view(),
        name='notification-settings',
    ),
]
