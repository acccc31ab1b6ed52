from django.contrib import admin

from apps.notifications.models import NotificationSettings


@admin.register(NotificationSettings)
class NotificationSettingsAdmin(admin.ModelAdmin):
    list_display = ('id', 'super_admin_email', 'notifications_enabled', 'updated_at')
    readonly_fields = ('updated_at',)
