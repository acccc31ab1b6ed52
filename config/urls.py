"""
URL configuration for the Fleet Cost Sheet System.
"""

from django.contrib import admin
from django.urls import include, path

from apps.core.views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health-check'),
    path('api/', include('apps.fleet.urls')),
    path('api/', include('apps.rates.urls')),
    path('api/', include('apps.costsheets.urls')),
    path('api/', include('apps.notifications.urls')),
    path('api/', include('apps.core.urls')),
]
