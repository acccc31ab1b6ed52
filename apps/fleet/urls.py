"""
Vehicle URL configuration.
"""

from django.urls import path

from apps.fleet.views import VehicleDetailView, VehicleListView

urlpatterns = [
    path('vehicles', VehicleListView.as_view(), name='vehicle-list'),
    path('vehicles/<int:vehicle_id>', VehicleDetailView.as_view(), name='vehicle-detail'),
]
