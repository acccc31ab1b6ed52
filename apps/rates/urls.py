"""
Rate URL configuration.
"""

from django.urls import path

from apps.rates.views import ActivateRateView, CurrentRatesView, RateListView

urlpatterns = [
    path('rates', RateListView.as_view(), name='rate-list'),
    path('rates/current', CurrentRatesView.as_view(), name='rate-current'),
    path(
        'rates/<int:rate_id>/activate',
        ActivateRateView.as_view(),
        name='rate-activate',
    ),
]
