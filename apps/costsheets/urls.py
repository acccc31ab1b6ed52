"""
Cost sheet URL configuration.
"""

from django.urls import path

from apps.costsheets.views import (
    ApproveCostSheetView,
    CostSheetDetailView,
    CostSheetListView,
    CostSheetPreviewView,
    DashboardView,
    ExportCostSheetView,
    RejectCostSheetView,
    SubmitCostSheetView,
)

urlpatterns = [
    path('cost-sheets', CostSheetListView.as_view(), name='cost-sheet-list'),
    path('cost-sheets/preview', CostSheetPreviewView.as_view(), name='cost-sheet-preview'),
    path('cost-sheets/<int:sheet_id>', CostSheetDetailView.as_view(), name='cost-sheet-detail'),
    path(
        'cost-sheets/<int:sheet_id>/submit',
        SubmitCostSheetView.as_view(),
        name='cost-sheet-submit',
    ),
    path(
        'cost-sheets/<int:sheet_id>/approve',
        ApproveCostSheetView.as_view(),
        name='cost-sheet-approve',
    ),
    path(
        'cost-sheets/<int:sheet_id>/reject',
        RejectCostSheetView.as_view(),
        name='cost-sheet-reject',
    ),
    path(
        'cost-sheets/<int:sheet_id>/export',
        ExportCostSheetView.as_view(),
        name='cost-sheet-export',
    ),
    path('dashboard', DashboardView.as_view(), name='dashboard'),
]
