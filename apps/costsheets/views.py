"""
Cost sheet views for the Fleet Cost Sheet System.

Views are thin: all business logic is in the service layer.
"""

import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import actor_for_user
from apps.costsheets import workflow
from apps.costsheets.serializers import (
    CostSheetExportSerializer,
    CostSheetInputSerializer,
    CostSheetListItemSerializer,
    CostSheetListQuerySerializer,
    CostSheetSerializer,
    CreateCostSheetSerializer,
    DashboardSerializer,
    DecisionSerializer,
    PreviewResponseSerializer,
    UpdateCostSheetSerializer,
)
from apps.costsheets.services import CostSheetService
from apps.rates.services import RateService

logger = logging.getLogger(__name__)


class CostSheetPagination(PageNumberPagination):
    """Pagination for the cost sheet list."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CostSheetListView(APIView):
    """
    GET  /api/cost-sheets
    POST /api/cost-sheets

    List visible cost sheets (filter with ?status=), or create one.
    """

    def get(self, request):
        query = CostSheetListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        sheets = CostSheetService.list_sheets(
            actor_for_user(request.user),
            status=query.validated_data.get('status'),
        )

        paginator = CostSheetPagination()
        page = paginator.paginate_queryset(sheets, request, view=self)
        serializer = CostSheetListItemSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def post(self, request):
        """Handle cost sheet creation."""
        serializer = CreateCostSheetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sheet = CostSheetService.create(
            serializer.to_input(),
            actor_for_user(request.user),
            submit=serializer.validated_data['submit'],
        )

        return Response(
            CostSheetSerializer(sheet, context={'request': request}).data,
            status=status.HTTP_201_CREATED,
        )


class CostSheetPreviewView(APIView):
    """
    POST /api/cost-sheets/preview

    Recalculate from form input with current rates. Nothing is saved.
    """

    def post(self, request):
        serializer = CostSheetInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        as_of = timezone.localdate()
        derived, rates = CostSheetService.preview(serializer.to_input(), as_of=as_of)

        return Response(
            PreviewResponseSerializer({
                'derived': derived,
                'rates': RateService.describe(rates, as_of),
            }).data,
            status=status.HTTP_200_OK,
        )


class CostSheetDetailView(APIView):
    """
    GET /api/cost-sheets/<sheet_id>
    PUT /api/cost-sheets/<sheet_id>

    PUT edits the sheet: derived fields are recomputed and the status
    returns to DRAFT.
    """

    def get(self, request, sheet_id):
        sheet = CostSheetService.get_sheet(sheet_id, actor_for_user(request.user))
        return Response(
            CostSheetSerializer(sheet, context={'request': request}).data,
            status=status.HTTP_200_OK,
        )

    def put(self, request, sheet_id):
        """Handle the edit event."""
        actor = actor_for_user(request.user)
        CostSheetService.get_sheet(sheet_id, actor)

        serializer = UpdateCostSheetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sheet = CostSheetService.update(
            sheet_id,
            serializer.to_input(),
            actor,
            expected_version=serializer.validated_data.get('expected_version'),
        )

        return Response(
            CostSheetSerializer(sheet, context={'request': request}).data,
            status=status.HTTP_200_OK,
        )


class CostSheetEventView(APIView):
    """
    Base view for workflow events posted to /api/cost-sheets/<id>/<event>.
    """

    event = None

    def post(self, request, sheet_id):
        actor = actor_for_user(request.user)
        CostSheetService.get_sheet(sheet_id, actor)

        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sheet = CostSheetService.apply_event(
            sheet_id,
            self.event,
            actor,
            remarks=serializer.validated_data['remarks'],
            expected_version=serializer.validated_data.get('expected_version'),
        )

        return Response(
            CostSheetSerializer(sheet, context={'request': request}).data,
            status=status.HTTP_200_OK,
        )


class SubmitCostSheetView(CostSheetEventView):
    """POST /api/cost-sheets/<sheet_id>/submit"""

    event = workflow.Event.SUBMIT


class ApproveCostSheetView(CostSheetEventView):
    """POST /api/cost-sheets/<sheet_id>/approve"""

    event = workflow.Event.APPROVE


class RejectCostSheetView(CostSheetEventView):
    """POST /api/cost-sheets/<sheet_id>/reject (remarks required)"""

    event = workflow.Event.REJECT


class ExportCostSheetView(APIView):
    """
    GET /api/cost-sheets/<sheet_id>/export

    Snapshot of an approved sheet for the document exporter.
    """

    def get(self, request, sheet_id):
        sheet = CostSheetService.export(sheet_id, actor_for_user(request.user))
        return Response(
            CostSheetExportSerializer(sheet).data,
            status=status.HTTP_200_OK,
        )


class DashboardView(APIView):
    """
    GET /api/dashboard

    Status counts, approved value and the six-month trend.
    """

    def get(self, request):
        summary = CostSheetService.dashboard(actor_for_user(request.user))
        return Response(
            DashboardSerializer(summary).data,
            status=status.HTTP_200_OK,
        )
