"""
Core views for the Fleet Cost Sheet System.
"""

import logging

from django.http import JsonResponse
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import Capability, HasCapability
from apps.core.tasks import ingest_fuel_rate_data, ingest_vehicle_data

logger = logging.getLogger(__name__)


def health_check(request):
    """
    GET /health/

    Simple health check endpoint for Docker and load balancer probes.
    Requires no authentication.
    """
    return JsonResponse({'status': 'healthy'}, status=200)


class TriggerIngestionView(APIView):
    """
    POST /api/ingest-data

    Trigger background ingestion of the vehicle catalogue and fuel
    prices from Excel files via Celery tasks.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = Capability.MANAGE_VEHICLES

    def post(self, request):
        """Trigger data ingestion tasks."""
        vehicle_task = ingest_vehicle_data.delay()
        fuel_rate_task = ingest_fuel_rate_data.delay()

        logger.info(
            "Data ingestion triggered by user %s: vehicle_task=%s, fuel_rate_task=%s",
            request.user.pk,
            vehicle_task.id,
            fuel_rate_task.id,
        )

        return Response(
            {
                'message': 'Data ingestion tasks have been triggered.',
                'vehicle_task_id': vehicle_task.id,
                'fuel_rate_task_id': fuel_rate_task.id,
            },
            status=status.HTTP_202_ACCEPTED,
        )
