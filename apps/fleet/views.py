"""
Vehicle views for the Fleet Cost Sheet System.

Views are thin: all business logic is in the service layer.
"""

import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import Capability, HasCapability
from apps.fleet.serializers import VehicleSerializer
from apps.fleet.services import VehicleService

logger = logging.getLogger(__name__)


class VehicleListView(APIView):
    """
    GET  /api/vehicles
    POST /api/vehicles

    List the vehicle catalogue, or add a vehicle.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = Capability.MANAGE_VEHICLES

    def get(self, request):
        """List vehicles, optionally only active ones or one fuel type."""
        active_only = request.query_params.get('active', '').lower() in ('true', '1')
        vehicles = VehicleService.list_vehicles(
            active_only=active_only,
            fuel_type=request.query_params.get('fuel_type'),
        )
        serializer = VehicleSerializer(vehicles, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    def post(self, request):
        """Handle vehicle creation."""
        serializer = VehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vehicle = VehicleService.create_vehicle(serializer.validated_data)

        return Response(
            VehicleSerializer(vehicle).data,
            status=status.HTTP_201_CREATED,
        )


class VehicleDetailView(APIView):
    """
    GET   /api/vehicles/<vehicle_id>
    PATCH /api/vehicles/<vehicle_id>
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = Capability.MANAGE_VEHICLES

    def get(self, request, vehicle_id):
        vehicle = VehicleService.get_vehicle(vehicle_id)
        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_200_OK)

    def patch(self, request, vehicle_id):
        """Handle a partial vehicle update."""
        vehicle = VehicleService.get_vehicle(vehicle_id)
        serializer = VehicleSerializer(vehicle, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        vehicle = VehicleService.update_vehicle(vehicle, serializer.validated_data)

        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_200_OK)
