"""
Vehicle service layer.

Views delegate to this service; no business logic in views.
"""

import logging

from apps.core.exceptions import VehicleNotFoundError
from apps.fleet.models import Vehicle

logger = logging.getLogger(__name__)


class VehicleService:
    """Service class for vehicle catalogue operations."""

    @staticmethod
    def list_vehicles(active_only: bool = False, fuel_type: str = None):
        vehicles = Vehicle.objects.all()
        if active_only:
            vehicles = vehicles.filter(is_active=True)
        if fuel_type:
            vehicles = vehicles.filter(fuel_type=fuel_type)
        return vehicles

    @staticmethod
    def get_vehicle(vehicle_id: int) -> Vehicle:
        """
        Retrieve a vehicle by ID.

        Raises:
            VehicleNotFoundError: If the vehicle does not exist.
        """
        try:
            return Vehicle.objects.get(pk=vehicle_id)
        except Vehicle.DoesNotExist:
            raise VehicleNotFoundError(
                detail=f"Vehicle with ID {vehicle_id} not found."
            )

    @staticmethod
    def create_vehicle(validated_data: dict) -> Vehicle:
        vehicle = Vehicle.objects.create(**validated_data)
        logger.info(
            "Created vehicle %s (ID: %d, fuel=%s, mileage=%s)",
            vehicle.display_name,
            vehicle.pk,
            vehicle.fuel_type,
            vehicle.mileage_per_unit,
        )
        return vehicle

    @staticmethod
    def update_vehicle(vehicle: Vehicle, validated_data: dict) -> Vehicle:
        """
        Apply an administrative correction to a vehicle.

        Existing cost sheets keep their snapshot values; only new
        calculations see the change.
        """
        for attr, value in validated_data.items():
            setattr(vehicle, attr, value)
        vehicle.save()
        logger.info(
            "Updated vehicle %d: fields=%s",
            vehicle.pk,
            sorted(validated_data),
        )
        return vehicle
