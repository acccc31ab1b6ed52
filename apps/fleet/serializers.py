"""
Vehicle serializers for the Fleet Cost Sheet System.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.fleet.models import FuelType, Vehicle


class VehicleSerializer(serializers.ModelSerializer):
    """Serializer for vehicle create, update and display."""

    mileage_per_unit = serializers.DecimalField(
        max_digits=8,
        decimal_places=2,
        min_value=Decimal('0.01'),
        help_text="Distance per unit of fuel (must be > 0).",
    )
    maintenance_cost_per_km = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0'),
        required=False,
    )
    fuel_type = serializers.ChoiceField(choices=FuelType.choices)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Vehicle
        fields = (
            'id', 'brand', 'model', 'variant', 'display_name', 'fuel_type',
            'mileage_per_unit', 'maintenance_cost_per_km', 'is_active',
            'created_at', 'updated_at',
        )
        read_only_fields = ('id', 'created_at', 'updated_at')
