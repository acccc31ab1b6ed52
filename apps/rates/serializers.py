"""
Rate serializers for the Fleet Cost Sheet System.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.fleet.models import FuelType
from apps.rates.models import RateKind, RateRecord


class RateRecordSerializer(serializers.ModelSerializer):
    """Serializer for displaying a rate record."""

    class Meta:
        model = RateRecord
        fields = (
            'id', 'kind', 'value', 'effective_from', 'is_active',
            'fuel_type', 'city', 'created_by', 'created_at',
        )
        read_only_fields = fields


class CreateRateSerializer(serializers.Serializer):
    """Serializer for rate creation request."""

    kind = serializers.ChoiceField(choices=RateKind.choices)
    value = serializers.DecimalField(
        max_digits=10,
        decimal_places=4,
        min_value=Decimal('0'),
        help_text="Percentage, or price per unit for FUEL.",
    )
    effective_from = serializers.DateField()
    fuel_type = serializers.ChoiceField(
        choices=FuelType.choices,
        required=False,
        allow_blank=True,
        default='',
    )
    city = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        default='',
    )


class CurrentRatesQuerySerializer(serializers.Serializer):
    """Query parameters for resolving current rates."""

    as_of = serializers.DateField(required=False)
    fuel_type = serializers.ChoiceField(
        choices=FuelType.choices,
        required=False,
        allow_blank=True,
        default='',
    )
    city = serializers.CharField(
        max_length=100,
        required=False,
        allow_blank=True,
        default='',
    )


class RateValueSerializer(serializers.Serializer):
    value = serializers.DecimalField(max_digits=10, decimal_places=4)
    record_id = serializers.IntegerField(allow_null=True)
    effective_from = serializers.DateField(allow_null=True)
    is_fallback = serializers.BooleanField()


class ResolvedRatesSerializer(serializers.Serializer):
    """Serializer for resolved rates response."""

    as_of = serializers.DateField()
    interest = RateValueSerializer()
    insurance = RateValueSerializer()
    admin_charge = RateValueSerializer()
    fuel = RateValueSerializer()
    fallbacks = serializers.ListField(child=serializers.CharField())
