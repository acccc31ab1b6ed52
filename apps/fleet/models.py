"""
Vehicle model for the Fleet Cost Sheet System.
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class FuelType(models.TextChoices):
    PETROL = 'PETROL', 'Petrol'
    DIESEL = 'DIESEL', 'Diesel'
    HYBRID = 'HYBRID', 'Hybrid'
    EV = 'EV', 'Electric'


class Vehicle(models.Model):
    """
    A vehicle model offered for lease.

    Mileage is distance per unit of fuel (km per litre, or km per
    kWh for EVs). Cost sheets reference vehicles by id.
    """

    brand = models.CharField(max_length=100)
    model = models.CharField(max_length=100)
    variant = models.CharField(max_length=100, blank=True, default='')
    fuel_type = models.CharField(
        max_length=10,
        choices=FuelType.choices,
        db_index=True,
    )
    mileage_per_unit = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Distance per unit of fuel (must be > 0).",
    )
    maintenance_cost_per_km = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Maintenance cost per km, used when maintenance is auto-derived.",
    )
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Inactive vehicles cannot be chosen for new cost sheets.",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'vehicles'
        ordering = ['brand', 'model', 'variant']
        indexes = [
            models.Index(
                fields=['brand', 'model', 'variant'],
                name='idx_vehicle_brand_model',
            ),
        ]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        """Brand, model and variant as one label."""
        return ' '.join(p for p in (self.brand, self.model, self.variant) if p)
