"""
Effective-dated rate history for the Fleet Cost Sheet System.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.fleet.models import FuelType


class RateKind(models.TextChoices):
    INTEREST = 'INTEREST', 'Interest rate (% p.a.)'
    INSURANCE = 'INSURANCE', 'Insurance rate (% of vehicle price p.a.)'
    ADMIN_CHARGE = 'ADMIN_CHARGE', 'Admin charge (%)'
    FUEL = 'FUEL', 'Fuel price per unit'


PERCENT_KINDS = (RateKind.INTEREST, RateKind.INSURANCE, RateKind.ADMIN_CHARGE)


class RateRecord(models.Model):
    """
    One value of a time-varying rate.

    The value in effect at a date is the record with the latest
    ``effective_from`` not after that date. ``is_active`` mirrors
    that rule for today: it marks the record of the (kind, fuel_type,
    city) key currently in effect, and at most one record per key
    carries it.
    """

    kind = models.CharField(
        max_length=20,
        choices=RateKind.choices,
        db_index=True,
    )
    value = models.DecimalField(
        max_digits=10,
        decimal_places=4,
        validators=[MinValueValidator(Decimal('0'))],
        help_text="Percentage for INTEREST/INSURANCE/ADMIN_CHARGE, price per unit for FUEL.",
    )
    effective_from = models.DateField(db_index=True)
    is_active = models.BooleanField(default=False, db_index=True)
    fuel_type = models.CharField(
        max_length=10,
        choices=FuelType.choices,
        blank=True,
        default='',
        help_text="FUEL records only.",
    )
    city = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text="FUEL records only. Blank means the national rate.",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'rate_records'
        ordering = ['kind', '-effective_from', '-id']
        indexes = [
            models.Index(
                fields=['kind', 'fuel_type', 'city', 'effective_from'],
                name='idx_rate_key_effective',
            ),
        ]

    def __str__(self):
        key = '/'.join(p for p in (self.fuel_type, self.city) if p)
        suffix = f" [{key}]" if key else ''
        return f"{self.kind}{suffix} = {self.value} from {self.effective_from}"

    @property
    def key(self):
        return (self.kind, self.fuel_type, self.city)
