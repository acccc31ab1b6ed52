"""
Cost sheet model for the Fleet Cost Sheet System.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class CostSheetStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    PENDING_APPROVAL = 'PENDING_APPROVAL', 'Pending approval'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'


def money_field(help_text='', **kwargs):
    return models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text=help_text,
        **kwargs,
    )


def percent_field(help_text='', **kwargs):
    return models.DecimalField(
        max_digits=7,
        decimal_places=4,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
        help_text=help_text,
        **kwargs,
    )


class CostSheet(models.Model):
    """
    A monthly cost quotation for one client engagement.

    Holds the user inputs, a snapshot of every derived amount and the
    rates used at save time, and the approval workflow state.
    ``version`` increments on every write for lost-update detection.
    """

    # Inputs
    company_name = models.CharField(max_length=200)
    vehicle = models.ForeignKey(
        'fleet.Vehicle',
        on_delete=models.PROTECT,
        related_name='cost_sheets',
    )
    city = models.CharField(max_length=100, blank=True, default='')
    tenure_years = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(10)],
    )
    vehicle_price = money_field("Ex-showroom price.")
    down_payment_percent = percent_field(
        "Down payment percent; null means full financing.",
        null=True,
        blank=True,
    )
    registration_charges = money_field()
    monthly_km = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    daily_hours = models.DecimalField(max_digits=4, decimal_places=2, default=Decimal('0'))
    drivers_count = models.PositiveSmallIntegerField(default=0)
    driver_salary_per_driver = money_field()
    parking_charges = money_field()
    supervisor_cost = money_field()
    gps_camera_cost = money_field()
    permit_cost = money_field()

    # Snapshot of rates used
    rates_as_of = models.DateField(null=True, blank=True)
    interest_rate_percent = percent_field()
    insurance_rate_percent = percent_field()
    admin_charge_percent = percent_field()
    fuel_rate = models.DecimalField(max_digits=10, decimal_places=4, default=Decimal('0'))

    # Derived amounts
    tenure_months = models.PositiveSmallIntegerField(default=0)
    insurance_amount_annual = money_field()
    insurance_amount = money_field("Monthly insurance.")
    on_road_price = money_field()
    down_payment_amount = money_field()
    loan_amount = money_field()
    emi_amount = money_field()
    subtotal_a = money_field()
    fuel_cost = money_field()
    maintenance_cost = money_field("Auto-derived, or entered when maintenance is flat.")
    total_driver_cost = money_field()
    subtotal_b = money_field()
    admin_charge_amount = money_field()
    grand_total = money_field()

    # Workflow
    status = models.CharField(
        max_length=20,
        choices=CostSheetStatus.choices,
        default=CostSheetStatus.DRAFT,
        db_index=True,
    )
    approval_remarks = models.TextField(blank=True, default='')
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='decided_cost_sheets',
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='cost_sheets',
    )
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cost_sheets'
        ordering = ['-created_at']
        indexes = [
            models.Index(
                fields=['created_by', 'status'],
                name='idx_costsheet_creator_status',
            ),
        ]

    def __str__(self):
        return f"Cost sheet #{self.pk} - {self.company_name} ({self.status})"
