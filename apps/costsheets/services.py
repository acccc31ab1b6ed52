"""
Cost sheet service layer.

Ties rate resolution, validation, calculation and the workflow state
machine to persistence. Every write locks the sheet row, checks the
caller's expected version and increments it. Notifications are queued
only after the transaction commits.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.accounts.permissions import Actor, Capability
from apps.core.exceptions import (
    ConcurrencyConflictError,
    CostSheetNotApprovedError,
    CostSheetNotFoundError,
)
from apps.costsheets import workflow
from apps.costsheets.calculations import (
    CalculationPolicy,
    CostSheetInput,
    DerivedFields,
    VehicleSpec,
    calculate,
)
from apps.costsheets.models import CostSheet, CostSheetStatus
from apps.costsheets.validation import validate_cost_sheet_input, validate_derived_amounts
from apps.fleet.models import Vehicle
from apps.fleet.services import VehicleService
from apps.notifications.services import NotificationService
from apps.rates.resolver import ResolvedRates
from apps.rates.services import RateService

logger = logging.getLogger(__name__)

INPUT_FIELDS = (
    'company_name',
    'city',
    'tenure_years',
    'vehicle_price',
    'down_payment_percent',
    'registration_charges',
    'monthly_km',
    'daily_hours',
    'drivers_count',
    'driver_salary_per_driver',
    'parking_charges',
    'supervisor_cost',
    'gps_camera_cost',
    'permit_cost',
)

DERIVED_FIELDS = (
    'tenure_months',
    'interest_rate_percent',
    'insurance_rate_percent',
    'insurance_amount_annual',
    'insurance_amount',
    'on_road_price',
    'down_payment_amount',
    'loan_amount',
    'emi_amount',
    'subtotal_a',
    'fuel_rate',
    'fuel_cost',
    'maintenance_cost',
    'total_driver_cost',
    'subtotal_b',
    'admin_charge_percent',
    'admin_charge_amount',
    'grand_total',
)

DASHBOARD_MONTHS = 6


def _queue_notification(event: Optional[str], sheet: CostSheet) -> None:
    if event is None:
        return
    transaction.on_commit(lambda: NotificationService.notify(event, sheet))


class CalculationService:
    """Resolves rates and runs the engine for one input set."""

    @staticmethod
    def compute(
        data: CostSheetInput,
        vehicle: Vehicle,
        as_of: date = None,
        policy: CalculationPolicy = None,
        require_active_vehicle: bool = True,
    ) -> Tuple[DerivedFields, ResolvedRates]:
        """
        Validate input, resolve rates as of a date and calculate.

        Args:
            data: User-supplied fields.
            vehicle: The referenced vehicle.
            as_of: Rate date; today by default.
            policy: Formula variant; the configured policy by default.
            require_active_vehicle: Refuse retired vehicles.

        Returns:
            (derived fields, rates used).
        """
        policy = policy or CalculationPolicy.from_settings()
        as_of = as_of or timezone.localdate()
        spec = VehicleSpec.from_vehicle(vehicle)

        validate_cost_sheet_input(
            data,
            spec,
            policy=policy,
            vehicle_is_active=vehicle.is_active or not require_active_vehicle,
        )

        rates = RateService.resolve_all(
            as_of=as_of,
            fuel_type=vehicle.fuel_type,
            city=data.city,
        )
        if rates.fallbacks:
            logger.warning(
                "Calculating with default rates for %s (as of %s)",
                ', '.join(rates.fallbacks),
                as_of,
            )
        derived = calculate(data, rates, spec, policy)
        validate_derived_amounts(derived)
        return derived, rates


class CostSheetService:
    """Service for cost sheet creation, edits and workflow transitions."""

    @staticmethod
    def _apply(sheet: CostSheet, data: CostSheetInput, vehicle: Vehicle,
               derived: DerivedFields, as_of: date) -> None:
        sheet.vehicle = vehicle
        for name in INPUT_FIELDS:
            setattr(sheet, name, getattr(data, name))
        for name in DERIVED_FIELDS:
            setattr(sheet, name, getattr(derived, name))
        sheet.rates_as_of = as_of

    @staticmethod
    def _lock(sheet_id: int, expected_version: Optional[int] = None) -> CostSheet:
        """Lock the sheet row and check the caller's version."""
        try:
            sheet = (
                CostSheet.objects
                .select_for_update()
                .select_related('vehicle', 'created_by')
                .get(pk=sheet_id)
            )
        except CostSheet.DoesNotExist:
            raise CostSheetNotFoundError(
                detail=f"Cost sheet with ID {sheet_id} not found."
            )

        if expected_version is not None and expected_version != sheet.version:
            logger.warning(
                "Cost sheet %d: version conflict (expected %d, found %d)",
                sheet.pk,
                expected_version,
                sheet.version,
            )
            raise ConcurrencyConflictError(
                detail=(
                    f"Cost sheet {sheet.pk} is at version {sheet.version}, "
                    f"not {expected_version}. Reload and retry."
                )
            )
        return sheet

    @staticmethod
    def preview(data: CostSheetInput, as_of: date = None) -> Tuple[DerivedFields, ResolvedRates]:
        """Calculate without saving, for live form feedback."""
        vehicle = VehicleService.get_vehicle(data.vehicle_id)
        return CalculationService.compute(data, vehicle, as_of=as_of)

    @classmethod
    @transaction.atomic
    def create(cls, data: CostSheetInput, actor: Actor, submit: bool = False) -> CostSheet:
        """
        Create a cost sheet in DRAFT, optionally submitting it at once.

        Submission at creation runs the normal submit transition, so
        its guard and notification apply.
        """
        vehicle = VehicleService.get_vehicle(data.vehicle_id)
        as_of = timezone.localdate()
        derived, _ = CalculationService.compute(data, vehicle, as_of=as_of)

        sheet = CostSheet(created_by_id=actor.user_id, status=CostSheetStatus.DRAFT)
        cls._apply(sheet, data, vehicle, derived, as_of)

        event = None
        if submit:
            event = workflow.transition(sheet, workflow.Event.SUBMIT, actor)
        sheet.save()

        logger.info(
            "Cost sheet #%d created by user %s for %s: grand_total=%s, status=%s",
            sheet.pk,
            actor.user_id,
            sheet.company_name,
            sheet.grand_total,
            sheet.status,
        )
        _queue_notification(event, sheet)
        return sheet

    @classmethod
    @transaction.atomic
    def update(
        cls,
        sheet_id: int,
        data: CostSheetInput,
        actor: Actor,
        expected_version: Optional[int] = None,
    ) -> CostSheet:
        """
        Edit a DRAFT or REJECTED sheet: recompute and reset to DRAFT.

        Approved sheets are immutable.
        """
        sheet = cls._lock(sheet_id, expected_version)
        workflow.check_transition(sheet, workflow.Event.EDIT, actor)

        if data.vehicle_id == sheet.vehicle_id:
            vehicle = sheet.vehicle
        else:
            vehicle = VehicleService.get_vehicle(data.vehicle_id)

        as_of = timezone.localdate()
        derived, _ = CalculationService.compute(
            data,
            vehicle,
            as_of=as_of,
            require_active_vehicle=vehicle.pk != sheet.vehicle_id,
        )

        cls._apply(sheet, data, vehicle, derived, as_of)
        workflow.transition(sheet, workflow.Event.EDIT, actor)
        sheet.version += 1
        sheet.save()
        return sheet

    @classmethod
    @transaction.atomic
    def apply_event(
        cls,
        sheet_id: int,
        event: str,
        actor: Actor,
        remarks: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> CostSheet:
        """
        Run submit, approve or reject on a stored sheet.

        The guard check and the write happen under one row lock, so two
        racing approvers cannot both succeed.
        """
        sheet = cls._lock(sheet_id, expected_version)
        notification = workflow.transition(sheet, event, actor, remarks=remarks)
        sheet.version += 1
        sheet.save()
        _queue_notification(notification, sheet)
        return sheet

    @classmethod
    def submit(cls, sheet_id, actor, expected_version=None):
        return cls.apply_event(sheet_id, workflow.Event.SUBMIT, actor,
                               expected_version=expected_version)

    @classmethod
    def approve(cls, sheet_id, actor, remarks='', expected_version=None):
        return cls.apply_event(sheet_id, workflow.Event.APPROVE, actor,
                               remarks=remarks, expected_version=expected_version)

    @classmethod
    def reject(cls, sheet_id, actor, remarks='', expected_version=None):
        return cls.apply_event(sheet_id, workflow.Event.REJECT, actor,
                               remarks=remarks, expected_version=expected_version)

    @staticmethod
    def visible_to(actor: Actor):
        """Creators see their own sheets; editors and approvers see all."""
        sheets = CostSheet.objects.select_related('vehicle', 'created_by', 'approved_by')
        if actor.can(Capability.EDIT_ANY) or actor.can(Capability.APPROVE):
            return sheets
        return sheets.filter(created_by_id=actor.user_id)

    @classmethod
    def get_sheet(cls, sheet_id: int, actor: Actor) -> CostSheet:
        """
        Retrieve a cost sheet the actor may see.

        Raises:
            CostSheetNotFoundError: Missing, or not visible to the actor.
        """
        try:
            return cls.visible_to(actor).get(pk=sheet_id)
        except CostSheet.DoesNotExist:
            raise CostSheetNotFoundError(
                detail=f"Cost sheet with ID {sheet_id} not found."
            )

    @classmethod
    def list_sheets(cls, actor: Actor, status: Optional[str] = None):
        sheets = cls.visible_to(actor)
        if status:
            sheets = sheets.filter(status=status)
        return sheets.order_by('-created_at', '-id')

    @classmethod
    def export(cls, sheet_id: int, actor: Actor) -> CostSheet:
        """Return an approved sheet for document generation."""
        sheet = cls.get_sheet(sheet_id, actor)
        if sheet.status != CostSheetStatus.APPROVED:
            raise CostSheetNotApprovedError(
                detail=f"Cost sheet {sheet.pk} is {sheet.status}; only approved sheets can be exported."
            )
        return sheet

    @classmethod
    def dashboard(cls, actor: Actor, today: date = None) -> dict:
        """
        Status counts, approved value and a monthly trend.

        The trend covers the current month and the five before it.
        """
        today = today or timezone.localdate()
        sheets = cls.visible_to(actor)

        counts = sheets.aggregate(
            total=Count('id'),
            draft=Count('id', filter=Q(status=CostSheetStatus.DRAFT)),
            pending=Count('id', filter=Q(status=CostSheetStatus.PENDING_APPROVAL)),
            approved=Count('id', filter=Q(status=CostSheetStatus.APPROVED)),
            rejected=Count('id', filter=Q(status=CostSheetStatus.REJECTED)),
        )
        approved = sheets.filter(status=CostSheetStatus.APPROVED).aggregate(
            value=Sum('grand_total'),
            average=Avg('grand_total'),
        )

        first_month = today.replace(day=1) - relativedelta(months=DASHBOARD_MONTHS - 1)
        monthly = {
            row['month'].date() if hasattr(row['month'], 'date') else row['month']: row
            for row in (
                sheets.filter(created_at__date__gte=first_month)
                .annotate(month=TruncMonth('created_at'))
                .values('month')
                .order_by('month')
                .annotate(
                    created=Count('id'),
                    approved=Count('id', filter=Q(status=CostSheetStatus.APPROVED)),
                )
            )
        }

        trend = []
        for offset in range(DASHBOARD_MONTHS):
            month = first_month + relativedelta(months=offset)
            row = monthly.get(month, {})
            trend.append({
                'month': month,
                'created': row.get('created', 0),
                'approved': row.get('approved', 0),
            })

        return {
            **counts,
            'approved_value': approved['value'] or Decimal('0.00'),
            'approved_average': (approved['average'] or Decimal('0')).quantize(Decimal('0.01')),
            'active_vehicles': Vehicle.objects.filter(is_active=True).count(),
            'monthly_trend': trend,
        }
