"""
Boundary validation for cost sheet input.

Runs before any calculation. The engine trusts its input and does no
clamping, so every range check lives here.
"""

import logging
from decimal import Decimal

from apps.core.exceptions import CostSheetValidationError
from apps.core.utils import HUNDRED, ZERO, to_decimal
from apps.costsheets.calculations import (
    CANONICAL_POLICY,
    CalculationPolicy,
    CostSheetInput,
    DerivedFields,
    MaintenanceMode,
    VehicleSpec,
)

logger = logging.getLogger(__name__)

MIN_TENURE_YEARS = 1
MAX_TENURE_YEARS = 10
MAX_DAILY_HOURS = Decimal('24')
MAX_COMPANY_NAME_LENGTH = 200
MAX_DRIVERS = 1000

# Money columns hold 15 digits with 2 places. Capped inputs keep the
# on-road price (price, up to 100% insurance, registration) inside them.
MAX_INPUT_AMOUNT = Decimal('1000000000000')
MAX_STORED_AMOUNT = Decimal('9999999999999.99')

NON_NEGATIVE_AMOUNTS = (
    'registration_charges',
    'monthly_km',
    'driver_salary_per_driver',
    'parking_charges',
    'supervisor_cost',
    'gps_camera_cost',
    'permit_cost',
)

CAPPED_AMOUNTS = (
    'vehicle_price',
    'registration_charges',
    'driver_salary_per_driver',
    'parking_charges',
    'supervisor_cost',
    'gps_camera_cost',
    'permit_cost',
    'maintenance_cost',
)

DERIVED_AMOUNTS = (
    'insurance_amount_annual',
    'insurance_amount',
    'on_road_price',
    'down_payment_amount',
    'loan_amount',
    'emi_amount',
    'subtotal_a',
    'fuel_cost',
    'maintenance_cost',
    'total_driver_cost',
    'subtotal_b',
    'admin_charge_amount',
    'grand_total',
)


def collect_input_errors(
    data: CostSheetInput,
    policy: CalculationPolicy = CANONICAL_POLICY,
) -> dict:
    """Per-field error messages for the user-supplied fields."""
    errors = {}

    if not data.company_name:
        errors['company_name'] = ['Company name is required.']
    elif len(data.company_name) > MAX_COMPANY_NAME_LENGTH:
        errors['company_name'] = [
            f'Company name must be at most {MAX_COMPANY_NAME_LENGTH} characters.'
        ]

    if not MIN_TENURE_YEARS <= data.tenure_years <= MAX_TENURE_YEARS:
        errors['tenure_years'] = [
            f'Tenure must be between {MIN_TENURE_YEARS} and {MAX_TENURE_YEARS} years.'
        ]

    if to_decimal(data.vehicle_price) <= ZERO:
        errors['vehicle_price'] = ['Vehicle price must be greater than 0.']

    if data.down_payment_percent is not None:
        if not ZERO <= to_decimal(data.down_payment_percent) <= HUNDRED:
            errors['down_payment_percent'] = ['Down payment must be between 0 and 100 percent.']

    for name in NON_NEGATIVE_AMOUNTS:
        if to_decimal(getattr(data, name)) < ZERO:
            errors[name] = ['Must not be negative.']

    for name in CAPPED_AMOUNTS:
        if name not in errors and to_decimal(getattr(data, name)) > MAX_INPUT_AMOUNT:
            errors[name] = [f'Must not exceed {MAX_INPUT_AMOUNT:,}.']

    if 'vehicle_price' not in errors and 'registration_charges' not in errors:
        if to_decimal(data.vehicle_price) + to_decimal(data.registration_charges) > MAX_INPUT_AMOUNT:
            errors['vehicle_price'] = [
                f'Vehicle price plus registration must not exceed {MAX_INPUT_AMOUNT:,}.'
            ]

    if not ZERO <= to_decimal(data.daily_hours) <= MAX_DAILY_HOURS:
        errors['daily_hours'] = ['Daily hours must be between 0 and 24.']

    if not 0 <= data.drivers_count <= MAX_DRIVERS:
        errors['drivers_count'] = [f'Driver count must be between 0 and {MAX_DRIVERS}.']

    if policy.maintenance_mode == MaintenanceMode.FLAT:
        if data.maintenance_cost is None:
            errors['maintenance_cost'] = ['Maintenance cost is required.']
        elif to_decimal(data.maintenance_cost) < ZERO:
            errors['maintenance_cost'] = ['Must not be negative.']

    return errors


def collect_vehicle_errors(vehicle: VehicleSpec) -> dict:
    errors = []
    if to_decimal(vehicle.mileage_per_unit) <= ZERO:
        errors.append('Vehicle mileage must be greater than 0.')
    if to_decimal(vehicle.maintenance_cost_per_km) < ZERO:
        errors.append('Vehicle maintenance cost per km must not be negative.')
    return {'vehicle_id': errors} if errors else {}


def validate_cost_sheet_input(
    data: CostSheetInput,
    vehicle: VehicleSpec,
    policy: CalculationPolicy = CANONICAL_POLICY,
    vehicle_is_active: bool = True,
) -> None:
    """
    Validate input and vehicle before calculation.

    Args:
        data: User-supplied fields.
        vehicle: The referenced vehicle's calculation attributes.
        policy: The calculation policy in force (FLAT maintenance
            makes the maintenance amount required).
        vehicle_is_active: False when the vehicle has been retired.

    Raises:
        CostSheetValidationError: With every failing field.
    """
    errors = collect_input_errors(data, policy)
    errors.update(collect_vehicle_errors(vehicle))
    if not vehicle_is_active:
        errors.setdefault('vehicle_id', []).append('Vehicle is inactive.')

    if errors:
        logger.info("Cost sheet input rejected: %s", sorted(errors))
        raise CostSheetValidationError(detail=errors)


def collect_derived_errors(derived: DerivedFields) -> dict:
    """Derived amounts too large for the money columns."""
    return {
        name: ['Result exceeds the largest storable amount; check the inputs.']
        for name in DERIVED_AMOUNTS
        if abs(to_decimal(getattr(derived, name))) > MAX_STORED_AMOUNT
    }


def validate_derived_amounts(derived: DerivedFields) -> None:
    """
    Refuse a calculation whose amounts cannot be stored.

    Raises:
        CostSheetValidationError: Naming every oversized amount.
    """
    errors = collect_derived_errors(derived)
    if errors:
        logger.info("Cost sheet result rejected: %s", sorted(errors))
        raise CostSheetValidationError(detail=errors)
