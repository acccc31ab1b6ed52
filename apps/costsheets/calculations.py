"""
Cost sheet calculation engine.

A pure function from validated inputs, resolved rates and the vehicle
to every derived monetary field. No I/O and no hidden state: the same
arguments always produce the same result.

Each money field is rounded to 2 places (ROUND_HALF_UP) at the step
that produces it, and later steps use the rounded value. The stored
snapshot therefore satisfies its own sums exactly, e.g.
``grand_total == subtotal_a + subtotal_b + admin_charge_amount``.

Input validation is not done here; see ``validation.py``.
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Optional

from django.conf import settings

from apps.core.utils import (
    MONTHS_PER_YEAR,
    ZERO,
    calculate_emi,
    percent_of,
    quantize_money,
    to_decimal,
)


class FinancingBasis:
    ON_ROAD = 'ON_ROAD'
    VEHICLE_PRICE = 'VEHICLE_PRICE'

    choices = (ON_ROAD, VEHICLE_PRICE)


class SubtotalAMode:
    EMI_ONLY = 'EMI_ONLY'
    EMI_INSURANCE_REGISTRATION = 'EMI_INSURANCE_REGISTRATION'

    choices = (EMI_ONLY, EMI_INSURANCE_REGISTRATION)


class MaintenanceMode:
    AUTO = 'AUTO'
    FLAT = 'FLAT'

    choices = (AUTO, FLAT)


@dataclass(frozen=True)
class CalculationPolicy:
    """
    Formula variant used by ``calculate``.

    financing_basis:
        ON_ROAD finances vehicle price + annual insurance + registration.
        VEHICLE_PRICE finances the vehicle price alone.
    subtotal_a_mode:
        EMI_ONLY, or EMI_INSURANCE_REGISTRATION which adds the full
        annual insurance amount and the registration charges to the
        EMI, as the older vehicle-cost sheets did.
    maintenance_mode:
        AUTO derives maintenance from the vehicle's per-km cost;
        FLAT uses the amount entered on the sheet.
    """

    financing_basis: str = FinancingBasis.ON_ROAD
    subtotal_a_mode: str = SubtotalAMode.EMI_ONLY
    maintenance_mode: str = MaintenanceMode.AUTO

    def __post_init__(self):
        for name, allowed in (
            ('financing_basis', FinancingBasis.choices),
            ('subtotal_a_mode', SubtotalAMode.choices),
            ('maintenance_mode', MaintenanceMode.choices),
        ):
            value = getattr(self, name)
            if value not in allowed:
                raise ValueError(f"Unknown {name} '{value}'; expected one of {allowed}.")

    @classmethod
    def from_settings(cls) -> 'CalculationPolicy':
        """The policy configured in COST_SHEET_CALCULATION_POLICY."""
        configured = getattr(settings, 'COST_SHEET_CALCULATION_POLICY', None) or {}
        return cls(**configured)


CANONICAL_POLICY = CalculationPolicy()

LEGACY_VEHICLE_COST_POLICY = CalculationPolicy(
    financing_basis=FinancingBasis.VEHICLE_PRICE,
    subtotal_a_mode=SubtotalAMode.EMI_INSURANCE_REGISTRATION,
    maintenance_mode=MaintenanceMode.FLAT,
)


@dataclass(frozen=True)
class CostSheetInput:
    """User-supplied cost sheet fields, before calculation."""

    company_name: str
    vehicle_id: int
    tenure_years: int
    vehicle_price: Decimal
    monthly_km: Decimal
    city: str = ''
    down_payment_percent: Optional[Decimal] = None
    registration_charges: Decimal = ZERO
    daily_hours: Decimal = ZERO
    drivers_count: int = 0
    driver_salary_per_driver: Decimal = ZERO
    parking_charges: Decimal = ZERO
    supervisor_cost: Decimal = ZERO
    gps_camera_cost: Decimal = ZERO
    permit_cost: Decimal = ZERO
    maintenance_cost: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'CostSheetInput':
        """Build from serializer data or a model instance's field dict."""
        def _dec(name, default=ZERO):
            value = data.get(name)
            return default if value is None else to_decimal(value)

        return cls(
            company_name=(data.get('company_name') or '').strip(),
            vehicle_id=data.get('vehicle_id'),
            city=(data.get('city') or '').strip(),
            tenure_years=int(data.get('tenure_years') or 0),
            vehicle_price=_dec('vehicle_price'),
            down_payment_percent=_dec('down_payment_percent', None),
            registration_charges=_dec('registration_charges'),
            monthly_km=_dec('monthly_km'),
            daily_hours=_dec('daily_hours'),
            drivers_count=int(data.get('drivers_count') or 0),
            driver_salary_per_driver=_dec('driver_salary_per_driver'),
            parking_charges=_dec('parking_charges'),
            supervisor_cost=_dec('supervisor_cost'),
            gps_camera_cost=_dec('gps_camera_cost'),
            permit_cost=_dec('permit_cost'),
            maintenance_cost=_dec('maintenance_cost', None),
        )


@dataclass(frozen=True)
class VehicleSpec:
    """The vehicle attributes the engine reads."""

    fuel_type: str
    mileage_per_unit: Decimal
    maintenance_cost_per_km: Decimal = ZERO

    @classmethod
    def from_vehicle(cls, vehicle) -> 'VehicleSpec':
        return cls(
            fuel_type=vehicle.fuel_type,
            mileage_per_unit=to_decimal(vehicle.mileage_per_unit),
            maintenance_cost_per_km=to_decimal(vehicle.maintenance_cost_per_km),
        )


@dataclass(frozen=True)
class DerivedFields:
    tenure_months: int
    interest_rate_percent: Decimal
    insurance_rate_percent: Decimal
    insurance_amount_annual: Decimal
    insurance_amount: Decimal
    on_road_price: Decimal
    down_payment_amount: Decimal
    loan_amount: Decimal
    emi_amount: Decimal
    subtotal_a: Decimal
    fuel_rate: Decimal
    fuel_cost: Decimal
    maintenance_cost: Decimal
    total_driver_cost: Decimal
    subtotal_b: Decimal
    admin_charge_percent: Decimal
    admin_charge_amount: Decimal
    grand_total: Decimal

    def as_dict(self) -> dict:
        return asdict(self)


def calculate(
    data: CostSheetInput,
    rates,
    vehicle: VehicleSpec,
    policy: CalculationPolicy = CANONICAL_POLICY,
) -> DerivedFields:
    """
    Derive every monetary field of a cost sheet.

    Args:
        data: Validated cost sheet input.
        rates: Anything exposing interest_percent, insurance_percent,
            admin_charge_percent and fuel_rate (e.g. ResolvedRates).
        vehicle: Fuel type, mileage and per-km maintenance cost.
        policy: Formula variant.

    Returns:
        DerivedFields with all money quantized to 2 places.
    """
    interest_percent = to_decimal(rates.interest_percent)
    insurance_percent = to_decimal(rates.insurance_percent)
    admin_percent = to_decimal(rates.admin_charge_percent)
    fuel_rate = to_decimal(rates.fuel_rate)

    tenure_months = data.tenure_years * MONTHS_PER_YEAR
    vehicle_price = quantize_money(data.vehicle_price)
    registration = quantize_money(data.registration_charges)
    down_payment_percent = to_decimal(data.down_payment_percent)

    insurance_annual = percent_of(vehicle_price, insurance_percent)
    insurance_monthly = quantize_money(insurance_annual / MONTHS_PER_YEAR)

    on_road_price = vehicle_price + insurance_annual + registration

    if policy.financing_basis == FinancingBasis.ON_ROAD:
        financed_base = on_road_price
    else:
        financed_base = vehicle_price

    down_payment_amount = percent_of(financed_base, down_payment_percent)
    loan_amount = financed_base - down_payment_amount

    emi = calculate_emi(loan_amount, interest_percent, tenure_months)

    if policy.subtotal_a_mode == SubtotalAMode.EMI_ONLY:
        subtotal_a = emi
    else:
        subtotal_a = emi + insurance_annual + registration

    fuel_cost = quantize_money(
        to_decimal(data.monthly_km) / to_decimal(vehicle.mileage_per_unit) * fuel_rate
    )

    if policy.maintenance_mode == MaintenanceMode.AUTO:
        maintenance_cost = quantize_money(
            to_decimal(data.monthly_km) * to_decimal(vehicle.maintenance_cost_per_km)
        )
    else:
        maintenance_cost = quantize_money(data.maintenance_cost)

    total_driver_cost = quantize_money(
        Decimal(data.drivers_count) * to_decimal(data.driver_salary_per_driver)
    )

    subtotal_b = (
        fuel_cost
        + total_driver_cost
        + maintenance_cost
        + quantize_money(data.parking_charges)
        + quantize_money(data.supervisor_cost)
        + quantize_money(data.gps_camera_cost)
        + quantize_money(data.permit_cost)
    )

    admin_charge_amount = percent_of(subtotal_a + subtotal_b, admin_percent)
    grand_total = subtotal_a + subtotal_b + admin_charge_amount

    return DerivedFields(
        tenure_months=tenure_months,
        interest_rate_percent=interest_percent,
        insurance_rate_percent=insurance_percent,
        insurance_amount_annual=insurance_annual,
        insurance_amount=insurance_monthly,
        on_road_price=on_road_price,
        down_payment_amount=down_payment_amount,
        loan_amount=loan_amount,
        emi_amount=emi,
        subtotal_a=subtotal_a,
        fuel_rate=fuel_rate,
        fuel_cost=fuel_cost,
        maintenance_cost=maintenance_cost,
        total_driver_cost=total_driver_cost,
        subtotal_b=subtotal_b,
        admin_charge_percent=admin_percent,
        admin_charge_amount=admin_charge_amount,
        grand_total=grand_total,
    )
