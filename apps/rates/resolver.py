"""
Rate resolution.

Pure lookup over rate history: the value in effect at a date is the
record with the latest ``effective_from`` on or before it, ties broken
by the highest record id. When nothing matches, a configured default
is returned and flagged as a fallback.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Tuple

from django.conf import settings

from apps.core.utils import to_decimal
from apps.fleet.models import FuelType
from apps.rates.models import RateKind

logger = logging.getLogger(__name__)

BUILTIN_DEFAULTS = {
    RateKind.INTEREST: Decimal('12'),
    RateKind.INSURANCE: Decimal('3.5'),
    RateKind.ADMIN_CHARGE: Decimal('0'),
    RateKind.FUEL: Decimal('0'),
}

# Hybrids are priced at the petrol rate.
FUEL_RATE_SOURCE = {
    FuelType.HYBRID: FuelType.PETROL,
}


@dataclass(frozen=True)
class RateValue:
    kind: str
    value: Decimal
    record_id: Optional[int] = None
    effective_from: Optional[date] = None
    is_fallback: bool = False


@dataclass(frozen=True)
class ResolvedRates:
    """The four rates a calculation needs, as of one date."""

    interest: RateValue
    insurance: RateValue
    admin_charge: RateValue
    fuel: RateValue

    @property
    def interest_percent(self) -> Decimal:
        return self.interest.value

    @property
    def insurance_percent(self) -> Decimal:
        return self.insurance.value

    @property
    def admin_charge_percent(self) -> Decimal:
        return self.admin_charge.value

    @property
    def fuel_rate(self) -> Decimal:
        return self.fuel.value

    @property
    def fallbacks(self) -> Tuple[str, ...]:
        """Kinds resolved to a default because no record was in effect."""
        return tuple(
            r.kind for r in (self.interest, self.insurance, self.admin_charge, self.fuel)
            if r.is_fallback
        )

    @classmethod
    def from_values(cls, interest, insurance, admin_charge, fuel):
        """Build from plain numbers, e.g. for previews and tests."""
        return cls(
            interest=RateValue(RateKind.INTEREST, to_decimal(interest)),
            insurance=RateValue(RateKind.INSURANCE, to_decimal(insurance)),
            admin_charge=RateValue(RateKind.ADMIN_CHARGE, to_decimal(admin_charge)),
            fuel=RateValue(RateKind.FUEL, to_decimal(fuel)),
        )


def default_for(kind: str) -> Decimal:
    configured = getattr(settings, 'RATE_DEFAULTS', {})
    if kind in configured:
        return to_decimal(configured[kind])
    return BUILTIN_DEFAULTS[kind]


def fuel_rate_source(fuel_type: str) -> str:
    return FUEL_RATE_SOURCE.get(fuel_type, fuel_type)


def _latest(records):
    best = None
    for record in records:
        if best is None or (record.effective_from, record.pk) > (best.effective_from, best.pk):
            best = record
    return best


def latest_in_effect(records: Iterable, as_of: date):
    """The record of one key in effect on ``as_of``, or None."""
    return _latest(r for r in records if r.effective_from <= as_of)


def resolve(
    records: Iterable,
    kind: str,
    as_of: date,
    fuel_type: str = '',
    city: str = '',
) -> RateValue:
    """
    Resolve the value of one rate kind in effect on ``as_of``.

    For FUEL, ``fuel_type`` is required and a record for ``city`` is
    preferred over the national (blank city) record.

    Args:
        records: Candidate rate records (any iterable, e.g. a queryset).
        kind: A RateKind value.
        as_of: The date the value must be in effect on.
        fuel_type: Vehicle fuel type, FUEL only.
        city: City for the fuel price, FUEL only.

    Returns:
        RateValue; ``is_fallback`` is set when the default was used.
    """
    fuel_type = fuel_rate_source(fuel_type) if kind == RateKind.FUEL else ''
    in_effect = [
        r for r in records
        if r.kind == kind and r.effective_from <= as_of
    ]

    if kind == RateKind.FUEL:
        in_effect = [r for r in in_effect if r.fuel_type == fuel_type]
        chosen = None
        if city:
            chosen = _latest(r for r in in_effect if r.city == city)
        if chosen is None:
            chosen = _latest(r for r in in_effect if not r.city)
    else:
        chosen = _latest(in_effect)

    if chosen is None:
        value = default_for(kind)
        logger.warning(
            "No %s rate in effect on %s (fuel_type=%r, city=%r); using default %s",
            kind,
            as_of,
            fuel_type,
            city,
            value,
        )
        return RateValue(kind=kind, value=value, is_fallback=True)

    return RateValue(
        kind=kind,
        value=to_decimal(chosen.value),
        record_id=chosen.pk,
        effective_from=chosen.effective_from,
    )


def resolve_all(
    records: Iterable,
    as_of: date,
    fuel_type: str = '',
    city: str = '',
) -> ResolvedRates:
    """Resolve every rate a cost sheet calculation needs."""
    records = list(records)
    return ResolvedRates(
        interest=resolve(records, RateKind.INTEREST, as_of),
        insurance=resolve(records, RateKind.INSURANCE, as_of),
        admin_charge=resolve(records, RateKind.ADMIN_CHARGE, as_of),
        fuel=resolve(records, RateKind.FUEL, as_of, fuel_type=fuel_type, city=city),
    )
