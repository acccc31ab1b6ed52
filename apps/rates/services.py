"""
Rate service layer.

Creation, activation and resolution of effective-dated rates.
The active flag of a (kind, fuel_type, city) key is a projection of
resolution, re-derived atomically per key.
"""

import logging
from datetime import date
from typing import Optional

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import CostSheetValidationError, RateNotFoundError, RateNotInEffectError
from apps.core.utils import HUNDRED, to_decimal
from apps.fleet.models import FuelType
from apps.rates import resolver
from apps.rates.models import PERCENT_KINDS, RateKind, RateRecord

logger = logging.getLogger(__name__)


class RateService:
    """Service for managing and resolving rate records."""

    @staticmethod
    def validate_rate(kind: str, value, fuel_type: str = '', city: str = '') -> dict:
        """
        Check a rate value against its kind.

        Returns:
            Normalized fields for a RateRecord.

        Raises:
            CostSheetValidationError: With per-field messages.
        """
        errors = {}
        value = to_decimal(value)

        if kind not in RateKind.values:
            errors['kind'] = [f"Unknown rate kind '{kind}'."]
        elif kind in PERCENT_KINDS:
            if value < 0 or value > HUNDRED:
                errors['value'] = ['Percentage must be between 0 and 100.']
            if fuel_type or city:
                errors['fuel_type'] = ['Only FUEL rates take a fuel type or city.']
        else:
            if value < 0:
                errors['value'] = ['Fuel price cannot be negative.']
            if not fuel_type:
                errors['fuel_type'] = ['FUEL rates require a fuel type.']
            elif fuel_type == FuelType.HYBRID:
                errors['fuel_type'] = ['Hybrids use the PETROL rate; add a PETROL record instead.']
            elif fuel_type not in FuelType.values:
                errors['fuel_type'] = [f"Unknown fuel type '{fuel_type}'."]

        if errors:
            raise CostSheetValidationError(detail=errors)

        return {
            'kind': kind,
            'value': value,
            'fuel_type': fuel_type or '',
            'city': (city or '').strip(),
        }

    @classmethod
    @transaction.atomic
    def create_rate(
        cls,
        kind: str,
        value,
        effective_from: date,
        fuel_type: str = '',
        city: str = '',
        created_by=None,
    ) -> RateRecord:
        """
        Record a new rate value.

        The key's active flag is re-derived afterwards, so a future-dated
        record stays inactive until its date arrives and a backdated one
        only becomes active if nothing later is already in effect.

        Args:
            kind: A RateKind value.
            value: Percentage or fuel price.
            effective_from: First date the value applies.
            fuel_type: FUEL only.
            city: FUEL only; blank for a national price.
            created_by: The user recording the rate.

        Returns:
            The created RateRecord.
        """
        fields = cls.validate_rate(kind, value, fuel_type, city)
        record = RateRecord.objects.create(
            effective_from=effective_from,
            created_by=created_by,
            **fields,
        )
        logger.info(
            "Rate #%d recorded: %s=%s from %s (fuel_type=%r, city=%r)",
            record.pk,
            record.kind,
            record.value,
            record.effective_from,
            record.fuel_type,
            record.city,
        )
        cls.sync_active(record.kind, record.fuel_type, record.city)
        record.refresh_from_db()
        return record

    @staticmethod
    @transaction.atomic
    def sync_active(kind: str, fuel_type: str = '', city: str = '',
                    as_of: date = None) -> Optional[RateRecord]:
        """
        Flag the record in effect on ``as_of`` as the active one for its key.

        Locks every record of the (kind, fuel_type, city) key before
        flipping flags, so concurrent syncs serialize and at most one
        record of the key ends up active. The flag always names the
        record resolution picks.

        Returns:
            The active record, or None when nothing is in effect yet.
        """
        as_of = as_of or timezone.localdate()
        same_key = RateRecord.objects.select_for_update().filter(
            kind=kind,
            fuel_type=fuel_type,
            city=city,
        )
        current = resolver.latest_in_effect(list(same_key.order_by('pk')), as_of)

        stale = same_key.filter(is_active=True)
        if current is not None:
            stale = stale.exclude(pk=current.pk)
        deactivated = stale.update(is_active=False)

        if current is None:
            if deactivated:
                logger.info(
                    "No %s rate in effect on %s (fuel_type=%r, city=%r); %d deactivated",
                    kind, as_of, fuel_type, city, deactivated,
                )
            return None

        if not current.is_active:
            RateRecord.objects.filter(pk=current.pk).update(is_active=True)
            current.is_active = True
            logger.info(
                "Rate #%d active for %s from %s (fuel_type=%r, city=%r); %d deactivated",
                current.pk,
                kind,
                current.effective_from,
                fuel_type,
                city,
                deactivated,
            )
        return current

    @classmethod
    def sync_all(cls, as_of: date = None) -> int:
        """Re-derive the active flag of every key; returns the key count."""
        keys = (
            RateRecord.objects
            .values_list('kind', 'fuel_type', 'city')
            .distinct()
            .order_by('kind', 'fuel_type', 'city')
        )
        count = 0
        for kind, fuel_type, city in keys:
            cls.sync_active(kind, fuel_type, city, as_of=as_of)
            count += 1
        return count

    @classmethod
    def activate(cls, rate_id: int) -> RateRecord:
        """
        Confirm a record as the active one for its key.

        Only the record in effect today can be active. Activating a
        superseded or future-dated record raises RateNotInEffectError and
        leaves the key on the record resolution actually uses.
        """
        target = cls.get_rate(rate_id)
        current = cls.sync_active(target.kind, target.fuel_type, target.city)

        if current is None or current.pk != target.pk:
            today = timezone.localdate()
            in_effect = f"rate #{current.pk} is" if current is not None else "no rate of this key is"
            logger.warning(
                "Rate #%d not activated: not in effect on %s", target.pk, today,
            )
            raise RateNotInEffectError(
                detail=(
                    f"Rate #{target.pk} (from {target.effective_from}) is not in effect "
                    f"on {today}; {in_effect}."
                )
            )
        return current

    @staticmethod
    def get_rate(rate_id: int) -> RateRecord:
        try:
            return RateRecord.objects.get(pk=rate_id)
        except RateRecord.DoesNotExist:
            raise RateNotFoundError(detail=f"Rate with ID {rate_id} not found.")

    @staticmethod
    def history(kind: Optional[str] = None, fuel_type: str = None, city: str = None):
        """Rate records, newest effective date first."""
        records = RateRecord.objects.all()
        if kind:
            records = records.filter(kind=kind)
        if fuel_type:
            records = records.filter(fuel_type=fuel_type)
        if city is not None:
            records = records.filter(city=city)
        return records.order_by('kind', '-effective_from', '-id')

    @staticmethod
    def resolve(kind: str, as_of: date = None, fuel_type: str = '', city: str = '') -> resolver.RateValue:
        """Resolve one rate kind against stored history."""
        as_of = as_of or timezone.localdate()
        candidates = RateRecord.objects.filter(kind=kind, effective_from__lte=as_of)
        return resolver.resolve(candidates, kind, as_of, fuel_type=fuel_type, city=city)

    @staticmethod
    def resolve_all(as_of: date = None, fuel_type: str = '', city: str = '') -> resolver.ResolvedRates:
        """Resolve all four rates against stored history."""
        as_of = as_of or timezone.localdate()
        candidates = RateRecord.objects.filter(effective_from__lte=as_of)
        return resolver.resolve_all(candidates, as_of, fuel_type=fuel_type, city=city)

    @staticmethod
    def describe(rates: resolver.ResolvedRates, as_of: date) -> dict:
        """Plain dict of resolved rates for API responses."""
        def _value(rate):
            return {
                'value': rate.value,
                'record_id': rate.record_id,
                'effective_from': rate.effective_from,
                'is_fallback': rate.is_fallback,
            }

        return {
            'as_of': as_of,
            'interest': _value(rates.interest),
            'insurance': _value(rates.insurance),
            'admin_charge': _value(rates.admin_charge),
            'fuel': _value(rates.fuel),
            'fallbacks': list(rates.fallbacks),
        }
