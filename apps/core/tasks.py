"""
Celery tasks for data ingestion.

Reads vehicles.xlsx and fuel_rates.xlsx using pandas and upserts
them with idempotency guarantees.
"""

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

import pandas as pd
from celery import shared_task
from django.conf import settings
from django.db import IntegrityError

from apps.core.exceptions import CostSheetValidationError, DataIngestionError

logger = logging.getLogger(__name__)

VEHICLE_COLUMNS = ('brand', 'model', 'fuel_type')
FUEL_RATE_COLUMNS = ('fuel_type', 'effective_from')


def _read_sheet(file_path: Path, required=()) -> pd.DataFrame:
    df = pd.read_excel(file_path)
    # Normalize column names
    df.columns = [str(col).strip().lower().replace(' ', '_') for col in df.columns]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise DataIngestionError(
            f"{file_path.name} is missing required columns: {', '.join(missing)}"
        )
    return df


def _text(row, name, default=''):
    value = row.get(name, default)
    if value is None or pd.isna(value):
        return default
    return str(value).strip()


def _decimal(row, *names):
    """First non-empty column among ``names``, as Decimal."""
    for name in names:
        value = row.get(name)
        if value is not None and not pd.isna(value):
            return Decimal(str(value))
    raise ValueError(f"missing {' / '.join(names)}")


@shared_task(
    bind=True,
    name='core.ingest_vehicle_data',
    max_retries=3,
    default_retry_delay=10,
)
def ingest_vehicle_data(self):
    """
    Ingest the vehicle catalogue from vehicles.xlsx.

    Rows are matched on (brand, model, variant) and updated in place,
    so the task is safe to run multiple times.
    """
    from apps.fleet.models import FuelType, Vehicle

    file_path = Path(settings.DATA_DIR) / 'vehicles.xlsx'

    if not file_path.exists():
        logger.error("Vehicle data file not found: %s", file_path)
        return {'status': 'error', 'message': f'File not found: {file_path}'}

    try:
        logger.info("Starting vehicle data ingestion from %s", file_path)

        df = _read_sheet(file_path, required=VEHICLE_COLUMNS)
        logger.info("Read %d rows from vehicles.xlsx", len(df))

        created_count = 0
        updated_count = 0
        error_count = 0

        for index, row in df.iterrows():
            try:
                brand = _text(row, 'brand')
                model = _text(row, 'model')
                if not brand or not model:
                    logger.warning("Row %d: missing brand or model, skipping", index)
                    error_count += 1
                    continue

                fuel_type = _text(row, 'fuel_type').upper()
                if fuel_type not in FuelType.values:
                    logger.warning(
                        "Row %d: unknown fuel type %r, skipping", index, fuel_type
                    )
                    error_count += 1
                    continue

                mileage = _decimal(row, 'mileage_per_unit', 'mileage')
                if mileage <= 0:
                    logger.warning("Row %d: mileage must be positive, skipping", index)
                    error_count += 1
                    continue

                maintenance = Decimal('0')
                if not pd.isna(row.get('maintenance_cost_per_km', float('nan'))):
                    maintenance = _decimal(row, 'maintenance_cost_per_km')

                is_active = row.get('is_active', True)
                if pd.isna(is_active):
                    is_active = True
                elif isinstance(is_active, str):
                    is_active = is_active.strip().lower() in ('true', 'yes', 'y', '1')

                _, created = Vehicle.objects.update_or_create(
                    brand=brand,
                    model=model,
                    variant=_text(row, 'variant'),
                    defaults={
                        'fuel_type': fuel_type,
                        'mileage_per_unit': mileage,
                        'maintenance_cost_per_km': maintenance,
                        'is_active': bool(is_active),
                    },
                )

                if created:
                    created_count += 1
                else:
                    updated_count += 1

            except (ValueError, TypeError, InvalidOperation, IntegrityError) as e:
                logger.warning("Row %d: failed to process (%s)", index, e)
                error_count += 1
                continue

        result = {
            'status': 'success',
            'total_rows': len(df),
            'created': created_count,
            'updated': updated_count,
            'errors': error_count,
        }
        logger.info("Vehicle data ingestion complete: %s", result)
        return result

    except DataIngestionError as e:
        logger.error("Vehicle data ingestion aborted: %s", e)
        return {'status': 'error', 'message': str(e)}

    except Exception as exc:
        logger.exception("Vehicle data ingestion failed")
        raise self.retry(exc=exc)


@shared_task(
    bind=True,
    name='core.ingest_fuel_rate_data',
    max_retries=3,
    default_retry_delay=10,
)
def ingest_fuel_rate_data(self):
    """
    Ingest effective-dated fuel prices from fuel_rates.xlsx.

    Rows are matched on (fuel_type, city, effective_from). Afterwards
    each touched key has its record in effect today marked active.
    """
    from apps.rates.models import RateKind, RateRecord
    from apps.rates.services import RateService

    file_path = Path(settings.DATA_DIR) / 'fuel_rates.xlsx'

    if not file_path.exists():
        logger.error("Fuel rate data file not found: %s", file_path)
        return {'status': 'error', 'message': f'File not found: {file_path}'}

    try:
        logger.info("Starting fuel rate ingestion from %s", file_path)

        df = _read_sheet(file_path, required=FUEL_RATE_COLUMNS)
        logger.info("Read %d rows from fuel_rates.xlsx", len(df))

        created_count = 0
        updated_count = 0
        error_count = 0
        touched_keys = set()

        for index, row in df.iterrows():
            try:
                effective_from = pd.to_datetime(row.get('effective_from'), errors='coerce')
                if pd.isna(effective_from):
                    logger.warning("Row %d: invalid effective_from, skipping", index)
                    error_count += 1
                    continue

                fields = RateService.validate_rate(
                    RateKind.FUEL,
                    _decimal(row, 'value', 'rate', 'price'),
                    fuel_type=_text(row, 'fuel_type').upper(),
                    city=_text(row, 'city'),
                )

                _, created = RateRecord.objects.update_or_create(
                    kind=fields['kind'],
                    fuel_type=fields['fuel_type'],
                    city=fields['city'],
                    effective_from=effective_from.date(),
                    defaults={'value': fields['value']},
                )
                touched_keys.add((fields['fuel_type'], fields['city']))

                if created:
                    created_count += 1
                else:
                    updated_count += 1

            except CostSheetValidationError as e:
                logger.warning("Row %d: invalid rate (%s)", index, e.detail)
                error_count += 1
                continue
            except (ValueError, TypeError, InvalidOperation, IntegrityError) as e:
                logger.warning("Row %d: failed to process (%s)", index, e)
                error_count += 1
                continue

        for fuel_type, city in sorted(touched_keys):
            RateService.sync_active(RateKind.FUEL, fuel_type, city)

        result = {
            'status': 'success',
            'total_rows': len(df),
            'created': created_count,
            'updated': updated_count,
            'errors': error_count,
        }
        logger.info("Fuel rate ingestion complete: %s", result)
        return result

    except DataIngestionError as e:
        logger.error("Fuel rate ingestion aborted: %s", e)
        return {'status': 'error', 'message': str(e)}

    except Exception as exc:
        logger.exception("Fuel rate ingestion failed")
        raise self.retry(exc=exc)
