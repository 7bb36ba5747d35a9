"""
Copy customers from the legacy SQLite database into the hosted store.

Rows are validated through CustomerRecord, stamped with the target
organization, given interval and category defaults, and inserted in batches.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

from pydantic import ValidationError

from kunder.connectors.supabase_connector import SupabaseConnector, eq
from kunder.exceptions import DataStoreError, SetupError
from kunder.loaders.supabase_loader import SupabaseLoader
from schemas.customers import (
    DEFAULT_ELECTRICAL_INTERVAL,
    DEFAULT_FIRE_INTERVAL,
    DEFAULT_LEGACY_INTERVAL,
    Category,
    CustomerRecord,
)
from schemas.registry import CUSTOMERS_TABLE

from .common import JobResult

logger = logging.getLogger(__name__)

# Legacy columns that hold text even when SQLite stored a number
TEXT_COLUMNS = ('navn', 'adresse', 'postnummer', 'poststed', 'telefon', 'epost')

PREVIEW_ROWS = 3


def _as_text(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int):
        return str(value)
    return value


def to_store_row(
    row: Dict[str, Any],
    organization_id: int,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Legacy row -> insertable kunder row.

    The legacy id is dropped so the store assigns new keys.

    Raises:
        ValidationError: If the row is not a valid customer
    """
    cleaned = {k: _as_text(v) if k in TEXT_COLUMNS else v for k, v in row.items()}
    record = CustomerRecord.model_validate(cleaned)
    record = record.model_copy(update={
        'organization_id': organization_id,
        'category': record.category or Category.ELECTRICAL.value,
        'electrical_interval_months': record.electrical_interval_months or DEFAULT_ELECTRICAL_INTERVAL,
        'fire_interval_months': record.fire_interval_months or DEFAULT_FIRE_INTERVAL,
        'legacy_interval_months': record.legacy_interval_months or DEFAULT_LEGACY_INTERVAL,
        'created_at': record.created_at or now or datetime.now(timezone.utc),
    })
    return record.model_dump(by_alias=True, mode='json', exclude={'id'}, exclude_none=True)


def transform_rows(
    rows: List[Dict[str, Any]],
    organization_id: int,
    result: JobResult,
) -> List[Dict[str, Any]]:
    """Rows that validate; the rest are counted as failures."""
    now = datetime.now(timezone.utc)
    transformed = []
    for row in rows:
        try:
            transformed.append(to_store_row(row, organization_id, now))
        except ValidationError as e:
            result.record_failure(f'[{row.get("id")}] {row.get("navn")}', f'invalid row: {e}')
    return transformed


def run(
    store: SupabaseConnector,
    legacy_rows: List[Dict[str, Any]],
    organization_id: int,
    dry_run: bool = True,
    batch_size: int = 50,
    progress: bool = True,
) -> Tuple[JobResult, Optional[int]]:
    """
    Returns:
        (JobResult, row count in the store after the run or None on a dry run or when the count fails)

    Raises:
        SetupError: If there are no legacy rows
    """
    if not legacy_rows:
        raise SetupError('The legacy database has no customers to migrate')

    result = JobResult('migrate_to_supabase', dry_run=dry_run, examined=len(legacy_rows))
    print(f'Legacy customers: {len(legacy_rows)}')

    rows = transform_rows(legacy_rows, organization_id, result)
    result.planned = len(rows)

    if dry_run:
        for row in rows[:PREVIEW_ROWS]:
            print(f'  {row.get("navn")} | {row.get("adresse", "")} | {row.get("kategori")}')
        return result, None

    loader = SupabaseLoader(store, batch_size=batch_size, progress=progress)
    loader.load(rows, table_name=CUSTOMERS_TABLE)
    result.inserted = loader.loaded_count
    if loader.failed_count:
        result.failed += loader.failed_count
        result.failures.append(('batches', f'{loader.failed_count} rows in failed batches'))

    try:
        total = store.count(CUSTOMERS_TABLE, {'organization_id': eq(organization_id)})
    except DataStoreError as e:
        logger.warning(f'Could not count customers after the migration: {e}')
        print(f'Customers in store for organization {organization_id}: unavailable')
        return result, None
    print(f'Customers in store for organization {organization_id}: {total}')
    return result, total
