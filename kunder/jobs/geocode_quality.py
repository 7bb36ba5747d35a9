"""Backfill kunder.geocode_quality from each record's address."""
from collections import Counter
import logging

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import SetupError
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.diff import diff_record
from kunder.reconcile.quality import quality_changes
from schemas.registry import CUSTOMERS_TABLE

from .common import JobResult, apply_updates, preview_diffs

logger = logging.getLogger(__name__)

QUALITY_COLUMN = 'geocode_quality'

ADD_COLUMN_SQL = f'ALTER TABLE {CUSTOMERS_TABLE} ADD COLUMN IF NOT EXISTS {QUALITY_COLUMN} TEXT;'


def ensure_quality_column(store: SupabaseConnector) -> None:
    """
    Raises:
        SetupError: With the ALTER TABLE statement to run when the column is missing
    """
    if not store.has_column(CUSTOMERS_TABLE, QUALITY_COLUMN):
        raise SetupError(
            f'Column {CUSTOMERS_TABLE}.{QUALITY_COLUMN} does not exist. '
            f'Run this in the SQL editor first:\n\n    {ADD_COLUMN_SQL}\n'
        )


def run(
    store: SupabaseConnector,
    organization_id: int,
    dry_run: bool = True,
    area_without_digits: bool = True,
) -> JobResult:
    """Classify every record of the organization and write changed tags."""
    ensure_quality_column(store)

    records = CustomerExtractor(store, organization_id).extract(
        columns='id,organization_id,navn,adresse,lat,lng,geocode_quality'
    )
    result = JobResult('add_geocode_quality', dry_run=dry_run, examined=len(records))

    diffs = []
    tags = Counter()
    for record in records:
        changes = quality_changes(record, area_without_digits)
        tag = changes.get('geocode_quality', record.geocode_quality)
        tags[tag or 'none'] += 1
        diff = diff_record(record, changes)
        if not diff.is_empty:
            diffs.append(diff)

    for tag, count in tags.items():
        result.findings[f'Quality {tag}'] = count

    logger.info(f'{len(diffs)} of {len(records)} records need a new quality tag')
    preview_diffs(diffs)
    apply_updates(store, diffs, result)
    return result
