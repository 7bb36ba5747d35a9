"""
Reconcile one organization's customers against the fasit reference file.

Steps:
1. Delete name-duplicates, keeping the lowest id
2. For each reference row with inspection data, find the record by name and
   fill its empty fields; populated fields are never overwritten. The
   category is then recomputed from the filled record
3. Report records that do not appear in the reference
"""
from typing import Dict, List, Sequence
import logging

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import SetupError
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.category import category_changes
from kunder.reconcile.diff import RecordDiff, diff_record
from kunder.reconcile.duplicates import find_duplicates, ids_to_delete, name_key
from kunder.reconcile.reference import (
    categorized_rows,
    fill_missing_fields,
    match_by_name,
    match_record,
)
from schemas.customers import CustomerRecord
from schemas.reference import ReferenceRow

from .common import JobResult, apply_deletes, apply_updates, preview_diffs

logger = logging.getLogger(__name__)

# Unmatched records listed before truncating
UNMATCHED_LIMIT = 30


def plan_reference_updates(
    records: Sequence[CustomerRecord],
    rows: Sequence[ReferenceRow],
    result: JobResult,
) -> List[RecordDiff]:
    """
    One diff per matched record.

    A record matched by several reference rows takes the first row only.
    Rows with no matching record are counted as not found.
    """
    diffs: Dict[int, RecordDiff] = {}
    for row in categorized_rows(rows):
        record = match_record(row, records)
        if record is None:
            result.not_found += 1
            logger.debug(f'Line {row.row_number}: no customer named {row.name!r}')
            continue
        if record.id in diffs:
            continue
        fills = fill_missing_fields(record, row)
        changes = {**fills, **category_changes(record.model_copy(update=fills))}
        diffs[record.id] = diff_record(record, changes)
    return [d for d in diffs.values() if not d.is_empty]


def unmatched_records(
    records: Sequence[CustomerRecord],
    rows: Sequence[ReferenceRow],
) -> List[CustomerRecord]:
    """Records whose name is on no reference row."""
    return [r for r in records if match_by_name(r, rows) is None]


def run(
    store: SupabaseConnector,
    rows: Sequence[ReferenceRow],
    organization_id: int,
    dry_run: bool = True,
) -> JobResult:
    """
    Args:
        store: Data store connector
        rows: Decoded reference rows
        organization_id: Tenant to reconcile
        dry_run: Plan only

    Raises:
        SetupError: If the reference file produced no rows
    """
    if not rows:
        raise SetupError('The reference file contains no customer rows')

    records = CustomerExtractor(store, organization_id).extract()
    result = JobResult('fix_from_fasit', dry_run=dry_run, examined=len(records))
    print(f'Reference rows: {len(rows)}, customers: {len(records)}')

    groups = find_duplicates(records, key=name_key)
    delete_ids = ids_to_delete(groups)
    print(f'\nDuplicate names: {len(groups)} groups, {len(delete_ids)} records to delete')
    for group in groups:
        print(f'  keep {group.canonical.label()}, delete {list(group.duplicate_ids)}')
    apply_deletes(store, delete_ids, result)

    doomed = set(delete_ids)
    remaining = [r for r in records if r.id not in doomed]

    diffs = plan_reference_updates(remaining, rows, result)
    print(f'\nRecords to update from the reference: {len(diffs)}')
    preview_diffs(diffs)
    apply_updates(store, diffs, result)

    missing = unmatched_records(remaining, rows)
    result.findings['Customers not in reference'] = len(missing)
    if missing:
        print(f'\nCustomers not in the reference file: {len(missing)}')
        for record in missing[:UNMATCHED_LIMIT]:
            print(f'  {record.label()}')
        if len(missing) > UNMATCHED_LIMIT:
            print(f'  ... and {len(missing) - UNMATCHED_LIMIT} more')

    return result
