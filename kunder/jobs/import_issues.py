"""
Repair problems left by the bulk import.

1. Duplicates by name + address: the lowest id is kept
2. Coordinates outside the service region: corrected from the place table
   or the geocoder
3. Next inspection dates missing where the last date is known
"""
from typing import Callable, Dict, List, Optional
import logging
import time

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import GeocodingError
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.coordinates import (
    NORTHERN_NORWAY,
    Bounds,
    coordinate_changes,
    find_implausible,
    is_plausible,
    resolve_correction,
)
from kunder.reconcile.dates import backfill_next_dates
from kunder.reconcile.diff import diff_record
from kunder.reconcile.duplicates import duplicate_key, find_duplicates, ids_to_delete
from schemas.customers import CustomerRecord

from .common import JobResult, apply_deletes, apply_updates, preview_diffs

logger = logging.getLogger(__name__)


def plan_coordinate_fixes(
    records: List[CustomerRecord],
    geocoder,
    result: JobResult,
    bounds: Bounds = NORTHERN_NORWAY,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[int, dict]:
    """
    Corrected coordinates for records outside the bounds, keyed by id.

    Geocoder errors are counted per record. A correction that is itself
    outside the bounds is rejected.
    """
    def geocode(record: CustomerRecord):
        try:
            return geocoder.geocode(record.address, record.postal_code, record.city)
        finally:
            sleep(delay)

    fixes: Dict[int, dict] = {}
    flagged = find_implausible(records, bounds)
    print(f'\nCoordinates outside the service region: {len(flagged)}')
    for record in flagged:
        try:
            coordinate = resolve_correction(record, geocode if geocoder is not None else None)
        except GeocodingError as e:
            result.record_failure(record.label(), f'geocoding failed: {e}')
            continue

        if coordinate is None:
            result.findings['Uncorrected coordinates'] += 1
            print(f'  {record.label()}: no correction found ({record.latitude}, {record.longitude})')
            continue
        if not is_plausible(coordinate.lat, coordinate.lng, bounds):
            result.findings['Uncorrected coordinates'] += 1
            print(f'  {record.label()}: {coordinate.source} answer ({coordinate.lat}, {coordinate.lng}) is also outside')
            continue

        print(f'  {record.label()}: ({record.latitude}, {record.longitude}) -> '
              f'({coordinate.lat}, {coordinate.lng}) [{coordinate.source}]')
        fixes[record.id] = coordinate_changes(record, coordinate)
    return fixes


def run(
    store: SupabaseConnector,
    geocoder,
    organization_id: int,
    dry_run: bool = True,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
    bounds: Optional[Bounds] = None,
) -> JobResult:
    """
    Args:
        store: Data store connector
        geocoder: Object with geocode(address, postal_code, city), or None
            to use the place table only
        organization_id: Tenant to repair
        dry_run: Plan only
        delay: Pause after each geocoder call
        sleep: Sleep function
        bounds: Service region, Northern Norway by default
    """
    bounds = bounds or NORTHERN_NORWAY
    records = CustomerExtractor(store, organization_id).extract()
    result = JobResult('fix_import_issues', dry_run=dry_run, examined=len(records))

    groups = find_duplicates(records, key=duplicate_key)
    delete_ids = ids_to_delete(groups)
    print(f'Duplicates (name + address): {len(groups)} groups, {len(delete_ids)} records to delete')
    for group in groups:
        print(f'  keep {group.canonical.label()}, delete {list(group.duplicate_ids)}')
    apply_deletes(store, delete_ids, result)

    doomed = set(delete_ids)
    remaining = [r for r in records if r.id not in doomed]

    changes_by_id = plan_coordinate_fixes(remaining, geocoder, result, bounds, delay, sleep)

    backfilled = 0
    for record in remaining:
        dates = backfill_next_dates(record)
        if dates:
            backfilled += 1
            changes_by_id.setdefault(record.id, {}).update(dates)
    result.findings['Next dates backfilled'] = backfilled

    diffs = [diff_record(r, changes_by_id[r.id]) for r in remaining if r.id in changes_by_id]
    diffs = [d for d in diffs if not d.is_empty]
    print(f'\nRecords to update: {len(diffs)}')
    preview_diffs(diffs)
    apply_updates(store, diffs, result)
    return result
