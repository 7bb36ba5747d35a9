"""Geocode customers that have no coordinates."""
from typing import Callable, Optional
import logging
import time

from kunder.connectors.supabase_connector import SupabaseConnector, coordinates_missing
from kunder.exceptions import GeocodingError
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.coordinates import Coordinate, lookup_postal_correction
from kunder.reconcile.diff import diff_record
from kunder.reconcile.quality import classify_quality
from schemas.customers import CustomerRecord, GeocodeQuality

from .common import JobResult, apply_updates

logger = logging.getLogger(__name__)


def located_changes(record: CustomerRecord, coordinate: Coordinate, precise: bool) -> dict:
    """lat, lng and the quality tag for a newly found coordinate."""
    if precise:
        located = record.model_copy(update={'latitude': coordinate.lat, 'longitude': coordinate.lng})
        quality = classify_quality(located)
    else:
        quality = GeocodeQuality.AREA
    return {
        'latitude': coordinate.lat,
        'longitude': coordinate.lng,
        'geocode_quality': quality.value,
    }


def locate(record: CustomerRecord, geocoder) -> Optional[tuple]:
    """
    (Coordinate, precise) for a record, or None.

    The postal-code table is consulted before the geocoder, so records in
    its areas cost no network call.

    Raises:
        GeocodingError: When every geocoding provider failed
    """
    corrected = lookup_postal_correction(record)
    if corrected is not None:
        return corrected, False
    if geocoder is None:
        return None

    hit = geocoder.geocode(record.address, record.postal_code, record.city)
    if hit is None:
        return None
    return Coordinate(hit.lat, hit.lng, source=hit.source), hit.precise


def run(
    store: SupabaseConnector,
    geocoder,
    organization_id: int,
    dry_run: bool = True,
    delay: float = 0.2,
    sleep: Callable[[float], None] = time.sleep,
) -> JobResult:
    """
    Args:
        store: Data store connector
        geocoder: Object with geocode(address, postal_code, city)
        organization_id: Tenant to geocode
        dry_run: Plan only
        delay: Pause after each geocoder call
        sleep: Sleep function
    """
    extractor = CustomerExtractor(store, organization_id)
    records = extractor.extract(filters={'or': coordinates_missing()}, blank_half_pairs=True)
    result = JobResult('geocode_missing', dry_run=dry_run, examined=len(records))
    if extractor.blanked_count:
        result.findings['Rows with half a coordinate pair'] = extractor.blanked_count
    print(f'Customers without coordinates: {len(records)}')

    diffs = []
    for number, record in enumerate(records, 1):
        needs_network = lookup_postal_correction(record) is None
        try:
            found = locate(record, geocoder)
        except GeocodingError as e:
            result.record_failure(record.label(), f'geocoding failed: {e}')
            continue
        finally:
            if needs_network and geocoder is not None:
                sleep(delay)

        if found is None:
            result.not_found += 1
            print(f'  [{number}/{len(records)}] {record.label()}: not found')
            continue

        coordinate, precise = found
        print(f'  [{number}/{len(records)}] {record.label()}: '
              f'({coordinate.lat:.5f}, {coordinate.lng:.5f}) [{coordinate.source}]')
        diffs.append(diff_record(record, located_changes(record, coordinate, precise)))

    apply_updates(store, diffs, result)
    return result
