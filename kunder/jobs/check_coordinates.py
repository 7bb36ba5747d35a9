"""Read-only coordinate report for one organization."""
from collections import Counter
import logging

from kunder.connectors.supabase_connector import SupabaseConnector, coordinates_missing, eq, not_null
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.coordinates import NORTHERN_NORWAY, Bounds, find_implausible
from schemas.registry import CUSTOMERS_TABLE

from .common import JobResult

logger = logging.getLogger(__name__)


def run(store: SupabaseConnector, organization_id: int, bounds: Bounds = NORTHERN_NORWAY) -> JobResult:
    """Count records, missing and implausible coordinates, and quality tags. Never writes."""
    scope = {'organization_id': eq(organization_id)}
    total = store.count(CUSTOMERS_TABLE, scope)
    missing = store.count(CUSTOMERS_TABLE, {**scope, 'or': coordinates_missing()})

    located = CustomerExtractor(store, organization_id).extract(
        columns='id,organization_id,navn,adresse,poststed,lat,lng,geocode_quality',
        filters={'lat': not_null(), 'lng': not_null()},
    )
    implausible = find_implausible(located, bounds)
    tags = Counter(r.geocode_quality or 'none' for r in located)

    result = JobResult('check_coordinates', dry_run=True, examined=total)
    result.findings['Missing coordinates'] = missing
    result.findings['Outside service region'] = len(implausible)
    for tag, count in tags.items():
        result.findings[f'Quality {tag}'] = count

    print(f'Total customers: {total}')
    print(f'With coordinates: {len(located)}')
    print(f'Missing coordinates: {missing}')
    if implausible:
        print(f'\nOutside lat {bounds.min_lat}-{bounds.max_lat}, lng {bounds.min_lng}-{bounds.max_lng}:')
        for record in implausible:
            print(f'  {record.label()} ({record.city or "-"}): {record.latitude}, {record.longitude}')
    return result
