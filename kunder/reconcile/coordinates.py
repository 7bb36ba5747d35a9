"""
Coordinate sanity checks and correction lookup.

The tenant served by these scripts is in Northern Norway; coordinates outside
that rectangle are almost always a geocoder picking a namesake further south.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from schemas.customers import CustomerRecord

from .text import normalize_text


@dataclass(frozen=True)
class Bounds:
    """Closed latitude/longitude rectangle."""

    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


NORTHERN_NORWAY = Bounds(min_lat=66.0, max_lat=72.0, min_lng=10.0, max_lng=32.0)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float
    source: str


# Places the geocoders resolve to the wrong namesake (keyed by poststed)
PLACE_CORRECTIONS: Dict[str, Tuple[float, float]] = {
    'Valberg': (68.1716, 13.5713),  # Lofoten
    'Engleøya': (67.9342, 15.0841),
    'Stongelandseidet': (69.0771, 17.0411),
}

# Area centroids for postal codes the address registry has no points for
POSTAL_CODE_CORRECTIONS: Dict[str, Tuple[float, float]] = {
    '8289': (67.9342279, 15.0840873),  # Engleøya
    '9392': (69.0770906, 17.0411417),  # Stongelandseidet
}


def is_plausible(lat: float, lng: float, bounds: Bounds = NORTHERN_NORWAY) -> bool:
    """True when the point lies inside the expected service region."""
    return bounds.contains(lat, lng)


def find_implausible(
    records: Iterable[CustomerRecord],
    bounds: Bounds = NORTHERN_NORWAY,
) -> List[CustomerRecord]:
    """Records with coordinates outside the bounds; records without any are skipped."""
    return [
        r for r in records
        if r.has_coordinates and not is_plausible(r.latitude, r.longitude, bounds)
    ]


def lookup_place_correction(
    record: CustomerRecord,
    table: Dict[str, Tuple[float, float]] = PLACE_CORRECTIONS,
) -> Optional[Coordinate]:
    """Curated coordinates for the record's place name (exact match, case-insensitive)."""
    wanted = normalize_text(record.city)
    if not wanted:
        return None
    for place, (lat, lng) in table.items():
        if normalize_text(place) == wanted:
            return Coordinate(lat, lng, source='place-table')
    return None


def lookup_postal_correction(
    record: CustomerRecord,
    table: Dict[str, Tuple[float, float]] = POSTAL_CODE_CORRECTIONS,
) -> Optional[Coordinate]:
    """Area centroid for the record's postal code."""
    postal_code = (record.postal_code or '').strip()
    if postal_code in table:
        lat, lng = table[postal_code]
        return Coordinate(lat, lng, source='postal-table')
    return None


def resolve_correction(
    record: CustomerRecord,
    geocode: Optional[Callable[[CustomerRecord], object]] = None,
    place_table: Dict[str, Tuple[float, float]] = PLACE_CORRECTIONS,
) -> Optional[Coordinate]:
    """
    Find replacement coordinates for a flagged record.

    The curated place table wins; otherwise the geocode callable is asked
    with the full address and its first result is accepted. Exceptions from
    the callable propagate so the caller can count the failure per record.

    Args:
        record: Record whose coordinates were flagged
        geocode: Callable returning an object with lat/lng/source, or None
        place_table: Curated place-name table

    Returns:
        Coordinate or None when nothing was found
    """
    corrected = lookup_place_correction(record, place_table)
    if corrected is not None:
        return corrected
    if geocode is None:
        return None

    result = geocode(record)
    if result is None:
        return None
    return Coordinate(result.lat, result.lng, source=getattr(result, 'source', 'geocoder'))


def coordinate_changes(record: CustomerRecord, coordinate: Coordinate) -> dict:
    """Change set moving the record to the given coordinate."""
    changes = {}
    if record.latitude != coordinate.lat:
        changes['latitude'] = coordinate.lat
    if record.longitude != coordinate.lng:
        changes['longitude'] = coordinate.lng
    return changes
