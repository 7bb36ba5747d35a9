"""Address-quality classification for geocoded coordinates."""
import re
from typing import Optional

from schemas.customers import CustomerRecord, GeocodeQuality

from .text import is_blank

_DIGIT = re.compile(r'\d')


def classify_quality(
    record: CustomerRecord,
    area_without_digits: bool = True,
) -> Optional[GeocodeQuality]:
    """
    Classify how precise a record's coordinates are likely to be.

    Rules, in order:
    1. Missing latitude or longitude -> None
    2. Empty address -> area
    3. Cadastral notation ("201/856", gnr/bnr) -> exact
    4. No digit in the address -> area (a place name geocodes to a centroid)
    5. Otherwise -> exact

    Args:
        record: Customer to classify
        area_without_digits: Apply rule 4. The rule mirrors how the address
            registry resolves bare place names and can be switched off for
            providers that behave differently.

    Returns:
        GeocodeQuality or None
    """
    if record.latitude is None or record.longitude is None:
        return None

    address = record.address
    if is_blank(address):
        return GeocodeQuality.AREA

    if '/' in address:
        return GeocodeQuality.EXACT

    if area_without_digits and not _DIGIT.search(address):
        return GeocodeQuality.AREA

    return GeocodeQuality.EXACT


def quality_changes(record: CustomerRecord, area_without_digits: bool = True) -> dict:
    """Change set for geocode_quality, empty when the stored tag is correct."""
    quality = classify_quality(record, area_without_digits)
    value = quality.value if quality is not None else None
    if value == record.geocode_quality:
        return {}
    return {'geocode_quality': value}
