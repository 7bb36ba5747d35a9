"""
Reconciliation of customer records against the fasit reference rows.

Matching is by exact normalized name; the first reference row wins. There is
no fuzzy matching and no address cross-check.
"""
from typing import Dict, Iterable, List, Optional

from schemas.customers import Category, CustomerRecord
from schemas.reference import ReferenceRow

from .category import category_from_flags
from .dates import parse_interval, parse_reference_date, parse_year
from .text import is_blank, normalize_text

# Month assumed when a year cell has no usable month next to it
DEFAULT_REFERENCE_MONTH = 2

# Fields the reference may fill on a record where they are empty
FILLABLE_FIELDS = (
    'electrical_type',
    'fire_system',
    'fire_operation_type',
    'last_electrical_inspection',
    'next_electrical_inspection',
    'last_fire_inspection',
    'next_fire_inspection',
    'electrical_interval_months',
    'address',
    'postal_code',
    'city',
)


def match_by_name(
    record: CustomerRecord,
    reference_rows: Iterable[ReferenceRow],
) -> Optional[ReferenceRow]:
    """First reference row whose normalized name equals the record's."""
    wanted = normalize_text(record.name)
    for row in reference_rows:
        if normalize_text(row.name) == wanted:
            return row
    return None


def match_record(
    row: ReferenceRow,
    records: Iterable[CustomerRecord],
) -> Optional[CustomerRecord]:
    """First record whose normalized name equals the reference row's."""
    wanted = normalize_text(row.name)
    for record in records:
        if normalize_text(record.name) == wanted:
            return record
    return None


def reference_category(row: ReferenceRow) -> Optional[Category]:
    """
    Category implied by the row's year cells.

    A row counts as El-Kontroll or Brannvarsling only if one of its
    last/next year cells parses; None when neither does.
    """
    has_electrical = bool(parse_year(row.last_electrical_year) or parse_year(row.next_electrical_year))
    has_fire = bool(parse_year(row.last_fire_year) or parse_year(row.next_fire_year))
    return category_from_flags(has_electrical, has_fire)


def reference_values(
    row: ReferenceRow,
    default_month: Optional[int] = DEFAULT_REFERENCE_MONTH,
) -> Dict[str, object]:
    """
    Parsed record values carried by a reference row, keyed by attribute.

    Empty cells are left out, so every value in the result is usable.
    """
    values = {
        'address': row.address,
        'postal_code': row.postal_code,
        'city': row.city,
        'electrical_type': row.electrical_type,
        'last_electrical_inspection': parse_reference_date(
            row.last_electrical_year, row.electrical_month, default_month),
        'next_electrical_inspection': parse_reference_date(
            row.next_electrical_year, row.electrical_month, default_month),
        'electrical_interval_months': parse_interval(row.electrical_frequency),
        'last_fire_inspection': parse_reference_date(
            row.last_fire_year, row.fire_month, default_month),
        'next_fire_inspection': parse_reference_date(
            row.next_fire_year, row.fire_month, default_month),
        'fire_system': row.fire_system,
        'fire_operation_type': row.fire_operation_type,
    }
    return {k: v for k, v in values.items() if not is_blank(v)}


def fill_missing_fields(
    record: CustomerRecord,
    row: ReferenceRow,
    default_month: Optional[int] = DEFAULT_REFERENCE_MONTH,
) -> dict:
    """Changes filling fields that are empty on the record; populated fields are never touched."""
    values = reference_values(row, default_month)
    return {
        field: values[field]
        for field in FILLABLE_FIELDS
        if field in values and is_blank(getattr(record, field))
    }


def categorized_rows(rows: Iterable[ReferenceRow]) -> List[ReferenceRow]:
    """Reference rows carrying any inspection signal."""
    return [r for r in rows if reference_category(r) is not None]
