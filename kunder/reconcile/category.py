"""
Category inference.

A customer's kategori is derived from which inspection data it carries.
Interval fields are ignored because they are filled with defaults on import.
"""
from typing import Optional, Union

from schemas.customers import Category, CustomerRecord

from .text import is_blank

ELECTRICAL_FIELDS = (
    'electrical_type',
    'last_electrical_inspection',
    'next_electrical_inspection',
)

FIRE_FIELDS = (
    'fire_system',
    'fire_operation_type',
    'last_fire_inspection',
    'next_fire_inspection',
)


def has_electrical_data(record: CustomerRecord) -> bool:
    return any(not is_blank(getattr(record, f)) for f in ELECTRICAL_FIELDS)


def has_fire_data(record: CustomerRecord) -> bool:
    return any(not is_blank(getattr(record, f)) for f in FIRE_FIELDS)


def category_from_flags(has_electrical: bool, has_fire: bool) -> Optional[Category]:
    """Category for a combination of signals, None when there is no signal."""
    if has_electrical and has_fire:
        return Category.COMBINED
    if has_fire:
        return Category.FIRE
    if has_electrical:
        return Category.ELECTRICAL
    return None


def infer_category(record: CustomerRecord) -> Union[Category, str]:
    """
    Determine the correct category from the record's domain fields.

    With no signal fields at all the existing category is kept, defaulting
    to El-Kontroll. An existing value outside the known categories is
    returned unchanged.
    """
    inferred = category_from_flags(has_electrical_data(record), has_fire_data(record))
    if inferred is not None:
        return inferred

    if is_blank(record.category):
        return Category.ELECTRICAL
    try:
        return Category(record.category)
    except ValueError:
        return record.category


def includes_electrical(category: Optional[str]) -> bool:
    return bool(category) and Category.ELECTRICAL.value in category


def includes_fire(category: Optional[str]) -> bool:
    return bool(category) and Category.FIRE.value in category


def category_changes(record: CustomerRecord) -> dict:
    """Change set for the category field, empty when already correct."""
    inferred = infer_category(record)
    value = inferred.value if isinstance(inferred, Category) else inferred
    if value == record.category:
        return {}
    return {'category': value}
