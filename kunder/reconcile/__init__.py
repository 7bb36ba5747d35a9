"""
Record reconciliation engine.

Pure functions computing corrected field values and diffs for customer
records. Nothing in this package performs I/O.
"""

from .category import infer_category, category_changes
from .coordinates import NORTHERN_NORWAY, Bounds, is_plausible, resolve_correction
from .dates import backfill_next_dates, project_next_date
from .diff import RecordDiff, diff_record
from .duplicates import DuplicateGroup, duplicate_key, find_duplicates, name_key
from .quality import classify_quality, quality_changes
from .reference import fill_missing_fields, match_by_name
from .text import normalize_text

__all__ = [
    'Bounds',
    'DuplicateGroup',
    'NORTHERN_NORWAY',
    'RecordDiff',
    'backfill_next_dates',
    'category_changes',
    'classify_quality',
    'diff_record',
    'duplicate_key',
    'fill_missing_fields',
    'find_duplicates',
    'infer_category',
    'is_plausible',
    'match_by_name',
    'name_key',
    'normalize_text',
    'project_next_date',
    'quality_changes',
    'resolve_correction',
]
