"""
Inspection date handling.

Projection of the next inspection from the last one, and parsing of the
year/month cells used in the reference spreadsheets.
"""
import re
from datetime import date, timedelta
from typing import Optional, Union

from schemas.customers import (
    DEFAULT_ELECTRICAL_INTERVAL,
    DEFAULT_FIRE_INTERVAL,
    CustomerRecord,
)

from .category import includes_electrical, includes_fire

# Norwegian and English month abbreviations seen in the spreadsheets
MONTH_MAP = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4,
    'mai': 5, 'jun': 6, 'jul': 7, 'aug': 8,
    'sep': 9, 'spt': 9, 'okt': 10, 'nov': 11, 'des': 12,
    'mars': 3, 'sept': 9,
    'may': 5, 'oct': 10, 'dec': 12,
}

_YEAR = re.compile(r'^(\d{4})')
_MONTH = re.compile(r'(\d+)?[.\-]?([^\W\d_]+)')


def add_months(start: date, months: int) -> date:
    """
    Add calendar months, letting the day overflow into the following month.

    2024-01-31 + 1 month is 2024-03-02: the day is not clamped to the end of
    the target month.
    """
    total = start.month - 1 + months
    year = start.year + total // 12
    month = total % 12 + 1
    return date(year, month, 1) + timedelta(days=start.day - 1)


def project_next_date(
    last_date: Union[date, str],
    interval_months: int,
) -> Union[date, str]:
    """
    Next inspection date from the last one and an interval in months.

    ISO strings in give ISO strings out.
    """
    if isinstance(last_date, str):
        return add_months(date.fromisoformat(last_date[:10]), interval_months).isoformat()
    return add_months(last_date, interval_months)


def backfill_next_dates(record: CustomerRecord) -> dict:
    """
    Next-date changes for inspections with a known last date but no next date.

    Only inspection types included in the record's category are considered
    and an existing next date is never overwritten. Missing intervals fall
    back to 36 months (El-Kontroll) and 12 months (Brannvarsling).
    """
    changes = {}
    if (includes_electrical(record.category)
            and record.last_electrical_inspection
            and not record.next_electrical_inspection):
        interval = record.electrical_interval_months or DEFAULT_ELECTRICAL_INTERVAL
        changes['next_electrical_inspection'] = project_next_date(
            record.last_electrical_inspection, interval)

    if (includes_fire(record.category)
            and record.last_fire_inspection
            and not record.next_fire_inspection):
        interval = record.fire_interval_months or DEFAULT_FIRE_INTERVAL
        changes['next_fire_inspection'] = project_next_date(
            record.last_fire_inspection, interval)

    return changes


def parse_year(text: Optional[str]) -> Optional[int]:
    """Leading four-digit year of a cell; 'x' and empty cells give None."""
    if not text:
        return None
    text = str(text).strip()
    if text.lower() == 'x':
        return None
    match = _YEAR.match(text)
    return int(match.group(1)) if match else None


def parse_month(text: Optional[str]) -> Optional[int]:
    """
    Month number from cells like 'mai', 'Sept', '09.sep' or '9-Sep'.

    Returns None for empty cells, 'x' and header text.
    """
    if not text:
        return None
    lower = str(text).strip().lower()
    if not lower or lower == 'x':
        return None
    if lower in MONTH_MAP:
        return MONTH_MAP[lower]

    match = _MONTH.search(lower)
    if match and match.group(2):
        return MONTH_MAP.get(match.group(2)[:3])
    return None


def parse_reference_date(
    year_text: Optional[str],
    month_text: Optional[str],
    default_month: Optional[int] = None,
) -> Optional[date]:
    """
    First day of the month given by a year cell and a month cell.

    Args:
        year_text: Year cell ('2024', 'x', '')
        month_text: Month cell
        default_month: Month used when the month cell cannot be parsed;
            None means such a date is unknown

    Returns:
        date or None
    """
    year = parse_year(year_text)
    if year is None:
        return None
    month = parse_month(month_text) or default_month
    if month is None:
        return None
    return date(year, month, 1)


def parse_interval(frequency_text: Optional[str]) -> Optional[int]:
    """Inspection frequency in years (1-10) converted to months."""
    if not frequency_text:
        return None
    match = re.match(r'\s*(\d+)', str(frequency_text))
    if not match:
        return None
    years = int(match.group(1))
    if 0 < years <= 10:
        return years * 12
    return None
