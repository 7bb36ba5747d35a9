"""String normalization shared by matching and deduplication."""
import re
from typing import Any

import pandas as pd

_WHITESPACE = re.compile(r'\s+')


def normalize_text(value: Any) -> str:
    """
    Trim, lowercase and collapse internal whitespace runs to one space.

    None and NaN normalize to the empty string.
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ''
    return _WHITESPACE.sub(' ', str(value).strip().lower())


def is_blank(value: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False
