"""General utility helper functions."""
from typing import Any, List
import logging

logger = logging.getLogger(__name__)


def chunk_list(lst: List[Any], chunk_size: int) -> List[List[Any]]:
    """
    Split a list into chunks.

    Args:
        lst: List to chunk
        chunk_size: Size of each chunk

    Returns:
        List of chunks
    """
    return [lst[i:i + chunk_size] for i in range(0, len(lst), chunk_size)]


def format_duration(seconds: float) -> str:
    """
    Format seconds to human-readable duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string (e.g., '1h 30m 45s')
    """
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f'{hours}h')
    if minutes:
        parts.append(f'{minutes}m')
    if secs:
        parts.append(f'{secs}s')

    return ' '.join(parts) or '0s'


def banner(title: str, width: int = 60, char: str = '=') -> str:
    """Title framed by separator lines, as printed at the top of each script."""
    line = char * width
    return f'{line}\n{title}\n{line}'
