"""Base loader class for loading data to destinations."""
from abc import ABC, abstractmethod
from typing import Any, List, Dict
import logging

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Abstract base class for all data loaders.
    Defines the interface for loading data to various destinations.
    """

    def __init__(self, name: str):
        """
        Initialize the loader.

        Args:
            name: Name of the loader (for logging)
        """
        self.name = name
        self.logger = logging.getLogger(f'{__name__}.{name}')
        self.loaded_count = 0
        self.failed_count = 0

    @abstractmethod
    def load(self, data: List[Dict[str, Any]], **kwargs) -> bool:
        """
        Load data to the destination.

        Args:
            data: List of dictionaries to load
            **kwargs: Additional parameters (table_name, etc.)

        Returns:
            True if every record was loaded, False otherwise
        """
        pass

    def get_load_stats(self) -> Dict[str, Any]:
        """Get statistics about the load operation."""
        return {
            'loader': self.name,
            'loaded': self.loaded_count,
            'failed': self.failed_count,
        }
