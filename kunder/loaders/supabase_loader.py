"""Loader inserting rows into a Supabase table in batches."""
from typing import Any, Dict, List

from tqdm import tqdm

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import DataStoreError
from kunder.utils.helpers import chunk_list

from .base_loader import BaseLoader


class SupabaseLoader(BaseLoader):
    """
    Insert rows batch by batch.

    A failed batch is logged and counted as failed in full; later batches
    are still attempted.
    """

    def __init__(self, store: SupabaseConnector, batch_size: int = 50, progress: bool = True):
        super().__init__('supabase')
        self.store = store
        self.batch_size = batch_size
        self.progress = progress

    def load(self, data: List[Dict[str, Any]], table_name: str = 'kunder', **kwargs) -> bool:
        """
        Args:
            data: Rows keyed by stored column names
            table_name: Target table

        Returns:
            True if every batch was inserted
        """
        self.loaded_count = 0
        self.failed_count = 0
        if not data:
            self.logger.warning('No data to load')
            return False

        batches = chunk_list(data, self.batch_size)
        for number, batch in enumerate(tqdm(batches, desc=f'Loading {table_name}', disable=not self.progress), 1):
            try:
                self.store.insert(table_name, batch)
            except DataStoreError as e:
                self.failed_count += len(batch)
                self.logger.error(f'Batch {number} failed: {e}')
            else:
                self.loaded_count += len(batch)
                self.logger.info(f'Migrated batch {number}: {len(batch)} rows')

        return self.failed_count == 0
