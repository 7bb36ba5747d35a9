"""Extract customer records for one organization from the data store."""
from typing import Dict, List, Optional

from pydantic import ValidationError

from kunder.connectors.supabase_connector import SupabaseConnector, eq
from schemas.customers import CustomerRecord
from schemas.registry import CUSTOMERS_TABLE

from .base_extractor import BaseExtractor


class CustomerExtractor(BaseExtractor):
    """
    Read `kunder` rows scoped to one organization and validate them.

    Rows that fail validation (e.g. only one of lat/lng set) are logged and
    left out rather than aborting the run. With `blank_half_pairs` a lone
    coordinate is dropped instead, so the row comes back without coordinates.
    """

    def __init__(self, store: SupabaseConnector, organization_id: int):
        super().__init__('customers')
        self.store = store
        self.organization_id = organization_id
        self.blanked_count = 0

    def extract(
        self,
        columns: str = '*',
        filters: Optional[Dict[str, str]] = None,
        order: str = 'id',
        blank_half_pairs: bool = False,
    ) -> List[CustomerRecord]:
        """
        Args:
            columns: PostgREST select list (must include id and navn)
            filters: Extra filters on top of the organization scope
            order: Sort expression
            blank_half_pairs: Clear lat and lng on rows where only one is set

        Returns:
            Validated customer records
        """
        scoped = {'organization_id': eq(self.organization_id)}
        if filters:
            scoped.update(filters)
        rows = self.store.select(CUSTOMERS_TABLE, columns=columns, filters=scoped, order=order)

        records = []
        self.rejected_count = 0
        self.blanked_count = 0
        for row in rows:
            if blank_half_pairs and (row.get('lat') is None) != (row.get('lng') is None):
                self.blanked_count += 1
                self.logger.info(f'Customer {row.get("id")} ({row.get("navn")}) has half a coordinate pair')
                row = {**row, 'lat': None, 'lng': None}
            try:
                records.append(CustomerRecord.model_validate(row))
            except ValidationError as e:
                self.rejected_count += 1
                self.logger.warning(f'Skipping customer {row.get("id")} ({row.get("navn")}): {e}')

        self.log_extraction(len(records))
        return records
