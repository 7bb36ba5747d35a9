"""
Data schemas for the kunder maintenance scripts.

Usage:
    from schemas import CustomerRecord, Category
    from schemas.reference import FASIT_2026

    record = CustomerRecord.model_validate(row_from_supabase)
"""

from .accounts import ClientAccount, UserAccount
from .customers import Category, CustomerRecord, GeocodeQuality, to_store_fields
from .reference import ColumnMapping, ReferenceRow
from .registry import CLIENTS_TABLE, CUSTOMERS_TABLE, USERS_TABLE

__all__ = [
    'CLIENTS_TABLE',
    'CUSTOMERS_TABLE',
    'Category',
    'ClientAccount',
    'ColumnMapping',
    'CustomerRecord',
    'GeocodeQuality',
    'ReferenceRow',
    'USERS_TABLE',
    'UserAccount',
    'to_store_fields',
]
