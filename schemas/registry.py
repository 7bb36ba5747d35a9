"""
Data-store table names.
"""

CUSTOMERS_TABLE = 'kunder'
USERS_TABLE = 'brukere'
CLIENTS_TABLE = 'klient'
