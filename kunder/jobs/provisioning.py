"""
Provision an admin login: a brukere row with role admin and a matching
klient row. Existing accounts (same e-mail, any case) are updated in place.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from passlib.context import CryptContext

from kunder.connectors.supabase_connector import SupabaseConnector, ilike
from kunder.exceptions import DataStoreError, SetupError
from schemas.accounts import ClientAccount, UserAccount
from schemas.registry import CLIENTS_TABLE, USERS_TABLE

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


@dataclass
class ProvisionResult:
    email: str
    user_action: str
    client_action: str


def validate_credentials(name: Optional[str], email: Optional[str], password: Optional[str]) -> None:
    """
    Raises:
        SetupError: If a value is missing or the password is too short
    """
    missing = [label for label, value in (('name', name), ('email', email), ('password', password))
               if not value or not value.strip()]
    if missing:
        raise SetupError(f'Missing account values: {", ".join(missing)}')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise SetupError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')


def find_account_id(store: SupabaseConnector, table: str, email: str) -> Optional[int]:
    """Id of the account with this e-mail, compared case-insensitively."""
    rows = store.select(table, columns='id,epost', filters={'epost': ilike(email)})
    wanted = email.strip().lower()
    for row in rows:
        if (row.get('epost') or '').strip().lower() == wanted:
            return row['id']
    return None


def _upsert(store: SupabaseConnector, table: str, fields: Dict[str, Any], email: str) -> str:
    existing = find_account_id(store, table, email)
    if existing is not None:
        store.update_by_id(table, existing, fields)
        return 'updated'
    store.insert(table, [fields])
    return 'created'


def provision_admin(
    store: SupabaseConnector,
    name: str,
    email: str,
    password: str,
    company: Optional[str] = None,
) -> ProvisionResult:
    """
    Create or update the admin user and its client account.

    Only the bcrypt hash is stored. A failure on the brukere table is raised;
    a failure on the klient table is logged and reported in the result.
    """
    validate_credentials(name, email, password)
    email = email.strip()
    password_hash = hash_password(password)

    user = UserAccount(name=name.strip(), email=email, password_hash=password_hash)
    user_fields = user.model_dump(by_alias=True, mode='json', exclude={'id', 'last_login'})
    user_action = _upsert(store, USERS_TABLE, user_fields, email)
    logger.info(f'User {email} {user_action}')

    client = ClientAccount(name=name.strip(), email=email, password_hash=password_hash, company=company)
    client_fields = client.model_dump(by_alias=True, mode='json', exclude={'id', 'last_login'}, exclude_none=True)
    try:
        client_action = _upsert(store, CLIENTS_TABLE, client_fields, email)
    except DataStoreError as e:
        logger.warning(f'Client account for {email} not provisioned: {e}')
        client_action = 'failed'
    else:
        logger.info(f'Client {email} {client_action}')

    return ProvisionResult(email=email, user_action=user_action, client_action=client_action)
