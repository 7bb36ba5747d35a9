#!/usr/bin/env python3
"""
Create or update an admin login (brukere) and its client account (klient).

Account values come from KLIENT_NAVN, KLIENT_EPOST, KLIENT_PASSORD and
KLIENT_FIRMA. The password is stored as a bcrypt hash only.

Usage:
    python scripts/create_user.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kunder.config.settings import settings
from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import DataStoreError, SetupError
from kunder.jobs import provisioning
from kunder.utils.helpers import banner
from kunder.utils.logger import configure_logging


def main():
    configure_logging('create_user')
    print(banner('CREATE ADMIN USER'))
    try:
        with SupabaseConnector.from_settings() as store:
            result = provisioning.provision_admin(
                store,
                name=settings.KLIENT_NAVN,
                email=settings.KLIENT_EPOST,
                password=settings.KLIENT_PASSORD,
                company=settings.KLIENT_FIRMA or None,
            )
    except (SetupError, DataStoreError) as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print(f'User ({settings.KLIENT_NAVN}): {result.user_action}')
    print(f'Client account: {result.client_action}')
    print(f'Login e-mail: {result.email}')


if __name__ == '__main__':
    main()
