#!/usr/bin/env python3
"""
Show the latest client logins, then print new admin and client logins as
they happen. Stop with Ctrl+C.

Usage:
    python scripts/monitor_logins.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kunder.config.settings import settings
from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import DataStoreError, SetupError
from kunder.jobs import logins
from kunder.utils.helpers import banner
from kunder.utils.logger import configure_logging


def main():
    configure_logging('monitor_logins')
    print(banner('LOGIN MONITOR'))
    try:
        with SupabaseConnector.from_settings() as store:
            logins.show_recent(store)
            print(f'\nWatching for new logins every {settings.LOGIN_POLL_INTERVAL:g}s (Ctrl+C to stop)\n')
            logins.tail(store, interval=settings.LOGIN_POLL_INTERVAL)
    except (SetupError, DataStoreError) as e:
        print(f'\nERROR: {e}')
        sys.exit(1)
    except KeyboardInterrupt:
        print('\nStopped')


if __name__ == '__main__':
    main()
