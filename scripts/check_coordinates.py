#!/usr/bin/env python3
"""
Report coordinate status for the organization. Read-only.

Usage:
    python scripts/check_coordinates.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kunder.config.settings import settings
from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import SetupError
from kunder.jobs import check_coordinates
from kunder.jobs.common import print_summary
from kunder.utils.helpers import banner
from kunder.utils.logger import configure_logging


def main():
    configure_logging('check_coordinates')
    print(banner('COORDINATE CHECK'))
    try:
        with SupabaseConnector.from_settings() as store:
            result = check_coordinates.run(store, settings.ORGANIZATION_ID)
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print_summary(result)


if __name__ == '__main__':
    main()
