#!/usr/bin/env python3
"""
Repair problems from the bulk import.

1. Removes duplicates (same name and address), keeping the lowest id
2. Corrects coordinates outside Northern Norway
3. Fills missing next Brannvarsling / El-Kontroll dates

Usage:
    python scripts/fix_import_issues.py         # dry run
    python scripts/fix_import_issues.py --fix
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kunder.config.settings import settings
from kunder.connectors.geocoding import FallbackGeocoder
from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import SetupError
from kunder.jobs import import_issues
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging


def main():
    parser = argparse.ArgumentParser(description='Fix duplicates, coordinates and dates after import')
    parser.add_argument(
        '--fix',
        action='store_true',
        help='Apply the fixes (default is a dry run)'
    )
    args = parser.parse_args()
    configure_logging('fix_import_issues')

    dry_run = not args.fix
    print_header('FIX IMPORT ISSUES', dry_run, commit_flag='--fix')
    geocoder = FallbackGeocoder.from_settings()
    try:
        with SupabaseConnector.from_settings() as store:
            result = import_issues.run(
                store,
                geocoder,
                settings.ORGANIZATION_ID,
                dry_run=dry_run,
                delay=settings.GEOCODE_DELAY,
            )
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)
    finally:
        geocoder.close()

    print_summary(result)


if __name__ == '__main__':
    main()
