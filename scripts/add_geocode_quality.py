#!/usr/bin/env python3
"""
Add geocode quality tags to customers.

Checks that kunder.geocode_quality exists (prints the ALTER TABLE statement
when it does not) and sets each record to 'exact' or 'area' from its address.

Usage:
    python scripts/add_geocode_quality.py            # dry run
    python scripts/add_geocode_quality.py --update
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kunder.config.settings import settings
from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import SetupError
from kunder.jobs import geocode_quality
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging


def main():
    parser = argparse.ArgumentParser(description='Backfill geocode_quality for all customers')
    parser.add_argument(
        '--update',
        action='store_true',
        help='Write the tags (default is a dry run)'
    )
    args = parser.parse_args()
    configure_logging('add_geocode_quality')

    dry_run = not args.update
    print_header('GEOCODE QUALITY', dry_run)
    try:
        with SupabaseConnector.from_settings() as store:
            result = geocode_quality.run(store, settings.ORGANIZATION_ID, dry_run=dry_run)
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print_summary(result)


if __name__ == '__main__':
    main()
