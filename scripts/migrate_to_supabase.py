#!/usr/bin/env python3
"""
Migrate customers from the legacy SQLite database (LEGACY_DB_PATH) to the
hosted store, under ORGANIZATION_ID.

Usage:
    python scripts/migrate_to_supabase.py            # dry run
    python scripts/migrate_to_supabase.py --update
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
from kunder.extractors.legacy_sqlite import LegacySqliteExtractor
from kunder.jobs import migrate
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging


def main():
    parser = argparse.ArgumentParser(description='Migrate legacy SQLite customers to Supabase')
    parser.add_argument(
        '--update',
        action='store_true',
        help='Insert the rows (default is a dry run)'
    )
    args = parser.parse_args()
    configure_logging('migrate_to_supabase')

    dry_run = not args.update
    print_header('MIGRATE TO SUPABASE', dry_run)
    print(f'Source: {settings.LEGACY_DB_PATH}')
    try:
        legacy_rows = LegacySqliteExtractor(settings.LEGACY_DB_PATH).extract()
        with SupabaseConnector.from_settings() as store:
            result, _ = migrate.run(
                store,
                legacy_rows,
                settings.ORGANIZATION_ID,
                dry_run=dry_run,
                batch_size=settings.MIGRATION_BATCH_SIZE,
            )
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print_summary(result)


if __name__ == '__main__':
    main()
