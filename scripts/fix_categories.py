#!/usr/bin/env python3
"""
Recompute kategori for every customer from its inspection fields.

Usage:
    python scripts/fix_categories.py            # dry run
    python scripts/fix_categories.py --update
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
from kunder.jobs import categories
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging


def main():
    parser = argparse.ArgumentParser(description='Fix customer categories')
    parser.add_argument(
        '--update',
        action='store_true',
        help='Write the corrected categories (default is a dry run)'
    )
    args = parser.parse_args()
    configure_logging('fix_categories')

    dry_run = not args.update
    print_header('FIX CATEGORIES', dry_run)
    try:
        with SupabaseConnector.from_settings() as store:
            result = categories.run(store, settings.ORGANIZATION_ID, dry_run=dry_run)
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print_summary(result)


if __name__ == '__main__':
    main()
