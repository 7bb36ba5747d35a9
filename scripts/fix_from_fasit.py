#!/usr/bin/env python3
"""
Reconcile customers against the fasit reference file (FASIT_PATH).

Removes name-duplicates, fills empty fields from the matching reference
row, recomputes the category and lists customers missing from the reference.
Populated fields are never overwritten.

Usage:
    python scripts/fix_from_fasit.py            # dry run
    python scripts/fix_from_fasit.py --update
    python scripts/fix_from_fasit.py --layout export-2025
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
from kunder.extractors.reference_file import ReferenceFileExtractor
from kunder.jobs import fasit
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging
from schemas.reference import FASIT_2026, MAPPINGS


def main():
    parser = argparse.ArgumentParser(description='Reconcile customers against the fasit file')
    parser.add_argument(
        '--update',
        action='store_true',
        help='Delete duplicates and write updates (default is a dry run)'
    )
    parser.add_argument(
        '--layout',
        choices=sorted(MAPPINGS),
        default=FASIT_2026.name,
        help='Column layout of the reference file'
    )
    args = parser.parse_args()
    configure_logging('fix_from_fasit')

    dry_run = not args.update
    print_header('RECONCILE WITH FASIT', dry_run)
    mapping = MAPPINGS[args.layout]
    print(f'Reference file: {settings.FASIT_PATH} ({mapping.name})')
    try:
        rows = ReferenceFileExtractor(settings.FASIT_PATH, mapping).extract()
        with SupabaseConnector.from_settings() as store:
            result = fasit.run(store, rows, settings.ORGANIZATION_ID, dry_run=dry_run)
    except SetupError as e:
        print(f'\nERROR: {e}')
        sys.exit(1)

    print_summary(result)


if __name__ == '__main__':
    main()
