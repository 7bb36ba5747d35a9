#!/usr/bin/env python3
"""
Geocode customers without coordinates.

Known postal codes are resolved from a local table; everything else goes to
Kartverket and then Nominatim, with a pause between calls.

Usage:
    python scripts/geocode_missing.py            # dry run
    python scripts/geocode_missing.py --update
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
from kunder.jobs import geocode_missing
from kunder.jobs.common import print_header, print_summary
from kunder.utils.logger import configure_logging


def main():
    parser = argparse.ArgumentParser(description='Geocode customers with missing coordinates')
    parser.add_argument(
        '--update',
        action='store_true',
        help='Write the coordinates (default is a dry run)'
    )
    args = parser.parse_args()
    configure_logging('geocode_missing')

    dry_run = not args.update
    print_header('GEOCODE MISSING COORDINATES', dry_run)
    geocoder = FallbackGeocoder.from_settings()
    try:
        with SupabaseConnector.from_settings() as store:
            result = geocode_missing.run(
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
