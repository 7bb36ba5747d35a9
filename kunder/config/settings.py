"""
Configuration settings for the kunder maintenance scripts.
Load configuration from environment variables or the project .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    LOG_DIR = Path(os.getenv('LOG_DIR', str(PROJECT_ROOT / 'logs')))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # ============================================================================
    # Supabase (hosted data store)
    # ============================================================================
    SUPABASE_URL = os.getenv('SUPABASE_URL', '')
    SUPABASE_SERVICE_ROLE_KEY = os.getenv('SUPABASE_SERVICE_ROLE_KEY', '')
    SUPABASE_SERVICE_KEY = os.getenv('SUPABASE_SERVICE_KEY', '')
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY', '')
    HTTP_TIMEOUT = int(os.getenv('HTTP_TIMEOUT', '30'))

    # Tenant all scripts operate on
    ORGANIZATION_ID = int(os.getenv('ORGANIZATION_ID', '5'))

    # ============================================================================
    # Input files
    # ============================================================================
    FASIT_PATH = Path(os.getenv(
        'FASIT_PATH',
        str(PROJECT_ROOT.parent / 'El-kontroll og brannvarsling 01.02.26.csv'),
    ))
    LEGACY_DB_PATH = Path(os.getenv('LEGACY_DB_PATH', str(PROJECT_ROOT / 'kunder.db')))
    MIGRATION_BATCH_SIZE = int(os.getenv('MIGRATION_BATCH_SIZE', '50'))

    # ============================================================================
    # Geocoding
    # ============================================================================
    KARTVERKET_URL = os.getenv('KARTVERKET_URL', 'https://ws.geonorge.no/adresser/v1')
    NOMINATIM_URL = os.getenv('NOMINATIM_URL', 'https://nominatim.openstreetmap.org')
    GEOCODER_USER_AGENT = os.getenv('GEOCODER_USER_AGENT', 'SkyPlanner/1.0')
    GEOCODE_DELAY = float(os.getenv('GEOCODE_DELAY', '0.2'))
    NOMINATIM_DELAY = float(os.getenv('NOMINATIM_DELAY', '1.0'))

    # Login monitor
    LOGIN_POLL_INTERVAL = float(os.getenv('LOGIN_POLL_INTERVAL', '5'))

    # ============================================================================
    # Account provisioning
    # ============================================================================
    KLIENT_NAVN = os.getenv('KLIENT_NAVN', '')
    KLIENT_EPOST = os.getenv('KLIENT_EPOST', '')
    KLIENT_PASSORD = os.getenv('KLIENT_PASSORD', '')
    KLIENT_FIRMA = os.getenv('KLIENT_FIRMA', '')

    @classmethod
    def get_service_key(cls) -> str:
        """Service role key, falling back to the older key names."""
        return (
            cls.SUPABASE_SERVICE_ROLE_KEY
            or cls.SUPABASE_SERVICE_KEY
            or cls.SUPABASE_ANON_KEY
        )

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate that all required settings are configured.
        Returns list of missing required settings.
        """
        missing = []

        if not cls.SUPABASE_URL:
            missing.append('SUPABASE_URL')
        if not cls.get_service_key():
            missing.append('SUPABASE_SERVICE_ROLE_KEY')

        return missing


# Create settings instance
settings = Settings()
