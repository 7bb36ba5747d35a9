"""Exceptions raised by the maintenance tooling."""
from typing import Optional


class KunderError(Exception):
    """Base class for all errors raised by this package."""


class SetupError(KunderError):
    """
    Fatal configuration or input problem.

    Raised before any mutation happens; scripts report it and exit 1.
    """


class ReferenceFileError(SetupError):
    """The reference (fasit) file is missing or unreadable."""


class DataStoreError(KunderError):
    """A request against the hosted data store failed."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class GeocodingError(KunderError):
    """Every geocoding provider failed for one address."""
