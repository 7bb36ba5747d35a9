"""
Geocoding connectors.

Two providers are tried in a fixed order: Kartverket's address registry
(ws.geonorge.no), then Nominatim (OpenStreetMap). Each is asked first with
the full street address and then with a coarser postal code / city query.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
import logging
import re
import time

import requests

from kunder.config.settings import settings
from kunder.exceptions import GeocodingError

from .api_connector import APIConnector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """Best-effort point for an address query."""

    lat: float
    lng: float
    source: str
    matched: str = ''
    precise: bool = True


_HOUSE_NUMBER = re.compile(r'\s*\d+\s*[A-Za-z]?\s*$')


def street_without_number(address: Optional[str]) -> str:
    """'Storgata 12B' -> 'Storgata'."""
    return _HOUSE_NUMBER.sub('', (address or '').strip())


def _join(*parts: Optional[str], sep: str = ' ') -> str:
    return sep.join(p.strip() for p in parts if p and p.strip())


class KartverketGeocoder(APIConnector):
    """Kartverket address search: GET /sok?sok=<text>&treffPerSide=1."""

    def __init__(self, base_url: Optional[str] = None, timeout: int = 30, session=None):
        super().__init__(
            name='kartverket',
            base_url=base_url or settings.KARTVERKET_URL,
            timeout=timeout,
            session=session,
        )

    def search(self, text: str) -> Optional[GeocodeResult]:
        """First registry hit for a free-text query, or None."""
        try:
            data = self.get('sok', params={'sok': text, 'treffPerSide': 1, 'fuzzy': 'true'})
        except (requests.RequestException, ValueError) as e:
            raise GeocodingError(f'Kartverket failed for {text!r}: {e}') from e

        try:
            for hit in data.get('adresser') or []:
                point = hit.get('representasjonspunkt')
                if point:
                    return GeocodeResult(
                        lat=float(point['lat']),
                        lng=float(point['lon']),
                        source=self.name,
                        matched=hit.get('adressetekst', ''),
                    )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GeocodingError(f'Kartverket returned an unreadable hit for {text!r}: {e}') from e
        return None

    def geocode(
        self,
        address: Optional[str],
        postal_code: Optional[str] = None,
        city: Optional[str] = None,
    ) -> Optional[GeocodeResult]:
        if address and address.strip():
            result = self.search(_join(address, postal_code, city))
            if result is not None:
                return result

            street = street_without_number(address)
            if street and street != address.strip():
                result = self.search(_join(street, postal_code, city))
                if result is not None:
                    return GeocodeResult(result.lat, result.lng, result.source, result.matched, precise=False)

        coarse = _join(postal_code, city)
        if coarse:
            result = self.search(coarse)
            if result is not None:
                return GeocodeResult(result.lat, result.lng, result.source, result.matched, precise=False)
        return None


class NominatimGeocoder(APIConnector):
    """Nominatim search; the usage policy requires an identifying User-Agent."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        timeout: int = 30,
        session=None,
    ):
        super().__init__(
            name='nominatim',
            base_url=base_url or settings.NOMINATIM_URL,
            timeout=timeout,
            session=session,
        )
        self.user_agent = user_agent or settings.GEOCODER_USER_AGENT

    def search(self, text: str) -> Optional[GeocodeResult]:
        try:
            data = self.get(
                'search',
                params={'format': 'json', 'q': text, 'limit': 1, 'countrycodes': 'no'},
                headers={'User-Agent': self.user_agent},
            )
        except (requests.RequestException, ValueError) as e:
            raise GeocodingError(f'Nominatim failed for {text!r}: {e}') from e

        if not data:
            return None
        try:
            hit = data[0]
            return GeocodeResult(
                lat=float(hit['lat']),
                lng=float(hit['lon']),
                source=self.name,
                matched=hit.get('display_name', ''),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise GeocodingError(f'Nominatim returned an unreadable hit for {text!r}: {e}') from e

    def geocode(
        self,
        address: Optional[str],
        postal_code: Optional[str] = None,
        city: Optional[str] = None,
    ) -> Optional[GeocodeResult]:
        if address and address.strip():
            result = self.search(_join(address, postal_code, city, 'Norway', sep=', '))
            if result is not None:
                return result

        area = _join(postal_code, city)
        if area:
            result = self.search(f'{area}, Norway')
            if result is not None:
                return GeocodeResult(result.lat, result.lng, result.source, result.matched, precise=False)
        return None


class FallbackGeocoder:
    """
    Try providers in order and return the first hit.

    A provider error is logged and the next provider is tried. Only when
    every provider failed with an error is GeocodingError raised; providers
    that answered without a hit give None.
    """

    def __init__(
        self,
        providers: Sequence,
        delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.providers = list(providers)
        self.delay = delay
        self.sleep = sleep

    @classmethod
    def from_settings(cls) -> 'FallbackGeocoder':
        return cls(
            [
                KartverketGeocoder(timeout=settings.HTTP_TIMEOUT),
                NominatimGeocoder(timeout=settings.HTTP_TIMEOUT),
            ],
            delay=settings.NOMINATIM_DELAY,
        )

    def geocode(
        self,
        address: Optional[str],
        postal_code: Optional[str] = None,
        city: Optional[str] = None,
    ) -> Optional[GeocodeResult]:
        errors: List[str] = []
        for index, provider in enumerate(self.providers):
            if index > 0:
                self.sleep(self.delay)
            try:
                result = provider.geocode(address, postal_code, city)
            except GeocodingError as e:
                logger.warning(str(e))
                errors.append(str(e))
                continue
            if result is not None:
                return result

        if errors and len(errors) == len(self.providers):
            raise GeocodingError('; '.join(errors))
        return None

    def close(self) -> None:
        for provider in self.providers:
            provider.close()
