"""Pytest configuration and fixtures."""
import pytest
from unittest.mock import MagicMock
from typing import List, Dict, Any

from kunder.connectors.geocoding import GeocodeResult
from schemas.customers import CustomerRecord


@pytest.fixture
def sample_rows() -> List[Dict[str, Any]]:
    """Customer rows as the data store returns them."""
    return [
        {
            'id': 1,
            'organization_id': 5,
            'navn': 'Bakeriet AS',
            'adresse': 'Storgata 12',
            'postnummer': '8300',
            'poststed': 'Svolvær',
            'lat': 68.2342,
            'lng': 14.5683,
            'kategori': 'El-Kontroll',
            'el_type': 'Næring',
            'siste_el_kontroll': '2023-03-01',
            'neste_el_kontroll': '2026-03-01',
            'el_kontroll_intervall': 36,
        },
        {
            'id': 2,
            'organization_id': 5,
            'navn': 'Fjøset Valberg',
            'adresse': 'Valberg',
            'postnummer': '8378',
            'poststed': 'Valberg',
            'lat': 59.2,
            'lng': 10.1,
            'kategori': 'El-Kontroll',
            'brann_system': 'Elotec',
            'siste_brann_kontroll': '2024-01-15',
        },
        {
            'id': 3,
            'organization_id': 5,
            'navn': 'Gården 201/856',
            'adresse': '201/856',
            'postnummer': '8289',
            'poststed': 'Engleøya',
            'lat': None,
            'lng': None,
            'kategori': 'Brannvarsling',
        },
    ]


@pytest.fixture
def sample_records(sample_rows) -> List[CustomerRecord]:
    return [CustomerRecord.model_validate(row) for row in sample_rows]


@pytest.fixture
def make_record():
    """Factory for CustomerRecord with English attribute names."""
    def _make(record_id: int = 1, name: str = 'Kunde', **fields) -> CustomerRecord:
        fields.setdefault('organization_id', 5)
        return CustomerRecord(id=record_id, name=name, **fields)
    return _make


@pytest.fixture
def mock_store(sample_rows):
    """Mock Supabase connector returning sample_rows from select."""
    store = MagicMock()
    store.authenticate.return_value = True
    store.select.return_value = sample_rows
    store.has_column.return_value = True
    store.count.return_value = len(sample_rows)
    store.insert.side_effect = lambda table, rows: list(rows)
    return store


@pytest.fixture
def mock_geocoder():
    """Mock geocoder answering with a point in Lofoten."""
    geocoder = MagicMock()
    geocoder.geocode.return_value = GeocodeResult(
        lat=68.1500, lng=13.6000, source='kartverket', matched='Valbergsveien 1',
    )
    return geocoder


@pytest.fixture
def mock_session():
    """Mock requests session with a real headers dict."""
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def no_sleep():
    """Sleep replacement recording the requested delays."""
    calls = []
    return calls.append, calls
