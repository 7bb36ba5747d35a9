"""Unit tests for extractors and the batch loader."""
import sqlite3
from unittest.mock import MagicMock

import pytest

from kunder.exceptions import DataStoreError, SetupError
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.extractors.legacy_sqlite import LegacySqliteExtractor
from kunder.loaders.supabase_loader import SupabaseLoader


class TestCustomerExtractor:

    def test_scopes_to_organization(self, mock_store):
        CustomerExtractor(mock_store, 5).extract(filters={'lat': 'is.null'})

        table = mock_store.select.call_args.args[0]
        filters = mock_store.select.call_args.kwargs['filters']
        assert table == 'kunder'
        assert filters == {'organization_id': 'eq.5', 'lat': 'is.null'}

    def test_validates_rows(self, mock_store):
        records = CustomerExtractor(mock_store, 5).extract()
        assert [r.id for r in records] == [1, 2, 3]
        assert records[0].last_electrical_inspection.isoformat() == '2023-03-01'
        assert records[1].city == 'Valberg'

    def test_metadata(self, mock_store):
        extractor = CustomerExtractor(mock_store, 5)
        extractor.extract()
        metadata = extractor.get_metadata()
        assert metadata['extractor'] == 'customers'
        assert metadata['record_count'] == 3
        assert metadata['rejected_count'] == 0

    def test_half_coordinate_pair_is_rejected(self, mock_store):
        mock_store.select.return_value = [
            {'id': 1, 'navn': 'Hel', 'lat': 68.1, 'lng': 13.5},
            {'id': 2, 'navn': 'Halv', 'lat': 68.1, 'lng': None},
        ]
        extractor = CustomerExtractor(mock_store, 5)
        records = extractor.extract()

        assert [r.id for r in records] == [1]
        assert extractor.rejected_count == 1

    def test_half_coordinate_pair_can_be_blanked(self, mock_store):
        mock_store.select.return_value = [
            {'id': 1, 'navn': 'Hel', 'lat': 68.1, 'lng': 13.5},
            {'id': 2, 'navn': 'Halv', 'lat': None, 'lng': 13.5},
        ]
        extractor = CustomerExtractor(mock_store, 5)
        records = extractor.extract(blank_half_pairs=True)

        assert [r.id for r in records] == [1, 2]
        assert not records[1].has_coordinates
        assert (extractor.blanked_count, extractor.rejected_count) == (1, 0)

    def test_timestamps_are_truncated_to_dates(self, mock_store):
        mock_store.select.return_value = [
            {'id': 1, 'navn': 'A', 'neste_brann_kontroll': '2025-01-15T00:00:00+00:00', 'siste_brann_kontroll': ''},
        ]
        record = CustomerExtractor(mock_store, 5).extract()[0]
        assert record.next_fire_inspection.isoformat() == '2025-01-15'
        assert record.last_fire_inspection is None


@pytest.fixture
def legacy_db(tmp_path):
    path = tmp_path / 'kunder.db'
    conn = sqlite3.connect(str(path))
    conn.execute(
        'CREATE TABLE kunder (id INTEGER PRIMARY KEY, navn TEXT, adresse TEXT, postnummer TEXT,'
        ' lat REAL, lng REAL, kategori TEXT, siste_kontroll TEXT)'
    )
    conn.executemany('INSERT INTO kunder VALUES (?, ?, ?, ?, ?, ?, ?, ?)', [
        (1, 'Bakeriet AS', 'Storgata 12', '8300', 68.2342, 14.5683, 'El-Kontroll', '2023-03-01'),
        (2, 'Fjøset', None, None, None, None, None, None),
    ])
    conn.commit()
    conn.close()
    return path


class TestLegacySqliteExtractor:

    def test_reads_rows_with_nulls(self, legacy_db):
        rows = LegacySqliteExtractor(legacy_db).extract()
        assert len(rows) == 2
        assert rows[0]['navn'] == 'Bakeriet AS'
        assert rows[1]['adresse'] is None
        assert rows[1]['lat'] is None

    def test_missing_database(self, tmp_path):
        with pytest.raises(SetupError):
            LegacySqliteExtractor(tmp_path / 'nope.db').extract()

    def test_missing_table(self, legacy_db):
        with pytest.raises(SetupError):
            LegacySqliteExtractor(legacy_db, table='kunder_old').extract()


class TestSupabaseLoader:

    def test_loads_in_batches(self):
        store = MagicMock()
        loader = SupabaseLoader(store, batch_size=2, progress=False)
        rows = [{'navn': f'Kunde {i}'} for i in range(5)]

        assert loader.load(rows, table_name='kunder') is True
        assert store.insert.call_count == 3
        assert loader.loaded_count == 5

    def test_failed_batch_counts_all_rows(self):
        store = MagicMock()
        store.insert.side_effect = [None, DataStoreError('duplicate key'), None]
        loader = SupabaseLoader(store, batch_size=2, progress=False)

        assert loader.load([{'navn': str(i)} for i in range(5)]) is False
        assert loader.loaded_count == 3
        assert loader.failed_count == 2
        assert loader.get_load_stats() == {'loader': 'supabase', 'loaded': 3, 'failed': 2}

    def test_empty_input(self):
        store = MagicMock()
        assert SupabaseLoader(store, progress=False).load([]) is False
        store.insert.assert_not_called()
