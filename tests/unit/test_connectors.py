"""Unit tests for the data store and geocoding connectors."""
from unittest.mock import MagicMock

import pytest
import requests

from kunder.config.settings import Settings
from kunder.connectors import supabase_connector
from kunder.connectors.geocoding import (
    FallbackGeocoder,
    GeocodeResult,
    KartverketGeocoder,
    NominatimGeocoder,
    street_without_number,
)
from kunder.connectors.supabase_connector import (
    SupabaseConnector,
    coordinates_missing,
    eq,
    gt,
    is_null,
    not_null,
)
from kunder.exceptions import DataStoreError, GeocodingError, SetupError


def make_response(json_data=None, status_code=200, text='', headers=None):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.headers = headers or {}
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


@pytest.fixture
def store(mock_session):
    connector = SupabaseConnector('https://abc.supabase.co/', 'service-key', session=mock_session)
    connector.authenticate()
    return connector


class TestFilterHelpers:

    def test_operator_strings(self):
        assert eq(5) == 'eq.5'
        assert gt('2026-01-01T00:00:00') == 'gt.2026-01-01T00:00:00'
        assert is_null() == 'is.null'
        assert not_null() == 'not.is.null'
        assert coordinates_missing() == '(lat.is.null,lng.is.null)'


class TestSupabaseConnector:

    def test_authenticate_sets_keys(self, store, mock_session):
        assert mock_session.headers['apikey'] == 'service-key'
        assert mock_session.headers['Authorization'] == 'Bearer service-key'

    def test_select_builds_query(self, store, mock_session):
        mock_session.request.return_value = make_response([{'id': 1}])
        rows = store.select('kunder', columns='id,navn', filters={'organization_id': eq(5)}, order='id')

        assert rows == [{'id': 1}]
        method, url = mock_session.request.call_args.args
        params = mock_session.request.call_args.kwargs['params']
        assert method == 'GET'
        assert url == 'https://abc.supabase.co/rest/v1/kunder'
        assert params['select'] == 'id,navn'
        assert params['organization_id'] == 'eq.5'
        assert params['order'] == 'id'
        assert params['offset'] == 0

    def test_select_follows_pages(self, store, mock_session, monkeypatch):
        monkeypatch.setattr(supabase_connector, 'PAGE_SIZE', 2)
        mock_session.request.side_effect = [
            make_response([{'id': 1}, {'id': 2}]),
            make_response([{'id': 3}]),
        ]
        rows = store.select('kunder')

        assert [r['id'] for r in rows] == [1, 2, 3]
        offsets = [c.kwargs['params']['offset'] for c in mock_session.request.call_args_list]
        assert offsets == [0, 2]

    def test_select_limit(self, store, mock_session):
        mock_session.request.return_value = make_response([{'id': 1}])
        store.select('klient', limit=5)
        assert mock_session.request.call_args.kwargs['params']['limit'] == 5

    def test_update_by_id(self, store, mock_session):
        mock_session.request.return_value = make_response()
        store.update_by_id('kunder', 42, {'kategori': 'Brannvarsling'})

        method, _ = mock_session.request.call_args.args
        kwargs = mock_session.request.call_args.kwargs
        assert method == 'PATCH'
        assert kwargs['params'] == {'id': 'eq.42'}
        assert kwargs['json'] == {'kategori': 'Brannvarsling'}
        assert kwargs['headers']['Prefer'] == 'return=minimal'

    def test_delete_by_id(self, store, mock_session):
        mock_session.request.return_value = make_response()
        store.delete_by_id('kunder', 7)
        assert mock_session.request.call_args.args[0] == 'DELETE'
        assert mock_session.request.call_args.kwargs['params'] == {'id': 'eq.7'}

    def test_insert_returns_rows(self, store, mock_session):
        mock_session.request.return_value = make_response([{'id': 10, 'navn': 'Ny'}])
        assert store.insert('kunder', [{'navn': 'Ny'}]) == [{'id': 10, 'navn': 'Ny'}]
        assert mock_session.request.call_args.kwargs['headers']['Prefer'] == 'return=representation'

    def test_count_from_content_range(self, store, mock_session):
        mock_session.request.return_value = make_response(headers={'Content-Range': '0-0/137'})
        assert store.count('kunder', {'organization_id': eq(5)}) == 137
        assert mock_session.request.call_args.args[0] == 'HEAD'
        assert mock_session.request.call_args.kwargs['headers']['Prefer'] == 'count=exact'

    def test_count_without_header(self, store, mock_session):
        mock_session.request.return_value = make_response(headers={'Content-Range': '*/*'})
        with pytest.raises(DataStoreError):
            store.count('kunder')

    def test_http_error_is_wrapped(self, store, mock_session):
        mock_session.request.return_value = make_response(status_code=500, text='boom')
        with pytest.raises(DataStoreError) as exc_info:
            store.update_by_id('kunder', 1, {})
        assert exc_info.value.status_code == 500
        assert exc_info.value.response_text == 'boom'

    def test_network_error_is_wrapped(self, store, mock_session):
        mock_session.request.side_effect = requests.ConnectionError('unreachable')
        with pytest.raises(DataStoreError):
            store.select('kunder')

    def test_has_column(self, store, mock_session):
        mock_session.request.return_value = make_response([])
        assert store.has_column('kunder', 'geocode_quality') is True

    def test_missing_column(self, store, mock_session):
        mock_session.request.return_value = make_response(
            status_code=400, text='{"message":"column kunder.geocode_quality does not exist"}')
        assert store.has_column('kunder', 'geocode_quality') is False

    def test_has_column_propagates_other_errors(self, store, mock_session):
        mock_session.request.return_value = make_response(status_code=401, text='JWT expired')
        with pytest.raises(DataStoreError):
            store.has_column('kunder', 'geocode_quality')

    def test_from_settings_requires_credentials(self, monkeypatch):
        monkeypatch.setattr(Settings, 'SUPABASE_URL', '')
        with pytest.raises(SetupError):
            SupabaseConnector.from_settings()

    def test_service_key_fallback(self, monkeypatch):
        monkeypatch.setattr(Settings, 'SUPABASE_SERVICE_ROLE_KEY', '')
        monkeypatch.setattr(Settings, 'SUPABASE_SERVICE_KEY', 'old-key')
        assert Settings.get_service_key() == 'old-key'


def kartverket_hit(lat, lon, text='Storgata 12'):
    return make_response({'adresser': [{'representasjonspunkt': {'lat': lat, 'lon': lon}, 'adressetekst': text}]})


class TestKartverketGeocoder:

    def test_full_address_hit(self, mock_session):
        mock_session.request.return_value = kartverket_hit(68.2342, 14.5683)
        result = KartverketGeocoder(base_url='https://kv.test', session=mock_session).geocode(
            'Storgata 12', '8300', 'Svolvær')

        assert result == GeocodeResult(68.2342, 14.5683, 'kartverket', 'Storgata 12', precise=True)
        params = mock_session.request.call_args.kwargs['params']
        assert params['sok'] == 'Storgata 12 8300 Svolvær'
        assert params['treffPerSide'] == 1

    def test_falls_back_to_street_then_area(self, mock_session):
        mock_session.request.side_effect = [
            make_response({'adresser': []}),
            make_response({'adresser': []}),
            kartverket_hit(68.23, 14.56, '8300 Svolvær'),
        ]
        result = KartverketGeocoder(session=mock_session).geocode('Storgata 12', '8300', 'Svolvær')

        queries = [c.kwargs['params']['sok'] for c in mock_session.request.call_args_list]
        assert queries == ['Storgata 12 8300 Svolvær', 'Storgata 8300 Svolvær', '8300 Svolvær']
        assert result.precise is False

    def test_no_hit(self, mock_session):
        mock_session.request.return_value = make_response({'adresser': []})
        assert KartverketGeocoder(session=mock_session).geocode('', None, None) is None
        mock_session.request.assert_not_called()

    def test_request_error(self, mock_session):
        mock_session.request.side_effect = requests.Timeout('slow')
        with pytest.raises(GeocodingError):
            KartverketGeocoder(session=mock_session).geocode('Storgata 12', '8300', 'Svolvær')

    def test_malformed_hit_is_geocoding_error(self, mock_session):
        mock_session.request.return_value = make_response(
            {'adresser': [{'representasjonspunkt': {'lat': 68.2}}]})
        with pytest.raises(GeocodingError):
            KartverketGeocoder(session=mock_session).geocode('Storgata 12', '8300', 'Svolvær')

    @pytest.mark.parametrize("address,expected", [
        ('Storgata 12', 'Storgata'),
        ('Storgata 12B', 'Storgata'),
        ('Storgata 12 b', 'Storgata'),
        ('Valberg', 'Valberg'),
    ])
    def test_street_without_number(self, address, expected):
        assert street_without_number(address) == expected


class TestNominatimGeocoder:

    def test_sends_user_agent_and_country(self, mock_session):
        mock_session.request.return_value = make_response(
            [{'lat': '68.17', 'lon': '13.57', 'display_name': 'Valberg, Vestvågøy'}])
        result = NominatimGeocoder(user_agent='SkyPlanner/1.0', session=mock_session).geocode(
            'Valbergsveien 1', '8378', 'Valberg')

        kwargs = mock_session.request.call_args.kwargs
        assert kwargs['headers']['User-Agent'] == 'SkyPlanner/1.0'
        assert kwargs['params']['countrycodes'] == 'no'
        assert kwargs['params']['q'] == 'Valbergsveien 1, 8378, Valberg, Norway'
        assert (result.lat, result.lng, result.source) == (68.17, 13.57, 'nominatim')

    def test_area_query_is_imprecise(self, mock_session):
        mock_session.request.side_effect = [
            make_response([]),
            make_response([{'lat': '68.17', 'lon': '13.57'}]),
        ]
        result = NominatimGeocoder(session=mock_session).geocode('Valbergsveien 1', '8378', 'Valberg')
        assert mock_session.request.call_args.kwargs['params']['q'] == '8378 Valberg, Norway'
        assert result.precise is False

    def test_malformed_hit_is_geocoding_error(self, mock_session):
        mock_session.request.return_value = make_response([{'display_name': 'Valberg'}])
        with pytest.raises(GeocodingError):
            NominatimGeocoder(session=mock_session).geocode('Valbergsveien 1', '8378', 'Valberg')

    def test_malformed_hit_moves_to_next_provider(self, mock_session, no_sleep):
        sleep, _ = no_sleep
        mock_session.request.return_value = make_response([{'lat': None, 'lon': '13.57'}])
        backup = MagicMock()
        backup.geocode.return_value = GeocodeResult(68.1, 13.5, 'kartverket')

        geocoder = FallbackGeocoder([NominatimGeocoder(session=mock_session), backup], sleep=sleep)
        assert geocoder.geocode('Valbergsveien 1').source == 'kartverket'


class TestFallbackGeocoder:

    def test_first_hit_wins(self, no_sleep):
        sleep, delays = no_sleep
        first, second = MagicMock(), MagicMock()
        first.geocode.return_value = GeocodeResult(68.1, 13.5, 'kartverket')
        result = FallbackGeocoder([first, second], delay=1.0, sleep=sleep).geocode('Vei 1', '8378', 'Valberg')

        assert result.source == 'kartverket'
        second.geocode.assert_not_called()
        assert delays == []

    def test_error_moves_to_next_provider(self, no_sleep):
        sleep, delays = no_sleep
        first, second = MagicMock(), MagicMock()
        first.geocode.side_effect = GeocodingError('kartverket down')
        second.geocode.return_value = GeocodeResult(68.1, 13.5, 'nominatim')
        result = FallbackGeocoder([first, second], delay=1.0, sleep=sleep).geocode('Vei 1')

        assert result.source == 'nominatim'
        assert delays == [1.0]

    def test_all_providers_failing_raises(self, no_sleep):
        sleep, _ = no_sleep
        first, second = MagicMock(), MagicMock()
        first.geocode.side_effect = GeocodingError('a')
        second.geocode.side_effect = GeocodingError('b')
        with pytest.raises(GeocodingError):
            FallbackGeocoder([first, second], sleep=sleep).geocode('Vei 1')

    def test_no_hit_without_errors_is_none(self, no_sleep):
        sleep, _ = no_sleep
        first, second = MagicMock(), MagicMock()
        first.geocode.return_value = None
        second.geocode.side_effect = GeocodingError('b')
        assert FallbackGeocoder([first, second], sleep=sleep).geocode('Vei 1') is None
