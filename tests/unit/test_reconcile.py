"""Unit tests for the record reconciliation engine."""
import itertools
from datetime import date

import pytest

from kunder.reconcile.category import category_changes, infer_category
from kunder.reconcile.coordinates import (
    NORTHERN_NORWAY,
    Coordinate,
    find_implausible,
    is_plausible,
    lookup_place_correction,
    lookup_postal_correction,
    resolve_correction,
)
from kunder.reconcile.dates import (
    add_months,
    backfill_next_dates,
    parse_interval,
    parse_month,
    parse_reference_date,
    parse_year,
    project_next_date,
)
from kunder.reconcile.diff import diff_record
from kunder.reconcile.duplicates import (
    duplicate_key,
    find_duplicates,
    group_ids_by_key,
    ids_to_delete,
    name_key,
)
from kunder.reconcile.quality import classify_quality, quality_changes
from kunder.reconcile.text import normalize_text
from schemas.customers import Category, GeocodeQuality


class TestNormalizeText:

    @pytest.mark.parametrize("value,expected", [
        ('  Storgata   12 ', 'storgata 12'),
        ('BAKERIET\tAS', 'bakeriet as'),
        (None, ''),
        ('', ''),
    ])
    def test_normalize(self, value, expected):
        assert normalize_text(value) == expected


class TestCategoryInference:

    def test_both_signals_give_combined(self, make_record):
        record = make_record(electrical_type='Bolig', fire_system='Elotec')
        assert infer_category(record) == Category.COMBINED

    def test_only_fire(self, make_record):
        record = make_record(last_fire_inspection=date(2024, 1, 15))
        assert infer_category(record) == Category.FIRE

    def test_only_electrical(self, make_record):
        record = make_record(next_electrical_inspection=date(2026, 3, 1))
        assert infer_category(record) == Category.ELECTRICAL

    def test_no_signal_keeps_existing(self, make_record):
        record = make_record(category='Brannvarsling')
        assert infer_category(record) == Category.FIRE

    def test_no_signal_and_no_category_defaults_to_electrical(self, make_record):
        assert infer_category(make_record()) == Category.ELECTRICAL

    def test_intervals_are_not_signal(self, make_record):
        record = make_record(category='Brannvarsling', electrical_interval_months=36, fire_interval_months=12)
        assert infer_category(record) == Category.FIRE

    def test_whitespace_fields_are_not_signal(self, make_record):
        record = make_record(electrical_type='   ', category='Brannvarsling')
        assert infer_category(record) == Category.FIRE

    def test_no_change_when_already_correct(self, make_record):
        record = make_record(electrical_type='Bolig', category='El-Kontroll')
        assert category_changes(record) == {}

    def test_change_when_wrong(self, make_record):
        record = make_record(fire_system='Autroprime', category='El-Kontroll')
        assert category_changes(record) == {'category': 'Brannvarsling'}

    @pytest.mark.parametrize("fields", [
        {},
        {'category': 'Brannvarsling'},
        {'category': 'Service'},
        {'electrical_type': 'Bolig'},
        {'last_electrical_inspection': date(2023, 3, 1)},
        {'fire_operation_type': 'Storfe'},
        {'next_fire_inspection': date(2025, 1, 15), 'category': 'El-Kontroll'},
        {'electrical_type': 'Næring', 'fire_system': 'Elotec'},
        {'next_electrical_inspection': date(2026, 3, 1), 'last_fire_inspection': date(2024, 5, 1)},
    ])
    def test_inference_is_idempotent(self, make_record, fields):
        record = make_record(**fields)
        first = infer_category(record)
        value = first.value if isinstance(first, Category) else first
        settled = record.model_copy(update={'category': value})

        assert infer_category(settled) == first
        assert category_changes(settled) == {}


class TestQualityClassification:

    @pytest.mark.parametrize("address,expected", [
        ('Storgata 12', GeocodeQuality.EXACT),
        ('201/856', GeocodeQuality.EXACT),
        ('Gnr/Bnr', GeocodeQuality.EXACT),
        ('Valberg', GeocodeQuality.AREA),
        ('', GeocodeQuality.AREA),
        ('   ', GeocodeQuality.AREA),
        (None, GeocodeQuality.AREA),
    ])
    def test_rules(self, make_record, address, expected):
        record = make_record(address=address, latitude=68.1, longitude=13.5)
        assert classify_quality(record) == expected

    def test_missing_coordinates_give_none(self, make_record):
        assert classify_quality(make_record(address='Storgata 12')) is None

    def test_no_digit_rule_can_be_disabled(self, make_record):
        record = make_record(address='Valberg', latitude=68.1, longitude=13.5)
        assert classify_quality(record, area_without_digits=False) == GeocodeQuality.EXACT

    def test_changes_only_when_tag_differs(self, make_record):
        record = make_record(address='Valberg', latitude=68.1, longitude=13.5, geocode_quality='area')
        assert quality_changes(record) == {}
        record = make_record(address='Valberg', latitude=68.1, longitude=13.5, geocode_quality='exact')
        assert quality_changes(record) == {'geocode_quality': 'area'}

    def test_stale_tag_cleared_without_coordinates(self, make_record):
        record = make_record(address='Storgata 12', geocode_quality='exact')
        assert quality_changes(record) == {'geocode_quality': None}


class TestDuplicates:

    @pytest.fixture
    def records(self, make_record):
        return [
            make_record(7, 'Bakeriet AS', address='Storgata 12'),
            make_record(3, '  bakeriet   as', address='STORGATA 12'),
            make_record(5, 'Bakeriet AS', address='Storgata 12 '),
            make_record(4, 'Bakeriet AS', address='Havnegata 1'),
            make_record(9, 'Fjøset', address=''),
            make_record(8, 'Fjøset', address=None),
        ]

    def test_lowest_id_is_canonical(self, records):
        groups = find_duplicates(records)
        assert [g.canonical.id for g in groups] == [3, 8]
        assert groups[0].duplicate_ids == (5, 7)
        assert groups[1].duplicate_ids == (9,)

    def test_ids_to_delete(self, records):
        assert ids_to_delete(find_duplicates(records)) == [5, 7, 9]

    def test_invariant_under_permutation(self, records):
        expected = find_duplicates(records)
        for permutation in itertools.permutations(records):
            assert find_duplicates(list(permutation)) == expected

    def test_name_key_ignores_address(self, records):
        groups = find_duplicates(records, key=name_key)
        assert groups[0].canonical.id == 3
        assert groups[0].duplicate_ids == (4, 5, 7)

    def test_organizations_are_separate(self, make_record):
        records = [
            make_record(1, 'Bakeriet AS', address='Storgata 12', organization_id=5),
            make_record(2, 'Bakeriet AS', address='Storgata 12', organization_id=6),
        ]
        assert find_duplicates(records) == []

    def test_group_ids_by_key(self, make_record):
        records = [make_record(2, 'A', address='x'), make_record(1, 'a', address='X')]
        assert group_ids_by_key(records) == {(5, 'a|x'): (1, 2)}

    def test_duplicate_key(self, make_record):
        assert duplicate_key(make_record(name=' Kunde  AS', address='Vei 1')) == 'kunde as|vei 1'


class TestCoordinates:

    @pytest.mark.parametrize("lat,lng,expected", [
        (68.17, 13.57, True),
        (66.0, 10.0, True),
        (72.0, 32.0, True),
        (59.9, 10.7, False),
        (68.17, 9.99, False),
        (72.01, 20.0, False),
    ])
    def test_is_plausible(self, lat, lng, expected):
        assert is_plausible(lat, lng) is expected

    def test_find_implausible_skips_missing(self, sample_records):
        flagged = find_implausible(sample_records, NORTHERN_NORWAY)
        assert [r.id for r in flagged] == [2]

    def test_place_table_match_is_case_insensitive(self, make_record):
        corrected = lookup_place_correction(make_record(city='  valberg '))
        assert corrected == Coordinate(68.1716, 13.5713, source='place-table')

    def test_place_table_wins_over_geocoder(self, make_record, mock_geocoder):
        record = make_record(city='Valberg', latitude=59.2, longitude=10.1)
        geocode = lambda r: mock_geocoder.geocode(r.address, r.postal_code, r.city)
        corrected = resolve_correction(record, geocode)
        assert (corrected.lat, corrected.lng) == (68.1716, 13.5713)
        mock_geocoder.geocode.assert_not_called()

    def test_geocoder_used_when_place_unknown(self, make_record, mock_geocoder):
        record = make_record(address='Storgata 1', city='Svolvær', latitude=59.2, longitude=10.1)
        geocode = lambda r: mock_geocoder.geocode(r.address, r.postal_code, r.city)
        corrected = resolve_correction(record, geocode)
        assert corrected == Coordinate(68.15, 13.6, source='kartverket')

    def test_no_geocoder_no_correction(self, make_record):
        assert resolve_correction(make_record(city='Oslo')) is None

    def test_postal_table(self, make_record):
        corrected = lookup_postal_correction(make_record(postal_code='9392'))
        assert corrected.source == 'postal-table'
        assert is_plausible(corrected.lat, corrected.lng)
        assert lookup_postal_correction(make_record(postal_code='0150')) is None


class TestDates:

    @pytest.mark.parametrize("start,months,expected", [
        (date(2024, 1, 15), 12, date(2025, 1, 15)),
        (date(2023, 3, 1), 36, date(2026, 3, 1)),
        (date(2023, 1, 31), 1, date(2023, 3, 3)),
        (date(2024, 1, 31), 1, date(2024, 3, 2)),
        (date(2024, 11, 30), 3, date(2025, 3, 2)),
    ])
    def test_add_months_rolls_over(self, start, months, expected):
        assert add_months(start, months) == expected

    def test_project_keeps_string_type(self):
        assert project_next_date('2024-01-15', 12) == '2025-01-15'
        assert project_next_date(date(2024, 1, 15), 12) == date(2025, 1, 15)

    def test_backfill_fire_default_interval(self, make_record):
        record = make_record(category='Brannvarsling', last_fire_inspection=date(2024, 1, 15))
        assert backfill_next_dates(record) == {'next_fire_inspection': date(2025, 1, 15)}

    def test_backfill_electrical_default_interval(self, make_record):
        record = make_record(category='El-Kontroll', last_electrical_inspection=date(2023, 3, 1))
        assert backfill_next_dates(record) == {'next_electrical_inspection': date(2026, 3, 1)}

    def test_backfill_uses_record_interval(self, make_record):
        record = make_record(
            category='Brannvarsling',
            last_fire_inspection=date(2024, 1, 15),
            fire_interval_months=6,
        )
        assert backfill_next_dates(record) == {'next_fire_inspection': date(2024, 7, 15)}

    def test_backfill_never_overwrites(self, make_record):
        record = make_record(
            category='Brannvarsling',
            last_fire_inspection=date(2024, 1, 15),
            next_fire_inspection=date(2024, 6, 1),
        )
        assert backfill_next_dates(record) == {}

    def test_backfill_requires_category(self, make_record):
        record = make_record(category='El-Kontroll', last_fire_inspection=date(2024, 1, 15))
        assert backfill_next_dates(record) == {}

    @pytest.mark.parametrize("text,expected", [
        ('2024', 2024), ('2025 (utført)', 2025), ('x', None), ('X', None), ('', None), (None, None),
    ])
    def test_parse_year(self, text, expected):
        assert parse_year(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ('mai', 5), ('Sept', 9), ('09.sep', 9), ('9-Sep', 9), ('okt', 10), ('', None), ('??', None),
    ])
    def test_parse_month(self, text, expected):
        assert parse_month(text) == expected

    def test_parse_reference_date(self):
        assert parse_reference_date('2024', 'mai') == date(2024, 5, 1)
        assert parse_reference_date('2024', '', default_month=2) == date(2024, 2, 1)
        assert parse_reference_date('2024', '') is None
        assert parse_reference_date('x', 'mai') is None

    @pytest.mark.parametrize("text,expected", [
        ('1', 12), ('3', 36), ('5 år', 60), ('0', None), ('12', None), ('', None),
    ])
    def test_parse_interval(self, text, expected):
        assert parse_interval(text) == expected


class TestDiff:

    def test_noop_changes_are_dropped(self, make_record):
        record = make_record(category='El-Kontroll', city='Svolvær')
        diff = diff_record(record, {'category': 'El-Kontroll', 'city': 'Kabelvåg'})
        assert diff.changes == {'city': 'Kabelvåg'}
        assert diff.before == {'city': 'Svolvær'}
        assert diff.describe() == ['city: Svolvær -> Kabelvåg']

    def test_empty_diff(self, make_record):
        assert diff_record(make_record(), {}).is_empty
