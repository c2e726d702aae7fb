import pytest

from stormrank.aggregate import aggregate, rank_metric
from stormrank.dsa import grouped_sums, merge_sort
from stormrank.models import WorkingRecord


def _working(event_type, fatalities=0, injuries=0, prop=0.0, crop=0.0):
    return WorkingRecord(record_id=0, begin_date="1/1/2000", event_type=event_type,
                         fatalities=float(fatalities), injuries=float(injuries),
                         property_damage_magnitude=0.0, property_damage_exponent_code="",
                         crop_damage_magnitude=0.0, crop_damage_exponent_code="", year=2000,
                         property_damage_total=prop, crop_damage_total=crop)


def test_fatalities_ranking():
    records = [_working("Tornado", 5), _working("Tornado", 0), _working("Hail", 3)]
    table = rank_metric(records, "fatalities")
    assert table.rows == [("Tornado", 5), ("Hail", 3)]
    assert table.rows.index(("Tornado", 5)) < table.rows.index(("Hail", 3))
    assert table.excluded == 0


def test_counts_are_integers_and_damage_is_float():
    summary = aggregate([_working("Hail", 1, 2, 1500.0, 20.0)])
    assert summary.fatalities.rows == [("Hail", 1)]
    assert isinstance(summary.injuries.rows[0][1], int)
    assert isinstance(summary.property_damage.rows[0][1], float)
    assert summary.crop_damage.rows == [("Hail", 20.0)]


def test_ties_keep_first_seen_order():
    records = [_working("Wind", 2), _working("Hail", 7), _working("Lightning", 2), _working("Flooding", 2)]
    table = rank_metric(records, "fatalities")
    assert table.rows == [("Hail", 7), ("Wind", 2), ("Lightning", 2), ("Flooding", 2)]


def test_invalid_damage_is_excluded_from_that_metric_only():
    records = [_working("Flooding", 1, prop=None, crop=300.0), _working("Flooding", 2, prop=100.0, crop=0.0)]
    summary = aggregate(records)
    assert summary.property_damage.rows == [("Flooding", 100.0)]
    assert summary.property_damage.excluded == 1
    assert summary.crop_damage.rows == [("Flooding", 300.0)]
    assert summary.crop_damage.excluded == 0
    assert summary.fatalities.rows == [("Flooding", 3)]


def test_empty_input_gives_empty_tables():
    summary = aggregate([])
    assert summary.is_empty()
    for table in summary.tables():
        assert table.rows == []
        assert table.top(10) == []


def test_unknown_metric():
    with pytest.raises(ValueError):
        rank_metric([], "deaths")
    with pytest.raises(KeyError):
        aggregate([]).get("deaths")


def test_top_n_and_total():
    records = [_working(f"T{i}", i) for i in range(15)]
    table = rank_metric(records, "fatalities")
    assert [k for k, _ in table.top(3)] == ["T14", "T13", "T12"]
    assert table.total() == sum(range(15))
    assert len(table) == 15


def test_merge_sort_is_stable_descending():
    items = [("a", 1), ("b", 2), ("c", 1), ("d", 2)]
    assert merge_sort(items, key=lambda kv: kv[1], reverse=True) == [("b", 2), ("d", 2), ("a", 1), ("c", 1)]
    assert merge_sort(items, key=lambda kv: kv[1]) == [("a", 1), ("c", 1), ("b", 2), ("d", 2)]


def test_grouped_sums_skips_none():
    sums, skipped = grouped_sums([("x", 1.0), ("y", None), ("x", 2.0), ("y", 4.0)])
    assert sums == {"x": 3.0, "y": 4.0}
    assert list(sums) == ["x", "y"]
    assert skipped == 1
