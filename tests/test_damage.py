import pytest

from stormrank.damage import INVALID, NAMED, NUMERIC, damage_total, decode_exponent, resolve_damages
from stormrank.models import WorkingRecord


@pytest.mark.parametrize("code,exponent", [
    ("m", 6), ("M", 6),
    ("k", 3), ("K", 3),
    ("b", 9), ("B", 9),
    ("h", 2), ("H", 2),
    ("?", 0), ("-", 0), ("+", 0), ("", 0),
])
def test_named_codes(code, exponent):
    decoded = decode_exponent(code)
    assert decoded.kind == NAMED
    assert decoded.exponent == exponent
    assert decoded.is_valid


@pytest.mark.parametrize("code,exponent", [("0", 0), ("3", 3), ("5", 5), ("8", 8), ("9", 9), ("12", 12)])
def test_digit_codes_are_the_exponent(code, exponent):
    decoded = decode_exponent(code)
    assert decoded.kind == NUMERIC
    assert decoded.exponent == exponent


@pytest.mark.parametrize("code", ["x", "1.5", "KM", "²"])
def test_invalid_codes(code):
    decoded = decode_exponent(code)
    assert decoded.kind == INVALID
    assert decoded.exponent is None
    assert not decoded.is_valid


def test_missing_code_means_no_multiplier():
    assert decode_exponent(None).exponent == 0
    assert decode_exponent(" K ").exponent == 3


@pytest.mark.parametrize("magnitude,code,expected", [
    (10, "K", 10_000.0),
    (2.5, "M", 2_500_000.0),
    (1, "B", 1_000_000_000.0),
    (4, "h", 400.0),
    (7, "?", 7.0),
    (3, "5", 300_000.0),
    (0, "M", 0.0),
])
def test_damage_total(magnitude, code, expected):
    assert damage_total(magnitude, code) == pytest.approx(expected)


def test_damage_total_invalid_code_is_none():
    assert damage_total(10, "x") is None


def _working(propdmg, propexp, cropdmg, cropexp):
    return WorkingRecord(record_id=0, begin_date="1/1/2000", event_type="Hail",
                         fatalities=0.0, injuries=0.0,
                         property_damage_magnitude=propdmg, property_damage_exponent_code=propexp,
                         crop_damage_magnitude=cropdmg, crop_damage_exponent_code=cropexp, year=2000)


def test_resolve_damages_fills_both_columns_independently():
    records = [_working(10, "K", 5, "M"), _working(1, "x", 2, "k"), _working(3, "", 1, "?")]
    stats = resolve_damages(records)

    assert records[0].property_damage_total == 10_000.0
    assert records[0].crop_damage_total == 5_000_000.0
    assert records[1].property_damage_total is None
    assert records[1].crop_damage_total == 2_000.0
    assert records[2].property_damage_total == 3.0
    assert records[2].crop_damage_total == 1.0

    assert stats.invalid_property == 1
    assert stats.invalid_crop == 0
    assert stats.invalid_codes == {"x": 1}
    assert stats.invalid_total == 1


def test_resolve_damages_logs_invalid_codes(caplog):
    with caplog.at_level("WARNING", logger="stormrank.damage"):
        resolve_damages([_working(1, "x", 0, "")])
    assert "Invalid damage exponent codes" in caplog.text


@pytest.mark.parametrize("magnitude,code", [(5, "400"), (0, "400"), (5, "308")])
def test_damage_total_overflow_is_none(magnitude, code):
    assert decode_exponent(code).kind == NUMERIC
    assert damage_total(magnitude, code) is None


def test_resolve_damages_counts_overflowing_codes():
    records = [_working(5, "400", 2, "K")]
    stats = resolve_damages(records)

    assert records[0].property_damage_total is None
    assert records[0].crop_damage_total == 2_000.0
    assert stats.invalid_property == 1
    assert stats.invalid_crop == 0
    assert stats.invalid_codes == {"400": 1}
