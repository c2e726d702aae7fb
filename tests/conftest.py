import pytest

from stormrank.models import StormRecord


def _record(record_id=0, begin_date="6/1/1999 0:00:00", event_type="TORNADO",
            fatalities=0, injuries=0, propdmg=0, propdmgexp="", cropdmg=0, cropdmgexp=""):
    return StormRecord(
        record_id=record_id,
        begin_date=begin_date,
        event_type=event_type,
        fatalities=float(fatalities),
        injuries=float(injuries),
        property_damage_magnitude=float(propdmg),
        property_damage_exponent_code=propdmgexp,
        crop_damage_magnitude=float(cropdmg),
        crop_damage_exponent_code=cropdmgexp,
    )


@pytest.fixture
def make_record():
    return _record


@pytest.fixture
def sample_records():
    return [
        _record(0, "6/1/1999 0:00:00", "TSTM WIND", fatalities=1, propdmg=10, propdmgexp="K"),
        _record(1, "5/3/1999 0:00:00", "TORNADO", fatalities=5, injuries=20, propdmg=2.5, propdmgexp="M"),
        _record(2, "4/18/1950 0:00:00", "TORNADO", fatalities=3, propdmg=25, propdmgexp="K"),
        _record(3, "8/29/2005 0:00:00", "HURRICANE/TYPHOON", fatalities=15, propdmg=31.3, propdmgexp="B",
                cropdmg=4, cropdmgexp="B"),
        _record(4, "7/4/2000 0:00:00", "?", injuries=1),
        _record(5, "1/1/2001 0:00:00", "FLASH FLOOD", propdmg=1, propdmgexp="x", cropdmg=5, cropdmgexp="k"),
        _record(6, "2/2/2002 0:00:00", "HAIL"),
        _record(7, "not a date", "HAIL", injuries=2),
    ]
