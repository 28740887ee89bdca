import datetime

import pytest

from skyward.sky.types import ObserverContext, TimingRecord, timezone_offset_from_longitude


@pytest.mark.parametrize(
    "longitude, expected",
    [(-74.0, -5), (0.0, 0), (138.6, 9), (-7.5, 0), (7.5, 1), (180.0, 12), (-180.0, -12)],
)
def test_timezone_offset_from_longitude(longitude, expected):
    assert timezone_offset_from_longitude(longitude) == expected


def test_observer_derives_offset():
    observer = ObserverContext(latitude_deg=40.7, longitude_deg=-74.0)
    assert observer.timezone_offset_hours == -5
    assert observer.tzinfo.utcoffset(None) == datetime.timedelta(hours=-5)


def test_observer_keeps_explicit_offset():
    observer = ObserverContext(latitude_deg=40.7, longitude_deg=-74.0, timezone_offset_hours=-4)
    assert observer.timezone_offset_hours == -4


@pytest.mark.parametrize(
    "lat, lon",
    [(91.0, 0.0), (-90.5, 0.0), (0.0, 181.0), (0.0, -180.1), (None, 0.0), (0.0, None)],
)
def test_observer_rejects_bad_location(lat, lon):
    with pytest.raises(ValueError):
        ObserverContext(latitude_deg=lat, longitude_deg=lon)


def test_observer_is_immutable():
    observer = ObserverContext(latitude_deg=40.7, longitude_deg=-74.0)
    with pytest.raises(AttributeError):
        observer.latitude_deg = 10.0


def test_local_date_for_naive_and_aware():
    observer = ObserverContext(latitude_deg=40.7, longitude_deg=-74.0)
    naive_utc = datetime.datetime(2026, 1, 16, 3, 0)
    assert observer.local_date(naive_utc) == datetime.date(2026, 1, 15)
    assert observer.local_date(datetime.date(2026, 1, 16)) == datetime.date(2026, 1, 16)


def test_timing_record_states():
    now = datetime.datetime(2026, 1, 15, tzinfo=datetime.timezone.utc)
    assert TimingRecord().is_empty()
    partial = TimingRecord(rise_time=now)
    assert not partial.is_empty()
    assert not partial.is_complete()
    assert TimingRecord(rise_time=now, set_time=now, transit_time=now).is_complete()
