import datetime
import json

import pytest

from skyward.config import Config
from skyward.sky import SkyEngine, format_json, format_text
from skyward.sky.positions import PositionTable
from skyward.sky.providers.base import TimingProvider
from skyward.sky.types import ObserverContext, TimingRecord

# 22:00 local in New York on 2026-01-15.
EVENING = datetime.datetime(2026, 1, 16, 3, 0, tzinfo=datetime.timezone.utc)


class TransitOnlyProvider(TimingProvider):
    name = "fake"
    body_ids = {"Jupiter": "599"}
    remote = False

    def __init__(self, transit):
        self.transit = transit
        self.calls = []

    def resolve(self, body_name, observer, date):
        self.calls.append((body_name, date))
        return TimingRecord(transit_time=self.transit, source=self.name)


def _by_name(report):
    return {obj.name: obj for obj in report.objects}


def test_offline_report(new_york):
    report = SkyEngine(Config({})).observe(observer=new_york, when=EVENING, offline=True)
    objects = _by_name(report)

    assert report.notes == []
    assert 0 <= report.moon_illumination <= 100
    assert 0 <= report.local_sidereal_time_hours < 24
    assert list(objects)[:5] == ["Mercury", "Venus", "Mars", "Jupiter", "Saturn"]

    polaris = objects["Polaris"]
    assert polaris.circumpolar == "always_up"
    assert polaris.rise_time is None and polaris.set_time is None
    assert polaris.transit_time is not None
    assert polaris.altitude_deg > 0
    assert polaris.visibility.status == "visible"

    jupiter = objects["Jupiter"]
    assert jupiter.timing_source == "local"
    assert jupiter.rise_time < jupiter.transit_time < jupiter.set_time
    assert jupiter.altitude_deg < 0

    moon = objects["Moon"]
    assert moon.moon_illumination == report.moon_illumination

    perseids = objects["Perseids"]
    assert perseids.peak_date == "August 12-13"
    assert perseids.is_active is False
    assert perseids.rise_time is None
    assert perseids.timing_source is None

    assert objects["Whirlpool Galaxy"].requires_telescope is True
    assert objects["Sirius"].requires_telescope is None
    for obj in report.objects:
        assert obj.direction in {"N", "NE", "E", "SE", "S", "SW", "W", "NW"}


def test_external_fields_win_and_local_fills_gaps(new_york):
    transit = datetime.datetime(2026, 1, 15, 7, 30, tzinfo=new_york.tzinfo)
    provider = TransitOnlyProvider(transit)
    engine = SkyEngine(Config({"providers": {"stagger_s": 0}}), providers=[provider])

    report = engine.observe(observer=new_york, when=EVENING, bodies=["Jupiter", "Moon"])
    objects = _by_name(report)

    assert provider.calls == [("Jupiter", datetime.date(2026, 1, 15))]
    jupiter = objects["Jupiter"]
    assert jupiter.transit_time == transit
    assert jupiter.rise_time is not None
    assert jupiter.set_time is not None
    assert jupiter.timing_source == "fake"
    assert objects["Moon"].timing_source == "local"


def test_offline_skips_network_providers(new_york):
    provider = TransitOnlyProvider(None)
    engine = SkyEngine(Config({}), providers=[provider])
    engine.observe(observer=new_york, when=EVENING, bodies=["Jupiter"], offline=True)
    assert provider.calls == []


def test_body_filter_is_case_insensitive(new_york):
    report = SkyEngine(Config({})).observe(
        observer=new_york, when=EVENING, bodies=["jupiter", " MOON "], offline=True
    )
    assert [obj.name for obj in report.objects] == ["Jupiter", "Moon"]


def test_unknown_body(new_york):
    with pytest.raises(ValueError, match="Unknown body: Pluto"):
        SkyEngine(Config({})).observe(observer=new_york, when=EVENING, bodies=["Pluto"], offline=True)


def test_outside_table_range_note(new_york):
    later = datetime.datetime(2027, 6, 1, 3, 0, tzinfo=datetime.timezone.utc)
    report = SkyEngine(Config({})).observe(observer=new_york, when=later, bodies=["Jupiter"], offline=True)
    assert len(report.notes) == 1
    assert "outside the table range 2026-01-01 to 2026-03-31" in report.notes[0]


def test_empty_table_uses_defaults(new_york):
    engine = SkyEngine(Config({}), position_table=PositionTable([]))
    report = engine.observe(observer=new_york, when=EVENING, offline=True)
    names = [obj.name for obj in report.objects]
    assert "Mercury" not in names
    assert names[:4] == ["Venus", "Mars", "Jupiter", "Saturn"]
    assert report.notes == ["Position table is empty; planets use catalog defaults."]


def test_never_up_body_has_no_window():
    svalbard = ObserverContext(latitude_deg=80.0, longitude_deg=15.0)
    report = SkyEngine(Config({})).observe(observer=svalbard, when=EVENING, bodies=["Sirius"], offline=True)
    sirius = report.objects[0]
    assert sirius.circumpolar == "never_up"
    assert sirius.best_viewing_start is None
    assert sirius.altitude_deg < 0
    assert report.message == "No catalog objects are above the horizon right now."


def test_site_from_config():
    config = Config({"site": {"latitude_deg": 40.7, "longitude_deg": -74.0}})
    report = SkyEngine(config).observe(when=EVENING, bodies=["Moon"], offline=True)
    assert report.observer.timezone_offset_hours == -5


def test_missing_site_is_rejected():
    with pytest.raises(ValueError, match="Observer location is required"):
        SkyEngine(Config({})).observe(when=EVENING, offline=True)


def test_text_and_json_output(new_york):
    report = SkyEngine(Config({})).observe(
        observer=new_york, when=EVENING, bodies=["Jupiter", "Moon", "Perseids"], offline=True
    )

    text = format_text(report, verbose=True)
    assert text.splitlines()[0] == "Skyward"
    assert "(UTC-5)" in text
    assert "Time (local): 2026-01-15 10:00 PM" in text
    assert f"Moon illumination: {report.moon_illumination}%" in text
    assert "source local" in text
    assert "peak August 12-13, 100+/h, inactive" in text
    assert "source local" not in format_text(report)

    payload = json.loads(format_json(report))
    assert [obj["name"] for obj in payload["objects"]] == ["Jupiter", "Moon", "Perseids"]
    assert payload["observer"]["latitude_deg"] == 40.7
