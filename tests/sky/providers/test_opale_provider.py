import datetime
import json
from unittest.mock import MagicMock, patch

import pytest

from skyward.errors import ProviderError
from skyward.sky.providers.opale import OpaleTimingProvider

DATE = datetime.date(2026, 1, 15)
UTC = datetime.timezone.utc


def _response(payload):
    resp = MagicMock()
    resp.read.return_value = json.dumps(payload).encode("utf-8")
    resp.__enter__.return_value = resp
    return resp


def test_build_url(new_york):
    url = OpaleTimingProvider().build_url("saturn", new_york, DATE)
    assert url.startswith("https://opale.imcce.fr/webservices/rise/?")
    assert "body=saturn" in url
    assert "lat=40.7" in url
    assert "lon=-74.0" in url


def test_parses_results_list(new_york):
    payload = {
        "results": [
            {
                "rise": "2026-01-15T12:41:00Z",
                "transit": "2026-01-15T19:48:00Z",
                "set": "2026-01-16T02:55:00Z",
            }
        ]
    }
    with patch("skyward.sky.providers.base.urlopen", return_value=_response(payload)):
        record = OpaleTimingProvider().resolve("Saturn", new_york, DATE)
    assert record.source == "opale"
    assert record.rise_time == datetime.datetime(2026, 1, 15, 12, 41, tzinfo=UTC)
    assert record.set_time == datetime.datetime(2026, 1, 16, 2, 55, tzinfo=UTC)
    assert record.set_time.utcoffset() == datetime.timedelta(hours=-5)


def test_parses_top_level_keys(new_york):
    payload = {"riseTime": "2026-01-15T12:41:00", "setTime": "not a time"}
    with patch("skyward.sky.providers.base.urlopen", return_value=_response(payload)):
        record = OpaleTimingProvider().resolve("Saturn", new_york, DATE)
    assert record.rise_time == datetime.datetime(2026, 1, 15, 12, 41, tzinfo=UTC)
    assert record.set_time is None
    assert record.transit_time is None


def test_error_payload(new_york):
    with patch("skyward.sky.providers.base.urlopen", return_value=_response({"error": "unknown body"})):
        with pytest.raises(ProviderError, match="unknown body"):
            OpaleTimingProvider().resolve("Saturn", new_york, DATE)


def test_unexpected_shape(new_york):
    with patch("skyward.sky.providers.base.urlopen", return_value=_response(["rise"])):
        with pytest.raises(ProviderError, match="unexpected response shape"):
            OpaleTimingProvider().resolve("Saturn", new_york, DATE)


def test_events_outside_local_day_are_dropped(new_york):
    # 00:19 UTC on the 15th is still the 14th in New York.
    payload = {"transit": "2026-01-15T00:19:00Z", "rise": "2026-01-15T13:05:00Z"}
    with patch("skyward.sky.providers.base.urlopen", return_value=_response(payload)):
        record = OpaleTimingProvider().resolve("Saturn", new_york, DATE)
    assert record.transit_time is None
    assert record.rise_time == datetime.datetime(2026, 1, 15, 13, 5, tzinfo=UTC)
