import json

import pytest

from skyward.cli.main import main


@pytest.fixture
def empty_config(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("", encoding="utf-8")
    return str(path)


@pytest.fixture
def site_config(tmp_path):
    path = tmp_path / "site.toml"
    path.write_text(
        "[site]\nlatitude_deg = 40.7\nlongitude_deg = -74.0\n\n[providers]\nenabled = false\n",
        encoding="utf-8",
    )
    return str(path)


def _json_output(capsys) -> dict:
    return json.loads(capsys.readouterr().out)


def test_version(capsys):
    assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "Skyward 0.1.0"


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: skyward" in capsys.readouterr().out


def test_moon_new_moon_reference(capsys):
    assert main(["moon", "--at", "2000-01-06T18:14:24Z", "--json"]) == 0
    payload = _json_output(capsys)
    assert payload["ok"] is True
    assert payload["command"] == "moon"
    assert payload["data"]["illumination_percent"] == 0


def test_moon_full_text(capsys):
    assert main(["moon", "--at", "2000-01-21T12:36:00Z"]) == 0
    assert capsys.readouterr().out.strip() == "Moon illumination: 100%"


def test_moon_bad_timestamp(capsys):
    assert main(["moon", "--at", "tomorrow", "--json"]) == 2
    assert _json_output(capsys)["error"]["code"] == "invalid_input"


def test_riseset_json(capsys, empty_config):
    code = main(
        [
            "riseset",
            "--config", empty_config,
            "--lat", "40.7",
            "--lon", "-74.0",
            "--ra", "15.11",
            "--dec", "18.0",
            "--at", "2026-01-16T03:00:00Z",
            "--json",
        ]
    )
    assert code == 0
    data = _json_output(capsys)["data"]
    assert data["date"] == "2026-01-15"
    assert data["circumpolar"] is None
    assert data["transit_time"].startswith("2026-01-15T07:")
    assert data["transit_time"].endswith("-05:00")
    assert data["rise_time"] < data["transit_time"] < data["set_time"]
    assert data["best_viewing_start"] is not None


def test_riseset_circumpolar_text(capsys, empty_config):
    code = main(
        [
            "riseset",
            "--config", empty_config,
            "--lat", "40.7",
            "--lon", "-74.0",
            "--ra", "2.53",
            "--dec", "89.3",
            "--at", "2026-01-16T03:00:00Z",
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Circumpolar: never sets" in out
    assert "Rise    : -" in out
    assert "Transit : 12:00 PM" in out


def test_riseset_rejects_bad_ra(capsys, empty_config):
    code = main(
        ["riseset", "--config", empty_config, "--lat", "40.7", "--lon", "-74", "--ra", "24", "--dec", "0", "--json"]
    )
    assert code == 2
    payload = _json_output(capsys)
    assert payload["ok"] is False
    assert "Right ascension out of range" in payload["error"]["message"]


def test_riseset_requires_both_coordinates(capsys, empty_config):
    code = main(["riseset", "--config", empty_config, "--lat", "40.7", "--ra", "1", "--dec", "0"])
    assert code == 2
    assert "Both latitude and longitude" in capsys.readouterr().err


def test_sky_offline_json(capsys, empty_config):
    code = main(
        [
            "sky",
            "--config", empty_config,
            "--lat", "40.7",
            "--lon", "-74.0",
            "--at", "2026-01-16T03:00:00Z",
            "--body", "Jupiter",
            "--body", "polaris",
            "--offline",
            "--json",
        ]
    )
    assert code == 0
    payload = _json_output(capsys)
    assert payload["command"] == "sky"
    objects = payload["data"]["objects"]
    assert [obj["name"] for obj in objects] == ["Jupiter", "Polaris"]
    assert objects[1]["visibility"]["status"] == "visible"
    assert objects[0]["timing_source"] == "local"


def test_sky_text_from_config_site(capsys, site_config):
    code = main(["sky", "--config", site_config, "--at", "2026-01-16T03:00:00Z", "--body", "Moon"])
    assert code == 0
    out = capsys.readouterr().out
    assert out.startswith("Skyward")
    assert "Moon" in out


def test_sky_unknown_body(capsys, empty_config):
    code = main(
        ["sky", "--config", empty_config, "--lat", "40.7", "--lon", "-74", "--body", "Pluto", "--offline", "--json"]
    )
    assert code == 2
    assert _json_output(capsys)["error"]["message"] == "Unknown body: Pluto"


def test_sky_missing_site(capsys, empty_config):
    assert main(["sky", "--config", empty_config, "--offline"]) == 2
    assert "Observer location is required" in capsys.readouterr().err


def test_sky_missing_position_table(capsys, tmp_path):
    config = tmp_path / "config.toml"
    config.write_text(f'[positions]\ntable_path = "{(tmp_path / "missing.csv").as_posix()}"\n', encoding="utf-8")
    code = main(["sky", "--config", str(config), "--lat", "40.7", "--lon", "-74", "--offline", "--json"])
    assert code == 1
    assert _json_output(capsys)["error"]["code"] == "position_table"


def test_doctor_ready(capsys, site_config):
    assert main(["doctor", "--config", site_config, "--json"]) == 0
    payload = _json_output(capsys)
    checks = payload["data"]["checks"]
    assert payload["ok"] is True
    assert checks["site"]["detail"] == "lat 40.700, lon -74.000, UTC offset -5h"
    assert checks["position_table"]["detail"] == "3 ranges, 2026-01-01 to 2026-03-31"
    assert checks["timing_providers"]["detail"] == "disabled (local calculation only)"


def test_doctor_without_site(capsys, empty_config):
    assert main(["doctor", "--config", empty_config]) == 1
    out = capsys.readouterr().out
    assert "Skyward Doctor Report" in out
    assert "site                 : MISSING" in out
    assert "timing_providers     : OK (usno, horizons, opale)" in out
