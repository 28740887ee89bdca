import datetime
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from skyward.config import load_config
from skyward.errors import PositionTableError
from skyward.sky import (
    ObserverContext,
    SkyEngine,
    calculate_rise_set,
    calculate_viewing_window,
    format_text,
    load_position_table,
    moon_illumination_percent,
)
from skyward.sky.astro import circumpolar_kind
from skyward.sky.providers import get_timing_providers
from skyward.util.format import format_clock_time


def _json_envelope(command: str, ok: bool, data=None, error=None) -> dict:
    return {
        "ok": ok,
        "command": command,
        "timestamp_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "data": data,
        "error": error,
    }


def _init_logging(level: str | None) -> None:
    if not level:
        return
    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }
    logging.basicConfig(level=level_map.get(level, logging.INFO))


def _print_error(command: str, args, code: str, message: str) -> None:
    if getattr(args, "json", False):
        payload = _json_envelope(
            command=command,
            ok=False,
            data=None,
            error={"code": code, "message": message, "details": None},
        )
        print(json.dumps(payload, indent=2))
    else:
        print(message, file=sys.stderr)


def _config_path_from_args(args) -> Path | None:
    if args is None:
        return None
    path = getattr(args, "config", None)
    return Path(path) if path else None


def _parse_datetime_arg(value: str | None) -> datetime.datetime | None:
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _parse_observer_args(args, config) -> ObserverContext:
    lat = getattr(args, "latitude_deg", None)
    lon = getattr(args, "longitude_deg", None)
    tz = getattr(args, "timezone_offset_hours", None)
    if lat is None and lon is None:
        lat = config.site_latitude_deg
        lon = config.site_longitude_deg
        if tz is None:
            tz = config.site_timezone_offset_hours
    elif lat is None or lon is None:
        raise ValueError("Both latitude and longitude are required when specifying location")
    return ObserverContext(latitude_deg=lat, longitude_deg=lon, timezone_offset_hours=tz)


def _iso(dt: datetime.datetime | None) -> str | None:
    return dt.isoformat(timespec="minutes") if dt is not None else None


def run_doctor(args=None) -> int:
    _init_logging(getattr(args, "log_level", None))

    def check_config():
        try:
            load_config(_config_path_from_args(args))
            return {"ok": True, "detail": "loaded (defaults applied if missing)"}
        except Exception as e:
            return {"ok": False, "detail": f"invalid config: {e}"}

    config_check = check_config()
    config = load_config(_config_path_from_args(args)) if config_check["ok"] else None

    def check_site():
        if config is None:
            return {"ok": False, "detail": "config not loaded"}
        try:
            observer = _parse_observer_args(None, config)
        except ValueError as e:
            return {"ok": False, "detail": str(e)}
        return {
            "ok": True,
            "detail": (
                f"lat {observer.latitude_deg:.3f}, lon {observer.longitude_deg:.3f}, "
                f"UTC offset {observer.timezone_offset_hours:+g}h"
            ),
        }

    def check_positions():
        path = config.position_table_path if config is not None else None
        try:
            table = load_position_table(path)
        except (FileNotFoundError, PositionTableError) as e:
            return {"ok": False, "detail": str(e)}
        coverage = table.coverage()
        if coverage is None:
            return {"ok": False, "detail": "no ranges"}
        start, end = coverage
        return {
            "ok": True,
            "detail": f"{len(table.ranges)} ranges, {start.isoformat()} to {end.isoformat()}",
        }

    def check_providers():
        if config is None:
            return {"ok": False, "detail": "config not loaded"}
        try:
            providers = get_timing_providers(config)
        except ValueError as e:
            return {"ok": False, "detail": str(e)}
        if not providers:
            return {"ok": True, "detail": "disabled (local calculation only)"}
        return {"ok": True, "detail": ", ".join(p.name for p in providers)}

    checks = {
        "config": config_check,
        "site": check_site(),
        "position_table": check_positions(),
        "timing_providers": check_providers(),
    }

    ok = all(c["ok"] for c in checks.values())

    if args is not None and getattr(args, "json", False):
        payload = _json_envelope(
            command="doctor",
            ok=ok,
            data={"checks": checks},
            error=None
            if ok
            else {
                "code": "doctor_failed",
                "message": "one or more checks failed",
                "details": None,
            },
        )
        print(json.dumps(payload, indent=2))
    else:
        print("Skyward Doctor Report")
        print("=====================")

        for name, result in checks.items():
            status = "OK" if result["ok"] else "MISSING"
            print(f"{name:20} : {status} ({result['detail']})")

        if ok:
            print("\nReady.")
        else:
            print("\nSome components are missing or not configured.")

    return 0 if ok else 1


def run_sky(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    config = load_config(_config_path_from_args(args))
    engine = SkyEngine(config)

    try:
        observer = _parse_observer_args(args, config)
        when = _parse_datetime_arg(getattr(args, "at", None))
        report = engine.observe(
            observer=observer,
            when=when,
            bodies=getattr(args, "bodies", None),
            offline=getattr(args, "offline", False),
        )
    except ValueError as e:
        _print_error("sky", args, "invalid_input", str(e))
        return 2
    except (FileNotFoundError, PositionTableError) as e:
        _print_error("sky", args, "position_table", str(e))
        return 1

    if getattr(args, "json", False):
        payload = _json_envelope(command="sky", ok=True, data=asdict(report), error=None)
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(format_text(report, verbose=getattr(args, "verbose", False)))
    return 0


def run_riseset(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    config = load_config(_config_path_from_args(args))

    try:
        observer = _parse_observer_args(args, config)
        if not 0.0 <= args.ra_hours < 24.0:
            raise ValueError(f"Right ascension out of range: {args.ra_hours}")
        if not -90.0 <= args.dec_deg <= 90.0:
            raise ValueError(f"Declination out of range: {args.dec_deg}")
        when = _parse_datetime_arg(getattr(args, "at", None)) or datetime.datetime.now(
            datetime.timezone.utc
        )
    except ValueError as e:
        _print_error("riseset", args, "invalid_input", str(e))
        return 2

    record = calculate_rise_set(args.ra_hours, args.dec_deg, observer, when)
    window = calculate_viewing_window(
        args.ra_hours,
        args.dec_deg,
        observer,
        when,
        transit_time=record.transit_time,
    )
    data = {
        "date": observer.local_date(when).isoformat(),
        "ra_hours": args.ra_hours,
        "dec_deg": args.dec_deg,
        "circumpolar": circumpolar_kind(args.dec_deg, observer.latitude_deg),
        "rise_time": _iso(record.rise_time),
        "transit_time": _iso(record.transit_time),
        "set_time": _iso(record.set_time),
        "best_viewing_start": _iso(window.start_time) if window else None,
        "best_viewing_end": _iso(window.end_time) if window else None,
    }

    if getattr(args, "json", False):
        payload = _json_envelope(command="riseset", ok=True, data=data, error=None)
        print(json.dumps(payload, indent=2))
        return 0

    tz = observer.tzinfo
    print(f"Date: {data['date']}")
    if data["circumpolar"] == "always_up":
        print("Circumpolar: never sets")
    elif data["circumpolar"] == "never_up":
        print("Circumpolar: never rises")
    for label, value in (
        ("Rise", record.rise_time),
        ("Transit", record.transit_time),
        ("Set", record.set_time),
    ):
        print(f"{label:8}: {format_clock_time(value, tz) if value else '-'}")
    if window is not None:
        print(
            f"Best    : {format_clock_time(window.start_time, tz)}"
            f" - {format_clock_time(window.end_time, tz)}"
        )
    else:
        print("Best    : -")
    return 0


def run_moon(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        when = _parse_datetime_arg(getattr(args, "at", None)) or datetime.datetime.now(
            datetime.timezone.utc
        )
    except ValueError as e:
        _print_error("moon", args, "invalid_input", str(e))
        return 2

    illumination = moon_illumination_percent(when)
    if getattr(args, "json", False):
        payload = _json_envelope(
            command="moon",
            ok=True,
            data={"timestamp_utc": when.isoformat(), "illumination_percent": illumination},
            error=None,
        )
        print(json.dumps(payload, indent=2))
    else:
        print(f"Moon illumination: {illumination}%")
    return 0
