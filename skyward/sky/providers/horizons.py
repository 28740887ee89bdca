import datetime
import json
import re

from skyward.errors import ProviderError
from skyward.sky.types import ObserverContext, TimingRecord
from .base import (
    HttpTimingProvider,
    RISE_KEYS,
    SET_KEYS,
    TRANSIT_KEYS,
    local_day_bounds,
    on_local_day,
)
from .timeparse import extract_time_token, first_value, parse_iso_instant, parse_utc_token

HORIZONS_BASE_URL = "https://ssd.jpl.nasa.gov/api/horizons.api"

HORIZONS_BODY_IDS = {
    "Sun": "10",
    "Moon": "301",
    "Mercury": "199",
    "Venus": "299",
    "Mars": "499",
    "Jupiter": "599",
    "Saturn": "699",
    "Uranus": "799",
    "Neptune": "899",
}

_TABLE_ROW = re.compile(r"^\s*(\d{4}-[A-Za-z]{3}-\d{2})\s+(\d{2}:\d{2})\s+(.*)$")
_LABELS = (
    ("rise", re.compile(r"\b(rise|rising)\b", re.IGNORECASE)),
    ("transit", re.compile(r"\b(transit|culmination)\b", re.IGNORECASE)),
    ("set", re.compile(r"\b(set|setting)\b", re.IGNORECASE)),
)
# Label lines may carry the time on one of the next lines.
_LOOKAHEAD_LINES = 2


class HorizonsTimingProvider(HttpTimingProvider):
    """JPL Horizons observer ephemeris restricted to rise/transit/set rows.

    Horizons reports UTC. The query spans the observer's local day and results
    are converted to the observer's offset.
    """

    name = "horizons"
    base_url = HORIZONS_BASE_URL
    body_ids = HORIZONS_BODY_IDS
    accept = "application/json, text/plain"

    def build_params(self, body_id: str, observer: ObserverContext, date: datetime.date) -> dict:
        start, stop = local_day_bounds(observer, date)
        return {
            "format": "json",
            "COMMAND": f"'{body_id}'",
            "MAKE_EPHEM": "YES",
            "EPHEM_TYPE": "OBSERVER",
            "CENTER": "'coord@399'",
            "COORD_TYPE": "GEODETIC",
            "SITE_COORD": f"'{observer.longitude_deg},{observer.latitude_deg},0'",
            "START_TIME": f"'{start:%Y-%m-%d %H:%M}'",
            "STOP_TIME": f"'{stop:%Y-%m-%d %H:%M}'",
            "STEP_SIZE": "'1 m'",
            "QUANTITIES": "'4'",
            "R_T_S_ONLY": "'TVH'",
            "TIME_DIGITS": "MINUTES",
        }

    def parse(
        self,
        body: str,
        body_id: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        text = body
        structured: dict | None = None
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            if payload.get("error"):
                raise ProviderError(f"{self.name}: {payload['error']}")
            if isinstance(payload.get("result"), str):
                text = payload["result"]
            else:
                text = ""
                structured = payload
        elif payload is not None:
            raise ProviderError(f"{self.name}: unexpected response shape")

        events = _parse_rts_table(text, date, local_day_bounds(observer, date))
        for field, value in _parse_labelled_lines(text, date).items():
            events.setdefault(field, value)
        if structured is not None:
            for field, keys in (("rise", RISE_KEYS), ("set", SET_KEYS), ("transit", TRANSIT_KEYS)):
                if field not in events:
                    value = parse_iso_instant(first_value(structured, keys))
                    if value is not None:
                        events[field] = value

        return TimingRecord(
            rise_time=on_local_day(events.get("rise"), observer, date),
            set_time=on_local_day(events.get("set"), observer, date),
            transit_time=on_local_day(events.get("transit"), observer, date),
        )


def _parse_rts_table(
    text: str,
    date: datetime.date,
    window: tuple[datetime.datetime, datetime.datetime],
) -> dict[str, datetime.datetime]:
    start, stop = window
    events: dict[str, datetime.datetime] = {}
    in_table = False
    for line in text.splitlines():
        if line.startswith("$$SOE"):
            in_table = True
            continue
        if line.startswith("$$EOE"):
            break
        if not in_table:
            continue
        match = _TABLE_ROW.match(line)
        if not match:
            continue
        timestamp = parse_utc_token(f"{match.group(1)} {match.group(2)}", date)
        if timestamp is None or not start <= timestamp < stop:
            continue
        flags = "".join(
            token for token in match.group(3).split()[:2] if not any(c.isdigit() for c in token)
        )
        if "r" in flags:
            events.setdefault("rise", timestamp)
        if "t" in flags:
            events.setdefault("transit", timestamp)
        if "s" in flags:
            events.setdefault("set", timestamp)
    return events


def _parse_labelled_lines(text: str, date: datetime.date) -> dict[str, datetime.datetime]:
    events: dict[str, datetime.datetime] = {}
    lines = text.splitlines()
    for i, line in enumerate(lines):
        for field, pattern in _LABELS:
            if field in events or not pattern.search(line):
                continue
            for candidate in lines[i : i + 1 + _LOOKAHEAD_LINES]:
                token = extract_time_token(candidate)
                if token is None:
                    continue
                parsed = parse_utc_token(token, date)
                if parsed is not None:
                    events[field] = parsed
                    break
            break
    return events
