import datetime

from skyward.errors import ProviderError
from skyward.sky.types import ObserverContext, TimingRecord
from .base import HttpTimingProvider, RISE_KEYS, SET_KEYS, TRANSIT_KEYS, load_json
from .timeparse import first_value, parse_clock_time

USNO_BASE_URL = "https://aa.usno.navy.mil/api/rstt/oneday"

USNO_BODY_IDS = {
    "Sun": "sun",
    "Moon": "moon",
    "Mercury": "mercury",
    "Venus": "venus",
    "Mars": "mars",
    "Jupiter": "jupiter",
    "Saturn": "saturn",
    "Uranus": "uranus",
    "Neptune": "neptune",
}

_PHENOMENA = {
    "rise": "rise",
    "set": "set",
    "upper transit": "transit",
    "transit": "transit",
}


class UsnoTimingProvider(HttpTimingProvider):
    """USNO one-day rise/transit/set service.

    Times come back as local wall-clock tokens for the ``tz`` offset sent in
    the request, either ``6:27 A.M. NW`` style or 24-hour ``18:05``.
    """

    name = "usno"
    base_url = USNO_BASE_URL
    body_ids = USNO_BODY_IDS

    def build_params(self, body_id: str, observer: ObserverContext, date: datetime.date) -> dict:
        return {
            "date": date.isoformat(),
            "coords": f"{observer.latitude_deg},{observer.longitude_deg}",
            "tz": observer.timezone_offset_hours,
            "body": body_id,
        }

    def parse(
        self,
        body: str,
        body_id: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        data = load_json(self.name, body)
        if not isinstance(data, dict):
            raise ProviderError(f"{self.name}: unexpected response shape")
        if data.get("error"):
            raise ProviderError(f"{self.name}: {data['error']}")

        properties = data.get("properties")
        inner = properties.get("data") if isinstance(properties, dict) else None
        tz = observer.tzinfo
        values = {"rise": None, "set": None, "transit": None}

        for candidate in (inner, properties, data):
            if not isinstance(candidate, dict):
                continue
            _fill_from_keys(values, candidate)
            _fill_from_phenomena(values, candidate, body_id)
            if any(values.values()):
                break

        return TimingRecord(
            rise_time=parse_clock_time(values["rise"], date, tz),
            set_time=parse_clock_time(values["set"], date, tz),
            transit_time=parse_clock_time(values["transit"], date, tz),
        )


def _fill_from_keys(values: dict, mapping: dict) -> None:
    for field, keys in (("rise", RISE_KEYS), ("set", SET_KEYS), ("transit", TRANSIT_KEYS)):
        if values[field] is None:
            values[field] = first_value(mapping, keys)


def _fill_from_phenomena(values: dict, mapping: dict, body_id: str) -> None:
    # The service reports events as lists like
    # ``"moondata": [{"phen": "Rise", "time": "18:05 ST"}, ...]``.
    events = mapping.get(f"{body_id}data")
    if isinstance(events, list):
        for event in events:
            if not isinstance(event, dict):
                continue
            phen = str(event.get("phen", "")).strip().lower()
            field = _PHENOMENA.get(phen)
            if field and values[field] is None:
                values[field] = event.get("time")
