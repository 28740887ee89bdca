import datetime

from skyward.errors import ProviderError
from skyward.sky.types import ObserverContext, TimingRecord
from .base import (
    HttpTimingProvider,
    RISE_KEYS,
    SET_KEYS,
    TRANSIT_KEYS,
    load_json,
    on_local_day,
)
from .timeparse import first_value, parse_iso_instant

OPALE_BASE_URL = "https://opale.imcce.fr/webservices/rise/"

OPALE_BODY_IDS = {
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


class OpaleTimingProvider(HttpTimingProvider):
    """IMCCE rise/transit/set web service (ISO-8601 UTC instants).

    The service answers for a calendar date, so events that fall outside the
    observer's local day are dropped.
    """

    name = "opale"
    base_url = OPALE_BASE_URL
    body_ids = OPALE_BODY_IDS

    def build_params(self, body_id: str, observer: ObserverContext, date: datetime.date) -> dict:
        return {
            "body": body_id,
            "date": date.isoformat(),
            "lat": observer.latitude_deg,
            "lon": observer.longitude_deg,
            "elevation": 0,
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

        record = data
        for key in ("results", "data"):
            rows = data.get(key)
            if isinstance(rows, list) and rows and isinstance(rows[0], dict):
                record = rows[0]
                break

        return TimingRecord(
            rise_time=_event(record, RISE_KEYS, observer, date),
            set_time=_event(record, SET_KEYS, observer, date),
            transit_time=_event(record, TRANSIT_KEYS, observer, date),
        )


def _event(record: dict, keys, observer: ObserverContext, date: datetime.date):
    return on_local_day(parse_iso_instant(first_value(record, keys)), observer, date)
