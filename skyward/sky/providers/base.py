from abc import ABC, abstractmethod
import datetime
import json
import socket
from typing import Mapping
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from skyward import __version__
from skyward.errors import ProviderError
from skyward.sky.types import ObserverContext, TimingRecord

DEFAULT_TIMEOUT_S = 10.0
USER_AGENT = f"skyward/{__version__}"

RISE_KEYS = ("rise", "rise_time", "risetime", "riseTime", "rising")
SET_KEYS = ("set", "set_time", "settime", "setTime", "setting")
TRANSIT_KEYS = (
    "transit",
    "transit_time",
    "transittime",
    "transitTime",
    "culmination",
    "upper_culmination",
    "peak",
)


class TimingProvider(ABC):
    name: str
    body_ids: Mapping[str, str] = {}
    # Remote sources are queried with a staggered delay per body.
    remote = True

    def supports(self, body_name: str) -> bool:
        return body_name in self.body_ids

    @abstractmethod
    def resolve(
        self,
        body_name: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        raise NotImplementedError


class HttpTimingProvider(TimingProvider):
    base_url: str
    accept = "application/json"

    def __init__(self, timeout_s: float | None = None):
        self.timeout_s = timeout_s if timeout_s is not None else DEFAULT_TIMEOUT_S

    def resolve(
        self,
        body_name: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        body_id = self.body_ids.get(body_name)
        if body_id is None:
            return TimingRecord(source=self.name)
        url = self.build_url(body_id, observer, date)
        body = self._get(url)
        record = self.parse(body, body_id, observer, date)
        record.source = self.name
        return record

    @abstractmethod
    def build_params(
        self,
        body_id: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> dict:
        raise NotImplementedError

    @abstractmethod
    def parse(
        self,
        body: str,
        body_id: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        raise NotImplementedError

    def build_url(self, body_id: str, observer: ObserverContext, date: datetime.date) -> str:
        return f"{self.base_url}?{urlencode(self.build_params(body_id, observer, date))}"

    def _get(self, url: str) -> str:
        req = Request(url, headers={"User-Agent": USER_AGENT, "Accept": self.accept})
        try:
            with urlopen(req, timeout=self.timeout_s) as resp:
                data = resp.read()
        except HTTPError as e:
            raise ProviderError(f"{self.name}: HTTP {e.code} for {url}") from e
        except (URLError, socket.timeout, OSError) as e:
            raise ProviderError(f"{self.name}: request failed for {url} ({e})") from e
        return data.decode("utf-8", errors="replace")


def local_day_bounds(
    observer: ObserverContext,
    date: datetime.date,
) -> tuple[datetime.datetime, datetime.datetime]:
    """UTC instants of local midnight on ``date`` and the midnight after it."""
    start = datetime.datetime(date.year, date.month, date.day, tzinfo=observer.tzinfo)
    end = start + datetime.timedelta(days=1)
    return start.astimezone(datetime.timezone.utc), end.astimezone(datetime.timezone.utc)


def on_local_day(
    value: datetime.datetime | None,
    observer: ObserverContext,
    date: datetime.date,
) -> datetime.datetime | None:
    """``value`` in the observer's offset, or None if it falls on another local day."""
    if value is None:
        return None
    local = value.astimezone(observer.tzinfo)
    return local if local.date() == date else None


def load_json(provider: str, body: str):
    try:
        return json.loads(body)
    except ValueError as e:
        raise ProviderError(f"{provider}: malformed JSON response ({e})") from e
