import datetime
from typing import Mapping

from skyward.sky.riseset import LOCAL_SOURCE, calculate_rise_set
from skyward.sky.types import CatalogEntry, ObserverContext, TimingRecord
from .base import TimingProvider


class LocalTimingSource(TimingProvider):
    """Closed-form rise/set from catalog coordinates; never fails for known bodies."""

    name = LOCAL_SOURCE
    remote = False

    def __init__(self, entries: Mapping[str, CatalogEntry]):
        self.entries = dict(entries)

    @property
    def body_ids(self):
        return {name: name for name in self.entries}

    def resolve(
        self,
        body_name: str,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord:
        entry = self.entries.get(body_name)
        if entry is None:
            return TimingRecord(source=self.name)
        return calculate_rise_set(entry.ra_hours, entry.dec_deg, observer, date)
