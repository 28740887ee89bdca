from concurrent.futures import ThreadPoolExecutor
import datetime
import logging
import time
from typing import Callable, Iterable, Sequence

from skyward.errors import ProviderError
from .astro import transit_from_rise_set
from .providers.base import TimingProvider
from .types import ObserverContext, TimingRecord

logger = logging.getLogger(__name__)

DEFAULT_STAGGER_S = 0.3
DEFAULT_MAX_WORKERS = 4
_FIELDS = ("rise_time", "set_time", "transit_time")


def merge_timing(target: TimingRecord, incoming: TimingRecord) -> bool:
    """Fill empty fields of ``target`` from ``incoming``; returns True if any were filled.

    Fields already present in ``target`` are never overwritten. The source
    tag follows the first provider that contributed anything.
    """
    filled = False
    for name in _FIELDS:
        if getattr(target, name) is None and getattr(incoming, name) is not None:
            setattr(target, name, getattr(incoming, name))
            filled = True
    if filled and target.source is None:
        target.source = incoming.source
    return filled


def _derive_transits(results: dict[str, TimingRecord]) -> None:
    # A rise/set pair from a remote source implies its own transit, which is
    # kept over a locally computed one.
    for record in results.values():
        if record.transit_time is None and record.rise_time is not None and record.set_time is not None:
            record.transit_time = transit_from_rise_set(record.rise_time, record.set_time)


class ExternalTimingResolver:
    """Tiered rise/transit/set lookup across a priority-ordered provider chain.

    Each tier queries its provider concurrently for the bodies still missing a
    field. Tiers run one after another because a tier's input is the gap left
    by the tiers above it.
    """

    def __init__(
        self,
        providers: Sequence[TimingProvider],
        stagger_s: float = DEFAULT_STAGGER_S,
        max_workers: int = DEFAULT_MAX_WORKERS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        if stagger_s < 0:
            raise ValueError("stagger_s must not be negative")
        self.providers = list(providers)
        self.stagger_s = stagger_s
        self.max_workers = max_workers
        self._sleep = sleep

    def resolve(
        self,
        body_names: Iterable[str],
        observer: ObserverContext,
        date: datetime.date,
    ) -> dict[str, TimingRecord]:
        results = {name: TimingRecord() for name in body_names}
        for provider in self.providers:
            if not provider.remote:
                _derive_transits(results)
            pending = [
                name
                for name, record in results.items()
                if not record.is_complete() and provider.supports(name)
            ]
            if not pending:
                continue
            logger.debug("Querying %s for %d bodies", provider.name, len(pending))
            for name, record in self._run_tier(provider, pending, observer, date):
                if record is not None and merge_timing(results[name], record):
                    logger.debug("%s supplied timing for %s", provider.name, name)
        _derive_transits(results)
        return results

    def _run_tier(
        self,
        provider: TimingProvider,
        body_names: list[str],
        observer: ObserverContext,
        date: datetime.date,
    ) -> list[tuple[str, TimingRecord | None]]:
        workers = min(self.max_workers, len(body_names))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._query, provider, name, index, observer, date)
                for index, name in enumerate(body_names)
            ]
            return [(name, future.result()) for name, future in zip(body_names, futures)]

    def _query(
        self,
        provider: TimingProvider,
        body_name: str,
        index: int,
        observer: ObserverContext,
        date: datetime.date,
    ) -> TimingRecord | None:
        if index and self.stagger_s and provider.remote:
            self._sleep(self.stagger_s * index)
        try:
            return provider.resolve(body_name, observer, date)
        except ProviderError as e:
            logger.warning("%s failed for %s: %s", provider.name, body_name, e)
        except Exception:
            logger.exception("%s raised unexpectedly for %s", provider.name, body_name)
        return None
