import datetime
import logging
from typing import Sequence

from skyward.config import Config
from skyward.util.format import azimuth_to_direction
from .astro import circumpolar_kind, local_sidereal_time_hours, moon_illumination_percent, ra_dec_to_alt_az
from .catalog import METEOR_SHOWERS, REQUIRES_TELESCOPE, list_catalog
from .positions import PositionTable, default_position_table, load_position_table
from .providers import LocalTimingSource, TimingProvider, get_timing_providers
from .resolver import ExternalTimingResolver
from .types import CatalogEntry, CelestialObject, ObserverContext, SkyReport, TimingRecord
from .viewing import calculate_viewing_window
from .visibility import classify_visibility

logger = logging.getLogger(__name__)


class SkyEngine:
    def __init__(
        self,
        config: Config | None = None,
        providers: Sequence[TimingProvider] | None = None,
        position_table: PositionTable | None = None,
    ):
        self._config = config or Config({})
        self._providers = list(providers) if providers is not None else None
        self._position_table = position_table

    @property
    def position_table(self) -> PositionTable:
        if self._position_table is None:
            path = self._config.position_table_path
            self._position_table = load_position_table(path) if path else default_position_table()
        return self._position_table

    @property
    def providers(self) -> list[TimingProvider]:
        if self._providers is None:
            self._providers = get_timing_providers(self._config)
        return self._providers

    def default_observer(self) -> ObserverContext:
        return ObserverContext(
            latitude_deg=self._config.site_latitude_deg,
            longitude_deg=self._config.site_longitude_deg,
            timezone_offset_hours=self._config.site_timezone_offset_hours,
        )

    def observe(
        self,
        observer: ObserverContext | None = None,
        when: datetime.datetime | None = None,
        bodies: Sequence[str] | None = None,
        offline: bool = False,
    ) -> SkyReport:
        observer = observer or self.default_observer()
        when = when or datetime.datetime.now(datetime.timezone.utc)
        if when.tzinfo is None:
            when = when.replace(tzinfo=datetime.timezone.utc)
        local_date = observer.local_date(when)

        entries = _select(list_catalog(self.position_table, when), bodies)
        notes = _coverage_notes(self.position_table, when)

        timed = [e for e in entries if e.type != "meteor"]
        external = [] if offline else self.providers
        chain = [*external, LocalTimingSource({e.name: e for e in timed})]
        resolver = ExternalTimingResolver(
            chain,
            stagger_s=self._config.provider_stagger_s,
            max_workers=self._config.provider_max_workers,
        )
        # Network providers only map solar-system bodies; the rest fall through
        # to the local tier.
        timings = resolver.resolve([e.name for e in timed], observer, local_date)

        illumination = moon_illumination_percent(when)
        objects = [
            self._build_object(entry, observer, when, timings.get(entry.name), illumination)
            for entry in entries
        ]
        logger.debug("Built %d objects for %s", len(objects), local_date.isoformat())

        message = None
        if objects and not any(obj.altitude_deg > 0 for obj in objects):
            message = "No catalog objects are above the horizon right now."
        return SkyReport(
            observer=observer,
            observed_at=when,
            local_sidereal_time_hours=local_sidereal_time_hours(observer.longitude_deg, when),
            objects=objects,
            moon_illumination=illumination,
            message=message,
            notes=notes,
        )

    def _build_object(
        self,
        entry: CatalogEntry,
        observer: ObserverContext,
        when: datetime.datetime,
        timing: TimingRecord | None,
        illumination: int,
    ) -> CelestialObject:
        position = ra_dec_to_alt_az(
            entry.ra_hours,
            entry.dec_deg,
            observer.latitude_deg,
            observer.longitude_deg,
            when,
        )
        alt, az = position.altitude_deg, position.azimuth_deg
        obj = CelestialObject(
            name=entry.name,
            type=entry.type,
            ra_hours=entry.ra_hours,
            dec_deg=entry.dec_deg,
            altitude_deg=alt,
            azimuth_deg=az,
            direction=azimuth_to_direction(az),
            magnitude=entry.magnitude,
            distance=entry.distance,
            circumpolar=circumpolar_kind(entry.dec_deg, observer.latitude_deg),
            requires_telescope=REQUIRES_TELESCOPE.get(entry.name),
        )
        if entry.type == "moon":
            obj.moon_illumination = illumination

        shower = METEOR_SHOWERS.get(entry.name) if entry.type == "meteor" else None
        if shower is not None:
            obj.peak_date = shower.peak_date
            obj.hourly_rate = shower.hourly_rate
            obj.is_active = shower.is_active(observer.local_date(when))

        if timing is not None:
            obj.rise_time = timing.rise_time
            obj.set_time = timing.set_time
            obj.transit_time = timing.transit_time
            obj.timing_source = timing.source
            if obj.circumpolar != "never_up":
                window = calculate_viewing_window(
                    entry.ra_hours,
                    entry.dec_deg,
                    observer,
                    when,
                    transit_time=timing.transit_time,
                )
                if window is not None:
                    obj.best_viewing_start = window.start_time
                    obj.best_viewing_end = window.end_time

        obj.visibility = classify_visibility(
            alt,
            obj.rise_time,
            obj.set_time,
            when,
            tz=observer.tzinfo,
        )
        return obj


def _select(entries: list[CatalogEntry], bodies: Sequence[str] | None) -> list[CatalogEntry]:
    if not bodies:
        return entries
    by_name = {e.name.lower(): e for e in entries}
    selected = []
    for name in bodies:
        entry = by_name.get(name.strip().lower())
        if entry is None:
            raise ValueError(f"Unknown body: {name}")
        selected.append(entry)
    return selected


def _coverage_notes(table: PositionTable, when: datetime.datetime) -> list[str]:
    coverage = table.coverage()
    if coverage is None:
        return ["Position table is empty; planets use catalog defaults."]
    start, end = coverage
    date = when.astimezone(datetime.timezone.utc).date()
    if date < start or date > end:
        return [
            f"Planet positions are outside the table range {start.isoformat()} to "
            f"{end.isoformat()}; nearest values are used."
        ]
    return []
