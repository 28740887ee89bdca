from dataclasses import dataclass, field
import datetime
import math
from typing import Mapping, Optional, Sequence


def timezone_offset_from_longitude(longitude_deg: float) -> int:
    # Round half up so -7.5 maps to -7, matching civil "nearest hour" usage.
    return int(math.floor(longitude_deg / 15.0 + 0.5))


@dataclass(frozen=True)
class ObserverContext:
    latitude_deg: float
    longitude_deg: float
    timezone_offset_hours: float | None = None

    def __post_init__(self) -> None:
        if self.latitude_deg is None or self.longitude_deg is None:
            raise ValueError("Observer location is required (lat/lon)")
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude_deg}")
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude_deg}")
        if self.timezone_offset_hours is None:
            object.__setattr__(
                self,
                "timezone_offset_hours",
                timezone_offset_from_longitude(self.longitude_deg),
            )

    @property
    def tzinfo(self) -> datetime.timezone:
        return datetime.timezone(datetime.timedelta(hours=self.timezone_offset_hours))

    def local_date(self, when: datetime.datetime | datetime.date) -> datetime.date:
        if isinstance(when, datetime.datetime):
            if when.tzinfo is None:
                when = when.replace(tzinfo=datetime.timezone.utc)
            return when.astimezone(self.tzinfo).date()
        return when


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    ra_hours: float
    dec_deg: float
    magnitude: float | None = None
    distance: float | None = None
    type: str = "planet"


@dataclass(frozen=True)
class PositionRange:
    start_date: datetime.date
    end_date: datetime.date
    positions: Mapping[str, CatalogEntry]

    @property
    def length_days(self) -> float:
        return float((self.end_date - self.start_date).days)


@dataclass(frozen=True)
class SkyPosition:
    altitude_deg: float
    azimuth_deg: float


@dataclass
class TimingRecord:
    rise_time: datetime.datetime | None = None
    set_time: datetime.datetime | None = None
    transit_time: datetime.datetime | None = None
    source: str | None = None

    def is_empty(self) -> bool:
        return self.rise_time is None and self.set_time is None and self.transit_time is None

    def is_complete(self) -> bool:
        return (
            self.rise_time is not None
            and self.set_time is not None
            and self.transit_time is not None
        )


@dataclass(frozen=True)
class ViewingWindow:
    start_time: datetime.datetime
    end_time: datetime.datetime
    peak_time: datetime.datetime


@dataclass(frozen=True)
class VisibilityStatus:
    status: str
    badge: str
    message: str
    background_color: str
    border_color: str


@dataclass
class CelestialObject:
    name: str
    type: str
    ra_hours: float
    dec_deg: float
    altitude_deg: float
    azimuth_deg: float
    direction: str
    magnitude: float | None = None
    distance: float | None = None
    rise_time: datetime.datetime | None = None
    set_time: datetime.datetime | None = None
    transit_time: datetime.datetime | None = None
    timing_source: str | None = None
    circumpolar: str | None = None
    best_viewing_start: datetime.datetime | None = None
    best_viewing_end: datetime.datetime | None = None
    visibility: VisibilityStatus | None = None
    moon_illumination: int | None = None
    requires_telescope: bool | None = None
    peak_date: str | None = None
    hourly_rate: str | None = None
    is_active: bool | None = None


@dataclass
class SkyReport:
    observer: ObserverContext
    observed_at: datetime.datetime
    local_sidereal_time_hours: float
    objects: Sequence[CelestialObject]
    moon_illumination: int
    message: Optional[str] = None
    notes: list[str] = field(default_factory=list)
