import datetime

from .astro import (
    SIDEREAL_DAY,
    days_since_j2000,
    horizon_hour_angle_deg,
    solar_declination_deg,
    solar_ra_hours,
)
from .riseset import local_noon_utc, transit_utc
from .types import ObserverContext, ViewingWindow

EVENING_HOURS = range(18, 24)
EARLY_MORNING_HOURS = range(0, 7)


def _solar_half_arc(observer: ObserverContext, d: float) -> datetime.timedelta:
    dec = solar_declination_deg(d)
    ha_deg = horizon_hour_angle_deg(dec, observer.latitude_deg)
    if ha_deg is None:
        # Polar day keeps the Sun up all 24h, polar night keeps it down.
        ha_deg = 180.0 if (dec >= 0) == (observer.latitude_deg >= 0) else 0.0
    return datetime.timedelta(hours=ha_deg / 15.0)


def _solar_transit_and_half_arc(
    observer: ObserverContext,
    date: datetime.date,
) -> tuple[datetime.datetime, datetime.timedelta]:
    noon = local_noon_utc(observer, date)
    d = days_since_j2000(noon)
    transit = transit_utc(solar_ra_hours(d), observer, date)
    return transit, _solar_half_arc(observer, d)


def calculate_sunset(observer: ObserverContext, date: datetime.date) -> datetime.datetime:
    transit, half_arc = _solar_transit_and_half_arc(observer, date)
    return (transit + half_arc).astimezone(observer.tzinfo)


def calculate_sunrise(observer: ObserverContext, date: datetime.date) -> datetime.datetime:
    transit, half_arc = _solar_transit_and_half_arc(observer, date)
    return (transit - half_arc).astimezone(observer.tzinfo)


def is_polar_day(observer: ObserverContext, date: datetime.date) -> bool:
    _, half_arc = _solar_transit_and_half_arc(observer, date)
    return half_arc >= datetime.timedelta(hours=12)


def night_bounds(
    observer: ObserverContext,
    date: datetime.date,
) -> tuple[datetime.datetime, datetime.datetime] | None:
    """Sunset on ``date`` and the sunrise that follows it, or None in polar day."""
    if is_polar_day(observer, date):
        return None
    sunset = calculate_sunset(observer, date)
    sunrise = calculate_sunrise(observer, date + datetime.timedelta(days=1))
    return sunset, sunrise


def calculate_viewing_window(
    ra_hours: float,
    dec_deg: float,
    observer: ObserverContext,
    when: datetime.date | datetime.datetime,
    transit_time: datetime.datetime | None = None,
) -> ViewingWindow | None:
    """Best observing window for the night that starts on the local date.

    An externally supplied transit time is used as-is; otherwise the transit
    is computed from RA. Returns None when clipping to the night leaves no
    usable interval.

    ``peak_time`` is the transit the window is built around. An early-morning
    transit that precedes this evening's sunset belongs to the previous night,
    so the window and its ``peak_time`` use the transit one sidereal day later
    rather than the ``transit_time`` passed in.
    """
    date = observer.local_date(when)
    bounds = night_bounds(observer, date)
    if bounds is None:
        return None
    sunset, sunrise = bounds
    if transit_time is None:
        transit_time = transit_utc(ra_hours, observer, date)
    transit = transit_time.astimezone(observer.tzinfo)

    if transit.hour in EARLY_MORNING_HOURS and transit < sunset:
        # The morning transit of this date belongs to the previous night;
        # tonight's happens one sidereal day later.
        transit = transit + SIDEREAL_DAY

    if transit.hour in EVENING_HOURS:
        start = transit - datetime.timedelta(hours=1)
        end = transit + datetime.timedelta(hours=1.5)
    elif transit.hour in EARLY_MORNING_HOURS:
        start = transit - datetime.timedelta(hours=1.5)
        end = transit + datetime.timedelta(hours=1)
    else:
        start = sunset - datetime.timedelta(hours=0.5)
        end = sunset + datetime.timedelta(hours=2)

    start = max(start, sunset)
    end = min(end, sunrise)
    if start >= end:
        return None
    return ViewingWindow(start_time=start, end_time=end, peak_time=transit)
