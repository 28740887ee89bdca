import datetime

from .astro import (
    horizon_hour_angle_deg,
    local_sidereal_time_hours,
    wrap_hours_signed,
)
from .types import ObserverContext, TimingRecord

LOCAL_SOURCE = "local"


def local_noon_utc(observer: ObserverContext, date: datetime.date) -> datetime.datetime:
    """UTC instant of civil noon on ``date`` in the observer's approximate zone."""
    noon = datetime.datetime(date.year, date.month, date.day, 12, 0, tzinfo=datetime.timezone.utc)
    return noon - datetime.timedelta(hours=observer.timezone_offset_hours)


def transit_utc(
    ra_hours: float,
    observer: ObserverContext,
    date: datetime.date,
) -> datetime.datetime:
    noon = local_noon_utc(observer, date)
    lst_noon = local_sidereal_time_hours(observer.longitude_deg, noon)
    delta_hours = wrap_hours_signed(ra_hours - lst_noon)
    return noon + datetime.timedelta(hours=delta_hours)


def calculate_rise_set(
    ra_hours: float,
    dec_deg: float,
    observer: ObserverContext,
    when: datetime.date | datetime.datetime,
) -> TimingRecord:
    """Rise, transit and set for the observer's local day containing ``when``.

    The search is anchored on local noon rather than the current instant so
    the events belong to the same civil day. Circumpolar bodies get no rise
    or set and report local noon as their transit.
    """
    date = observer.local_date(when)
    tz = observer.tzinfo
    noon = local_noon_utc(observer, date)
    ha_deg = horizon_hour_angle_deg(dec_deg, observer.latitude_deg)
    if ha_deg is None:
        return TimingRecord(
            rise_time=None,
            set_time=None,
            transit_time=noon.astimezone(tz),
            source=LOCAL_SOURCE,
        )

    transit = transit_utc(ra_hours, observer, date)
    half_arc = datetime.timedelta(hours=ha_deg / 15.0)
    return TimingRecord(
        rise_time=(transit - half_arc).astimezone(tz),
        set_time=(transit + half_arc).astimezone(tz),
        transit_time=transit.astimezone(tz),
        source=LOCAL_SOURCE,
    )
