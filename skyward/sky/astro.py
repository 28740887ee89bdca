import datetime
import math

from .types import SkyPosition

J2000_JD = 2451545.0
J2000_UTC = datetime.datetime(2000, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

SYNODIC_MONTH_DAYS = 29.53058867
# New moon of 2000-01-06 18:14 UTC.
REFERENCE_NEW_MOON_JD = 2451550.26

SIDEREAL_DAY = datetime.timedelta(hours=23, minutes=56, seconds=4)


def _as_utc(dt: datetime.datetime) -> datetime.datetime:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def _to_julian_date(dt: datetime.datetime) -> float:
    dt = _as_utc(dt)
    year = dt.year
    month = dt.month
    day = dt.day + (dt.hour + (dt.minute + dt.second / 60.0) / 60.0) / 24.0
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5
    return jd


def days_since_j2000(dt: datetime.datetime) -> float:
    return _to_julian_date(dt) - J2000_JD


def _ut_decimal_hours(dt: datetime.datetime) -> float:
    dt = _as_utc(dt)
    return dt.hour + dt.minute / 60.0 + dt.second / 3600.0


def local_sidereal_time_hours(
    longitude_deg: float,
    dt: datetime.datetime,
    timezone_offset_hours: float | None = None,
) -> float:
    """Local sidereal time in hours, in [0, 24).

    Uses the low-precision ``100.46 + 0.985647 d + lon + 15 UT`` expression,
    where ``d`` counts fractional days from J2000.0 of the UTC instant. The
    optional timezone offset is added before reduction and is only meant for
    display-oriented callers.
    """
    d = days_since_j2000(dt)
    lst_deg = (100.46 + 0.985647 * d + longitude_deg + 15.0 * _ut_decimal_hours(dt)) % 360.0
    lst_hours = lst_deg / 15.0
    if timezone_offset_hours is not None:
        lst_hours += timezone_offset_hours
    return lst_hours % 24.0


def wrap_hours_signed(hours: float) -> float:
    """Wrap an hour difference into (-12, 12]."""
    wrapped = ((hours + 12.0) % 24.0) - 12.0
    if wrapped == -12.0:
        return 12.0
    return wrapped


def hour_angle_deg(lst_hours: float, ra_hours: float) -> float:
    return (lst_hours - ra_hours) * 15.0


def _clamp_unit(value: float) -> float:
    return max(-1.0, min(1.0, value))


def altitude_deg(dec_deg: float, lat_deg: float, ha_deg: float) -> float:
    dec = math.radians(dec_deg)
    lat = math.radians(lat_deg)
    ha = math.radians(ha_deg)
    sin_alt = math.sin(dec) * math.sin(lat) + math.cos(dec) * math.cos(lat) * math.cos(ha)
    return math.degrees(math.asin(_clamp_unit(sin_alt)))


def azimuth_deg(dec_deg: float, lat_deg: float, ha_deg: float) -> float:
    """Azimuth measured from north through east, in [0, 360)."""
    dec = math.radians(dec_deg)
    lat = math.radians(lat_deg)
    ha = math.radians(ha_deg)
    alt = math.radians(altitude_deg(dec_deg, lat_deg, ha_deg))
    denom = math.cos(lat) * math.cos(alt)
    if abs(denom) < 1e-12:
        # Zenith, nadir or an observer on a pole: azimuth is undefined.
        return 0.0
    cos_az = (math.sin(dec) - math.sin(lat) * math.sin(alt)) / denom
    az = math.degrees(math.acos(_clamp_unit(cos_az)))
    if math.sin(ha) > 0:
        az = 360.0 - az
    return az % 360.0


def ra_dec_to_alt_az(
    ra_hours: float,
    dec_deg: float,
    lat_deg: float,
    lon_deg: float,
    dt: datetime.datetime,
) -> SkyPosition:
    lst = local_sidereal_time_hours(lon_deg, dt)
    ha = hour_angle_deg(lst, ra_hours)
    return SkyPosition(
        altitude_deg=altitude_deg(dec_deg, lat_deg, ha),
        azimuth_deg=azimuth_deg(dec_deg, lat_deg, ha),
    )


def horizon_hour_angle_deg(dec_deg: float, lat_deg: float) -> float | None:
    """Hour angle of the horizon crossing, or None for a circumpolar body.

    The returned magnitude lies in [0, 180]; rising happens at the negative
    value and setting at the positive one.
    """
    cos_ha = -math.tan(math.radians(lat_deg)) * math.tan(math.radians(dec_deg))
    if abs(cos_ha) > 1.0:
        return None
    return math.degrees(math.acos(cos_ha))


def circumpolar_kind(dec_deg: float, lat_deg: float) -> str | None:
    if horizon_hour_angle_deg(dec_deg, lat_deg) is not None:
        return None
    if (dec_deg >= 0) == (lat_deg >= 0):
        return "always_up"
    return "never_up"


def moon_illumination_percent(dt: datetime.datetime) -> int:
    jd = _to_julian_date(dt)
    days_since_new = (jd - REFERENCE_NEW_MOON_JD) % SYNODIC_MONTH_DAYS
    phase = days_since_new / SYNODIC_MONTH_DAYS
    illumination = (1.0 + math.cos(2.0 * math.pi * phase - math.pi)) / 2.0
    return int(math.floor(illumination * 100.0 + 0.5))


def solar_declination_deg(d: float) -> float:
    return 23.45 * math.sin(math.radians(360.0 * (d + 284.0) / 365.25))


def solar_ra_hours(d: float) -> float:
    """Day-count solar right ascension, 12h at the J2000.0 epoch."""
    return ((d % 365.25) / 365.25 * 24.0 + 12.0) % 24.0


def ra_from_transit_time(transit_time: datetime.datetime, longitude_deg: float) -> float:
    """Right ascension (hours) of a body that transits at ``transit_time``."""
    return local_sidereal_time_hours(longitude_deg, transit_time)


def transit_from_rise_set(
    rise_time: datetime.datetime,
    set_time: datetime.datetime,
) -> datetime.datetime:
    if set_time < rise_time:
        set_time = set_time + datetime.timedelta(hours=24)
    return rise_time + (set_time - rise_time) / 2
