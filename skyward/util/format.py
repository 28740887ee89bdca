import datetime
import math
from typing import Tuple

COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def _wrap_hours(hours: float) -> float:
    return hours % 24.0


def _seconds_field(seconds: float, precision: int) -> str:
    width = 2 if precision == 0 else 3 + precision
    return f"{seconds:0{width}.{precision}f}"


def _split_dms(angle_deg: float, precision: int) -> Tuple[int, int, int, float]:
    sign = -1 if angle_deg < 0 else 1
    a = abs(angle_deg)
    total_seconds = round(a * 3600.0, precision)
    deg = int(total_seconds // 3600)
    rem = total_seconds - deg * 3600
    minutes = int(rem // 60)
    seconds = rem - minutes * 60
    return sign, deg, minutes, seconds


def _split_hms(hours: float, precision: int) -> Tuple[int, int, float]:
    h = _wrap_hours(hours)
    total_seconds = round(h * 3600.0, precision) % (24.0 * 3600.0)
    hours_int = int(total_seconds // 3600)
    rem = total_seconds - hours_int * 3600
    minutes = int(rem // 60)
    seconds = rem - minutes * 60
    return hours_int, minutes, seconds


def hours_to_hms(hours: float, precision: int = 2) -> str:
    h, m, s = _split_hms(hours, precision)
    s_fmt = _seconds_field(s, precision)
    return f"{h:02d}:{m:02d}:{s_fmt}"


def deg_to_dms(deg: float, precision: int = 2) -> str:
    sign_val, d, m, s = _split_dms(deg, precision)
    sign = "-" if sign_val < 0 else "+"
    s_fmt = _seconds_field(s, precision)
    return f"{sign}{d:02d}:{m:02d}:{s_fmt}"


def format_angle(deg: float, style: str = "deg", precision: int = 2) -> str:
    if style == "deg":
        return f"{deg:.{precision}f}°"
    if style == "hms":
        return hours_to_hms(deg / 15.0, precision=precision)
    if style == "dms":
        return deg_to_dms(deg, precision=precision)
    raise ValueError(f"Unknown angle style: {style}")


def format_clock_time(dt: datetime.datetime, tz: datetime.tzinfo | None = None) -> str:
    """12-hour wall-clock time such as ``4:09 PM``."""
    if tz is not None:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=datetime.timezone.utc)
        dt = dt.astimezone(tz)
    am_pm = "PM" if dt.hour >= 12 else "AM"
    display_hour = dt.hour % 12 or 12
    return f"{display_hour}:{dt.minute:02d} {am_pm}"


def azimuth_to_direction(azimuth_deg: float) -> str:
    index = int(math.floor((azimuth_deg % 360.0) / 45.0 + 0.5)) % 8
    return COMPASS_POINTS[index]


def timezone_label(offset_hours: float) -> str:
    sign = "+" if offset_hours >= 0 else ""
    if float(offset_hours).is_integer():
        return f"UTC{sign}{int(offset_hours)}"
    return f"UTC{sign}{offset_hours:g}"
