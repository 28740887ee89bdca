from .format import (
    azimuth_to_direction,
    deg_to_dms,
    format_angle,
    format_clock_time,
    hours_to_hms,
    timezone_label,
)

__all__ = [
    "azimuth_to_direction",
    "deg_to_dms",
    "format_angle",
    "format_clock_time",
    "hours_to_hms",
    "timezone_label",
]
