from .astro import (
    altitude_deg,
    azimuth_deg,
    horizon_hour_angle_deg,
    local_sidereal_time_hours,
    moon_illumination_percent,
    ra_dec_to_alt_az,
)
from .engine import SkyEngine
from .formatters import format_json, format_text
from .positions import PositionTable, default_position_table, load_position_table
from .resolver import ExternalTimingResolver
from .riseset import calculate_rise_set
from .types import (
    CatalogEntry,
    CelestialObject,
    ObserverContext,
    PositionRange,
    SkyPosition,
    SkyReport,
    TimingRecord,
    ViewingWindow,
    VisibilityStatus,
)
from .viewing import calculate_viewing_window
from .visibility import classify_visibility

__all__ = [
    "SkyEngine",
    "ExternalTimingResolver",
    "PositionTable",
    "default_position_table",
    "load_position_table",
    "altitude_deg",
    "azimuth_deg",
    "horizon_hour_angle_deg",
    "local_sidereal_time_hours",
    "moon_illumination_percent",
    "ra_dec_to_alt_az",
    "calculate_rise_set",
    "calculate_viewing_window",
    "classify_visibility",
    "format_json",
    "format_text",
    "CatalogEntry",
    "CelestialObject",
    "ObserverContext",
    "PositionRange",
    "SkyPosition",
    "SkyReport",
    "TimingRecord",
    "ViewingWindow",
    "VisibilityStatus",
]
