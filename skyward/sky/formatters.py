import json
from dataclasses import asdict

from skyward.util.format import format_clock_time, hours_to_hms, timezone_label
from .types import CelestialObject, SkyReport


def format_json(report: SkyReport) -> str:
    return json.dumps(asdict(report), indent=2, default=str)


def format_text(report: SkyReport, verbose: bool = False) -> str:
    observer = report.observer
    tz = observer.tzinfo
    lines: list[str] = []
    lines.append("Skyward")
    lines.append("=======")
    lines.append(
        f"Location: lat {observer.latitude_deg:.3f}°, lon {observer.longitude_deg:.3f}° "
        f"({timezone_label(observer.timezone_offset_hours)})"
    )
    local = report.observed_at.astimezone(tz)
    lines.append(f"Time (local): {local.strftime('%Y-%m-%d')} {format_clock_time(local)}")
    lines.append(f"Local sidereal time: {hours_to_hms(report.local_sidereal_time_hours, precision=0)}")
    lines.append(f"Moon illumination: {report.moon_illumination}%")
    for note in report.notes:
        lines.append(f"Note: {note}")
    if report.message:
        lines.append("")
        lines.append(report.message)

    if not report.objects:
        return "\n".join(lines)

    lines.append("")
    name_w = min(20, max(len(obj.name) for obj in report.objects))
    for obj in report.objects:
        status = obj.visibility.badge if obj.visibility else ""
        line = (
            f"{_pad(obj.name, name_w)}  {_pad(obj.type, 13)}  "
            f"alt {obj.altitude_deg:6.1f}°  az {obj.azimuth_deg:5.1f}° {_pad(obj.direction, 2)}  "
            f"{status}"
        )
        lines.append(line.rstrip())
        details = _details(obj, tz, verbose)
        if details:
            lines.append(" " * (name_w + 2) + "; ".join(details))
    return "\n".join(lines)


def _details(obj: CelestialObject, tz, verbose: bool) -> list[str]:
    parts = []
    if obj.circumpolar == "always_up":
        parts.append("never sets")
    elif obj.circumpolar == "never_up":
        parts.append("never rises")
    if obj.rise_time is not None:
        parts.append(f"rise {format_clock_time(obj.rise_time, tz)}")
    if obj.transit_time is not None and obj.circumpolar is None:
        parts.append(f"transit {format_clock_time(obj.transit_time, tz)}")
    if obj.set_time is not None:
        parts.append(f"set {format_clock_time(obj.set_time, tz)}")
    if obj.best_viewing_start is not None and obj.best_viewing_end is not None:
        parts.append(
            f"best {format_clock_time(obj.best_viewing_start, tz)}"
            f"-{format_clock_time(obj.best_viewing_end, tz)}"
        )
    if obj.moon_illumination is not None:
        parts.append(f"{obj.moon_illumination}% lit")
    if obj.peak_date:
        active = "active" if obj.is_active else "inactive"
        parts.append(f"peak {obj.peak_date}, {obj.hourly_rate}/h, {active}")
    if obj.requires_telescope:
        parts.append("telescope")
    if verbose and obj.timing_source:
        parts.append(f"source {obj.timing_source}")
    return parts


def _pad(value: str, width: int) -> str:
    if len(value) >= width:
        return value
    return value + (" " * (width - len(value)))
