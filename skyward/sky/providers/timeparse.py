"""Tolerant parsers for the time tokens found in provider responses.

Every parser returns None for input it cannot make sense of, so a single bad
field never invalidates the rest of a record.
"""

import datetime
import re

_CLOCK_12H = re.compile(r"(\d{1,2}):(\d{2})\s*([AaPp])\.?\s*[Mm]\.?")
_CLOCK_24H = re.compile(r"(\d{1,2}):(\d{2})(?::(\d{2}))?")

_TIME_TOKEN_PATTERNS = (
    re.compile(r"\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(?::\d{2})?"),
    re.compile(r"\d{4}-[A-Z][a-z]{2}-\d{2}\s+\d{2}:\d{2}(?::\d{2})?"),
    re.compile(r"[A-Z][a-z]{2}\s+\d{1,2},\s+\d{4}\s+\d{2}:\d{2}"),
    re.compile(r"\d{2}:\d{2}:\d{2}"),
    re.compile(r"\d{1,2}:\d{2}"),
)

_DATED_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%b-%d %H:%M:%S",
    "%Y-%b-%d %H:%M",
    "%b %d, %Y %H:%M",
)


def _on_day(
    day: datetime.date,
    hour: int,
    minute: int,
    second: int,
    tz: datetime.tzinfo,
) -> datetime.datetime | None:
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        return None
    return datetime.datetime(day.year, day.month, day.day, hour, minute, second, tzinfo=tz)


def parse_clock_time(
    value,
    day: datetime.date,
    tz: datetime.tzinfo,
) -> datetime.datetime | None:
    """Parse a wall-clock token such as ``6:27 A.M. NW`` or ``18:05 ST``."""
    if not isinstance(value, str) or not value.strip():
        return None
    match = _CLOCK_12H.search(value)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        if not 1 <= hour <= 12:
            return None
        is_pm = match.group(3).upper() == "P"
        if is_pm and hour != 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0
        return _on_day(day, hour, minute, 0, tz)
    match = _CLOCK_24H.search(value)
    if match:
        second = int(match.group(3)) if match.group(3) else 0
        return _on_day(day, int(match.group(1)), int(match.group(2)), second, tz)
    return None


def extract_time_token(line: str) -> str | None:
    for pattern in _TIME_TOKEN_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(0)
    return None


def parse_utc_token(token: str | None, day: datetime.date) -> datetime.datetime | None:
    """Parse a UTC token that may or may not carry its own date."""
    if not token:
        return None
    normalized = " ".join(token.split())
    for fmt in _DATED_FORMATS:
        try:
            parsed = datetime.datetime.strptime(normalized, fmt)
        except ValueError:
            continue
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parse_clock_time(normalized, day, datetime.timezone.utc)


def parse_iso_instant(value) -> datetime.datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def first_value(mapping, keys):
    if not isinstance(mapping, dict):
        return None
    for key in keys:
        value = mapping.get(key)
        if value:
            return value
    return None
