from bisect import bisect_right
import csv
import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Sequence

from skyward.errors import PositionTableError
from .types import CatalogEntry, PositionRange

DEFAULT_TABLE_PATH = Path(__file__).resolve().parents[1] / "data" / "positions.csv"


def interpolate_ra_hours(ra1: float, ra2: float, factor: float) -> float:
    """Interpolate right ascension along the shorter arc of the 24h circle."""
    if abs(ra2 - ra1) > 12.0:
        if ra2 > ra1:
            ra2 -= 24.0
        else:
            ra1 -= 24.0
    return (ra1 + (ra2 - ra1) * factor) % 24.0


def _lerp_optional(a: float | None, b: float | None, factor: float) -> float | None:
    if a is not None and b is not None:
        return a + (b - a) * factor
    return a if a is not None else b


def interpolate_entry(first: CatalogEntry, second: CatalogEntry, factor: float) -> CatalogEntry:
    return CatalogEntry(
        name=first.name,
        ra_hours=interpolate_ra_hours(first.ra_hours, second.ra_hours, factor),
        dec_deg=first.dec_deg + (second.dec_deg - first.dec_deg) * factor,
        magnitude=_lerp_optional(first.magnitude, second.magnitude, factor),
        distance=_lerp_optional(first.distance, second.distance, factor),
        type=first.type,
    )


class PositionTable:
    """Date-ranged body positions with interpolation toward the next range."""

    def __init__(self, ranges: Iterable[PositionRange]):
        ordered = sorted(ranges, key=lambda r: r.start_date)
        for current in ordered:
            if current.end_date < current.start_date:
                raise PositionTableError(
                    f"Range ends before it starts: {current.start_date} > {current.end_date}"
                )
        for prev, current in zip(ordered, ordered[1:]):
            if current.start_date <= prev.end_date:
                raise PositionTableError(
                    f"Overlapping ranges: {prev.start_date}..{prev.end_date} "
                    f"and {current.start_date}..{current.end_date}"
                )
        self._ranges: tuple[PositionRange, ...] = tuple(ordered)
        self._starts = [r.start_date for r in self._ranges]

    @property
    def ranges(self) -> Sequence[PositionRange]:
        return self._ranges

    def coverage(self) -> tuple[datetime.date, datetime.date] | None:
        if not self._ranges:
            return None
        return self._ranges[0].start_date, self._ranges[-1].end_date

    def bodies(self) -> set[str]:
        names: set[str] = set()
        for r in self._ranges:
            names.update(r.positions)
        return names

    def lookup(
        self,
        body_name: str,
        when: datetime.date | datetime.datetime,
    ) -> CatalogEntry | None:
        if not self._ranges:
            return None
        date = _to_date(when)
        idx = bisect_right(self._starts, date) - 1
        if idx < 0:
            return self._ranges[0].positions.get(body_name)

        current = self._ranges[idx]
        entry = current.positions.get(body_name)
        if entry is None:
            return None
        if idx + 1 >= len(self._ranges):
            # Last range, or past its end: no successor to interpolate toward.
            return entry
        following = self._ranges[idx + 1].positions.get(body_name)
        if following is None:
            return entry
        return interpolate_entry(entry, following, _range_factor(current, date))


def _range_factor(rng: PositionRange, date: datetime.date) -> float:
    length = rng.length_days
    if length <= 0:
        return 0.0
    factor = (date - rng.start_date).days / length
    return max(0.0, min(1.0, factor))


def _to_date(when: datetime.date | datetime.datetime) -> datetime.date:
    if isinstance(when, datetime.datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=datetime.timezone.utc)
        return when.astimezone(datetime.timezone.utc).date()
    return when


def load_position_table(path: Path | None = None) -> PositionTable:
    path = path or DEFAULT_TABLE_PATH
    if not path.exists():
        raise FileNotFoundError(f"Position table not found: {path}")
    grouped: dict[tuple[datetime.date, datetime.date], dict[str, CatalogEntry]] = {}
    with open(path, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                start = datetime.date.fromisoformat(row["start_date"].strip())
                end = datetime.date.fromisoformat(row["end_date"].strip())
                name = row["body"].strip()
                entry = CatalogEntry(
                    name=name,
                    ra_hours=float(row["ra_hours"]) % 24.0,
                    dec_deg=float(row["dec_deg"]),
                    magnitude=_parse_float(row.get("magnitude")),
                    distance=_parse_float(row.get("distance_au")),
                    type="planet",
                )
            except (KeyError, AttributeError, ValueError) as e:
                raise PositionTableError(f"{path}:{line_no}: invalid row ({e})") from e
            grouped.setdefault((start, end), {})[name] = entry
    return PositionTable(
        PositionRange(start_date=start, end_date=end, positions=positions)
        for (start, end), positions in grouped.items()
    )


@lru_cache(maxsize=None)
def default_position_table() -> PositionTable:
    return load_position_table()


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return float(value)
