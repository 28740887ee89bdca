"""
Regenerate the bundled planet position table (skyward/data/positions.csv).

One range per calendar month (end date inclusive), holding each planet's
geocentric RA/Dec and distance at the start of the month. Magnitudes are
nominal values.

Requires the optional tools dependencies (install with `pip install -e .[tools]`).
"""
import argparse
import csv
import datetime
from pathlib import Path

import astropy.units as u
from astropy.coordinates import get_body, solar_system_ephemeris
from astropy.time import Time

DEFAULT_OUT = Path(__file__).resolve().parents[1] / "skyward" / "data" / "positions.csv"
FIELDS = ["start_date", "end_date", "body", "ra_hours", "dec_deg", "magnitude", "distance_au"]

NOMINAL_MAGNITUDES = {
    "Jupiter": -2.5,
    "Saturn": 0.8,
    "Mars": 0.5,
    "Venus": -4.2,
    "Mercury": -0.5,
}


def _month_starts(start: datetime.date, months: int) -> list[datetime.date]:
    dates = []
    year, month = start.year, start.month
    for _ in range(months + 1):
        dates.append(datetime.date(year, month, 1))
        month += 1
        if month > 12:
            year += 1
            month = 1
    return dates


def _parse_month(value: str) -> datetime.date:
    return datetime.datetime.strptime(value, "%Y-%m").date()


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--start", type=_parse_month, required=True, help="First month (YYYY-MM)")
    ap.add_argument("--months", type=int, default=3, help="Number of monthly ranges")
    ap.add_argument("--out", type=Path, default=DEFAULT_OUT, help="Output CSV path")
    ap.add_argument("--ephemeris", default="builtin", help="astropy solar system ephemeris")
    args = ap.parse_args()

    if args.months <= 0:
        ap.error("--months must be positive")

    starts = _month_starts(args.start, args.months)
    rows = []
    with solar_system_ephemeris.set(args.ephemeris):
        for start, next_start in zip(starts, starts[1:]):
            end = next_start - datetime.timedelta(days=1)
            t = Time(datetime.datetime(start.year, start.month, start.day, tzinfo=datetime.timezone.utc))
            for body, magnitude in NOMINAL_MAGNITUDES.items():
                coord = get_body(body.lower(), t)
                rows.append(
                    {
                        "start_date": start.isoformat(),
                        "end_date": end.isoformat(),
                        "body": body,
                        "ra_hours": f"{coord.ra.hour:.2f}",
                        "dec_deg": f"{coord.dec.deg:.1f}",
                        "magnitude": f"{magnitude:.1f}",
                        "distance_au": f"{coord.distance.to(u.au).value:.2f}",
                    }
                )

    args.out.parent.mkdir(parents=True, exist_ok=True)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    print(f"Wrote {len(rows)} rows to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
