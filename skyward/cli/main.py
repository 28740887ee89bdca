import argparse
import sys

from skyward import __version__
from skyward.cli.commands import run_doctor, run_moon, run_riseset, run_sky

LOG_LEVELS = ("debug", "info", "warn", "error")


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to config TOML")
    parser.add_argument("--json", action="store_true", help="Output result as JSON")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Enable logging at this level")


def _add_site(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--lat", dest="latitude_deg", type=float, help="Observer latitude (deg)")
    parser.add_argument("--lon", dest="longitude_deg", type=float, help="Observer longitude (deg, east positive)")
    parser.add_argument(
        "--tz",
        dest="timezone_offset_hours",
        type=float,
        help="UTC offset in hours (default: derived from longitude)",
    )
    parser.add_argument("--at", help="Instant (ISO-8601, default now; naive values are UTC)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="skyward")
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    doctor_parser = subparsers.add_parser("doctor", help="Check config, position table and providers")
    _add_common(doctor_parser)

    sky_parser = subparsers.add_parser("sky", help="Report positions, timings and visibility")
    _add_common(sky_parser)
    _add_site(sky_parser)
    sky_parser.add_argument(
        "--body",
        dest="bodies",
        action="append",
        help="Restrict the report to this body (repeatable)",
    )
    sky_parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip external timing services and use local calculation only",
    )
    sky_parser.add_argument("--verbose", action="store_true", help="Show timing sources")

    riseset_parser = subparsers.add_parser("riseset", help="Rise/transit/set for explicit coordinates")
    _add_common(riseset_parser)
    _add_site(riseset_parser)
    riseset_parser.add_argument("--ra", dest="ra_hours", type=float, required=True, help="Right ascension (hours)")
    riseset_parser.add_argument("--dec", dest="dec_deg", type=float, required=True, help="Declination (deg)")

    moon_parser = subparsers.add_parser("moon", help="Moon illumination percentage")
    _add_common(moon_parser)
    moon_parser.add_argument("--at", help="Instant (ISO-8601, default now; naive values are UTC)")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Skyward {__version__}")
        return 0

    if args.command == "doctor":
        return run_doctor(args)

    if args.command == "sky":
        return run_sky(args)

    if args.command == "riseset":
        return run_riseset(args)

    if args.command == "moon":
        return run_moon(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
