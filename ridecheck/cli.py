"""Command-line motorcycle commute weather check."""

from __future__ import annotations

import argparse
import datetime as dt
import json
import sys
from typing import Sequence

from ridecheck import city_manager
from ridecheck.cities import search_cities
from ridecheck.city_store import JsonFileCityStore
from ridecheck.config import settings
from ridecheck.data_sources import JsonFileForecastSource, build_data_source
from ridecheck.errors import RideCheckError
from ridecheck.forecast_service import RideReport, check_city
from ridecheck.presentation import describe_commute_hours, format_verdict_text, safety_criteria
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="cli")

EXIT_SAFE = 0
EXIT_UNSAFE = 1
EXIT_ERROR = 2


def _parse_day(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ridecheck", description=__doc__)
    # Logs go to stderr; stdout carries only the report.
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: %(default)s)")
    parser.add_argument(
        "--store-path",
        default=settings.city_store_path,
        help="JSON file remembering the last selected city",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Evaluate the commute forecast for a city")
    check.add_argument("city", nargs="?", help="City name; defaults to the last selected city")
    check.add_argument("--day", type=_parse_day, help="Local date to evaluate (YYYY-MM-DD)")
    check.add_argument("--forecast-dir", help="Read saved forecast payloads from this directory instead of the API")
    check.add_argument("--json", action="store_true", help="Print the report as JSON")

    cities = sub.add_parser("cities", help="List or search supported cities")
    cities.add_argument("query", nargs="?", default=None)

    sub.add_parser("criteria", help="Show the safety rules in effect")
    return parser


def _report_json(report: RideReport) -> str:
    verdict = report.verdict
    return json.dumps(
        {
            "city": report.city,
            "day": report.day.isoformat(),
            "safe": verdict.safe,
            "level": verdict.level.value,
            "warnings": list(verdict.warnings),
            "samples": [s.model_dump() for s in report.samples],
        },
        ensure_ascii=False,
        indent=2,
    )


def _run_check(args: argparse.Namespace) -> int:
    if args.city:
        city = city_manager.remember_city(args.city)
    else:
        city = city_manager.get_last_city()
        if not city:
            print("No city given and no city selected yet.", file=sys.stderr)
            return EXIT_ERROR

    if args.forecast_dir:
        data_source = JsonFileForecastSource(args.forecast_dir, timezone=settings.timezone)
    else:
        data_source = build_data_source(settings)

    report = check_city(
        city,
        data_source=data_source,
        window=settings.commute_window(),
        day=args.day,
        country_code=settings.country_code,
    )
    print(_report_json(report) if args.json else format_verdict_text(report))
    return EXIT_SAFE if report.verdict.safe else EXIT_UNSAFE


def _run_cities(args: argparse.Namespace) -> int:
    matches = search_cities(args.query)
    for city in matches:
        print(city)
    return EXIT_SAFE if matches else EXIT_ERROR


def _run_criteria(_args: argparse.Namespace) -> int:
    window = settings.commute_window()
    print(f"Commute hours: {describe_commute_hours(window)}")
    for line in safety_criteria(window):
        print(f"- {line}")
    return EXIT_SAFE


_COMMANDS = {
    "check": _run_check,
    "cities": _run_cities,
    "criteria": _run_criteria,
}


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level.upper(), job_name="ridecheck-cli", stdout_logs=False)

    if args.store_path:
        city_manager.use_store(JsonFileCityStore(args.store_path))

    try:
        return _COMMANDS[args.command](args)
    except RideCheckError as exc:
        logger.debug("Command failed", extra={"command": args.command, "error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
