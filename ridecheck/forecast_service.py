"""Turn provider forecast entries into evaluator samples and run the safety check."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ridecheck.data_sources import ForecastDataSource, build_data_source
from ridecheck.domain import (
    CategoryFinding,
    CommuteWindow,
    DEFAULT_COMMUTE_WINDOW,
    DEFAULT_THRESHOLDS,
    ForecastEntry,
    Sample,
    SafetyThresholds,
    Verdict,
)
from ridecheck.errors import PreconditionViolation
from ridecheck.safety_evaluator import assess_categories, verdict_from_findings
from ridecheck.units import to_celsius, to_kmh
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="forecast_service")


@dataclass
class RideReport:
    """Verdict for one city and day, with the samples it was computed from."""
    city: str
    day: dt.date
    samples: List[Sample]
    verdict: Verdict
    findings: List[CategoryFinding] = field(default_factory=list)


def to_sample(entry: ForecastEntry) -> Sample:
    """Convert a provider entry to rider units; values are rounded once, here."""
    return Sample(
        hour_of_day=entry.time.hour,
        temperature_celsius=to_celsius(entry.temperature_kelvin),
        rain_probability=entry.rain_probability,
        rain_volume_mm=entry.rain_volume_mm,
        wind_speed_kmh=to_kmh(entry.wind_speed_ms),
    )


def select_forecast_day(
    entries: Sequence[ForecastEntry],
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    day: Optional[dt.date] = None,
) -> dt.date:
    """
    Pick the local date to evaluate.

    An explicit `day` wins. Otherwise the earliest date with at least one slot
    inside the commute window is used, so a late-evening check rolls over to
    tomorrow instead of evaluating an empty window.
    """
    if day is not None:
        return day
    for entry in sorted(entries, key=lambda e: e.time):
        if window.contains(entry.time.hour):
            return entry.time.date()
    raise PreconditionViolation("No forecast slot falls inside the commute hours")


def build_samples(entries: Sequence[ForecastEntry], day: dt.date) -> List[Sample]:
    """Return samples for the entries whose local date is `day`, in time order."""
    return [to_sample(e) for e in sorted(entries, key=lambda e: e.time) if e.time.date() == day]


def evaluate_entries(
    city: str,
    entries: Sequence[ForecastEntry],
    *,
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
    day: Optional[dt.date] = None,
) -> RideReport:
    """Evaluate already-fetched forecast entries for one city."""
    if not entries:
        raise PreconditionViolation(f"No forecast data available for {city}")

    target_day = select_forecast_day(entries, window, day)
    samples = build_samples(entries, target_day)
    findings = assess_categories(samples, window, thresholds)
    verdict = verdict_from_findings(findings)

    logger.info(
        "Evaluated ride safety",
        extra={
            "city": city,
            "day": target_day.isoformat(),
            "samples": len(samples),
            "safe": verdict.safe,
            "warnings": len(verdict.warnings),
        },
    )
    return RideReport(city=city, day=target_day, samples=samples, verdict=verdict, findings=findings)


def check_city(
    city: str,
    *,
    data_source: ForecastDataSource | None = None,
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
    day: Optional[dt.date] = None,
    country_code: str = "ro",
) -> RideReport:
    """
    Fetch the forecast for `city` and evaluate it.

    Provider and parse errors propagate unchanged; a partially fetched forecast
    is never evaluated.
    """
    ds = data_source or build_data_source()
    logger.info("Fetching forecast", extra={"city": city, "country_code": country_code})
    entries = ds.fetch_forecast(city, country_code=country_code)
    return evaluate_entries(city, entries, window=window, thresholds=thresholds, day=day)
