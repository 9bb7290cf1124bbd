"""Deterministic commute safety evaluation.

Takes normalized forecast samples for one day and a commute window, applies the
temperature, rain and wind rules in that order, and returns a Verdict. Nothing
here fetches, converts or renders; inputs are never modified.
"""

from __future__ import annotations

from typing import List, Sequence

from ridecheck.domain import (
    Category,
    CategoryFinding,
    CommuteWindow,
    DEFAULT_COMMUTE_WINDOW,
    DEFAULT_THRESHOLDS,
    Sample,
    SafetyLevel,
    SafetyThresholds,
    Verdict,
)
from ridecheck.errors import PreconditionViolation


def _fmt_number(value: float) -> str:
    """Render the compared value exactly: 4.0 -> '4', 4.1234567 -> '4.1234567'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _commute_samples(samples: Sequence[Sample], window: CommuteWindow) -> List[Sample]:
    """Return the samples whose hour of day falls inside the commute window."""
    return [s for s in samples if window.contains(s.hour_of_day)]


def _require_commute_samples(samples: Sequence[Sample], window: CommuteWindow) -> List[Sample]:
    if not samples:
        raise PreconditionViolation("At least one forecast sample is required")
    commute = _commute_samples(samples, window)
    if not commute:
        hours = ", ".join(str(h) for h in sorted(window.hours))
        raise PreconditionViolation(f"No forecast sample falls inside the commute hours ({hours})")
    return commute


def check_temperature(
    samples: Sequence[Sample],
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> CategoryFinding:
    """Judge the coldest commute slot."""
    commute = _require_commute_samples(samples, window)
    min_temp = min(s.temperature_celsius for s in commute)

    if min_temp < thresholds.cold_celsius:
        return CategoryFinding(
            category=Category.TEMPERATURE,
            level=SafetyLevel.UNSAFE,
            warning=f"Temperature too low during commute: {_fmt_number(min_temp)}°C",
            value=min_temp,
        )
    if min_temp < thresholds.cool_celsius:
        return CategoryFinding(
            category=Category.TEMPERATURE,
            level=SafetyLevel.CAUTION,
            warning=f"Cool temperature during commute: {_fmt_number(min_temp)}°C - ride with caution",
            value=min_temp,
        )
    return CategoryFinding(category=Category.TEMPERATURE, level=SafetyLevel.SAFE, value=min_temp)


def check_rain(
    samples: Sequence[Sample],
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> CategoryFinding:
    """Judge rain volume in the commute slots; heavy rain shadows light rain."""
    commute = _require_commute_samples(samples, window)
    max_volume = max(s.rain_volume_mm for s in commute)

    if max_volume > thresholds.heavy_rain_mm:
        return CategoryFinding(
            category=Category.RAIN,
            level=SafetyLevel.UNSAFE,
            warning="Heavy rain during commute hours",
            value=max_volume,
        )
    if max_volume > 0:
        return CategoryFinding(
            category=Category.RAIN,
            level=SafetyLevel.CAUTION,
            warning="Light rain during commute - ride with caution",
            value=max_volume,
        )
    return CategoryFinding(category=Category.RAIN, level=SafetyLevel.SAFE, value=max_volume)


def check_wind(
    samples: Sequence[Sample],
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> CategoryFinding:
    """Judge the strongest wind of the whole day, commute window or not."""
    if not samples:
        raise PreconditionViolation("At least one forecast sample is required")
    max_wind = max(s.wind_speed_kmh for s in samples)

    if max_wind > thresholds.strong_wind_kmh:
        return CategoryFinding(
            category=Category.WIND,
            level=SafetyLevel.UNSAFE,
            warning=f"Strong winds: {_fmt_number(max_wind)} km/h",
            value=max_wind,
        )
    if max_wind >= thresholds.moderate_wind_kmh:
        return CategoryFinding(
            category=Category.WIND,
            level=SafetyLevel.CAUTION,
            warning=f"Moderate winds: {_fmt_number(max_wind)} km/h - ride with caution",
            value=max_wind,
        )
    return CategoryFinding(category=Category.WIND, level=SafetyLevel.SAFE, value=max_wind)


def assess_categories(
    samples: Sequence[Sample],
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> List[CategoryFinding]:
    """Run every rule category in evaluation order: temperature, rain, wind."""
    _require_commute_samples(samples, window)
    return [
        check_temperature(samples, window, thresholds),
        check_rain(samples, window, thresholds),
        check_wind(samples, thresholds),
    ]


def verdict_from_findings(findings: Sequence[CategoryFinding]) -> Verdict:
    """Fold category findings into a Verdict, keeping their order."""
    safe = all(f.level != SafetyLevel.UNSAFE for f in findings)
    warnings = [f.warning for f in findings if f.warning]
    return Verdict(safe=safe, warnings=warnings)


def evaluate_ride_safety(
    samples: Sequence[Sample],
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> Verdict:
    """
    Decide whether the day's forecast is safe for a motorcycle commute.

    Raises PreconditionViolation when `samples` is empty or none of them falls
    inside `window`.
    """
    return verdict_from_findings(assess_categories(samples, window, thresholds))
