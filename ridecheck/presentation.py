"""Human-readable rendering of verdicts and of the rules behind them."""

from __future__ import annotations

from typing import Iterable, List

from ridecheck.domain import (
    CommuteWindow,
    DEFAULT_COMMUTE_WINDOW,
    DEFAULT_THRESHOLDS,
    SafetyLevel,
    SafetyThresholds,
    Verdict,
)
from ridecheck.forecast_service import RideReport

SAFE_HEADLINE = "It's safe to ride!"
UNSAFE_HEADLINE = "Not recommended to ride"


def headline(verdict: Verdict) -> str:
    return SAFE_HEADLINE if verdict.safe else UNSAFE_HEADLINE


def _fmt(value: float) -> str:
    return f"{value:g}"


def _clock(hour: int) -> str:
    """24h hour -> "8AM" / "4PM" / "12PM"."""
    suffix = "AM" if hour < 12 else "PM"
    h12 = hour % 12 or 12
    return f"{h12}{suffix}"


def _hour_bands(hours: Iterable[int]) -> List[str]:
    """Collapse sorted hours into contiguous bands: {8,9,16,17,18} -> ["8-9AM", "4-6PM"]."""
    ordered = sorted(set(hours))
    bands: List[tuple[int, int]] = []
    for h in ordered:
        if bands and h == bands[-1][1] + 1:
            bands[-1] = (bands[-1][0], h)
        else:
            bands.append((h, h))

    out = []
    for start, end in bands:
        if start == end:
            out.append(_clock(start))
        elif (start < 12) == (end < 12):
            out.append(f"{_clock(start)[:-2]}-{_clock(end)}")
        else:
            out.append(f"{_clock(start)}-{_clock(end)}")
    return out


def describe_commute_hours(window: CommuteWindow = DEFAULT_COMMUTE_WINDOW) -> str:
    bands = _hour_bands(window.morning_hours) + _hour_bands(window.evening_hours)
    return " and ".join(bands) if bands else "none"


def safety_criteria(
    window: CommuteWindow = DEFAULT_COMMUTE_WINDOW,
    thresholds: SafetyThresholds = DEFAULT_THRESHOLDS,
) -> List[str]:
    """Describe the rules in the order they are evaluated."""
    hours = describe_commute_hours(window)
    return [
        f"Temperature must be at least {_fmt(thresholds.cool_celsius)}°C during commute hours ({hours})",
        f"Below {_fmt(thresholds.cold_celsius)}°C: Not safe to ride",
        f"{_fmt(thresholds.cold_celsius)}-{_fmt(thresholds.cool_celsius)}°C: Ride with caution",
        f"No heavy rain (>{_fmt(thresholds.heavy_rain_mm)}mm per forecast slot) during commute hours",
        "Light rain during commute will show a caution warning",
        f"Wind above {_fmt(thresholds.strong_wind_kmh)} km/h at any time of day: Not safe to ride",
        f"Wind {_fmt(thresholds.moderate_wind_kmh)}-{_fmt(thresholds.strong_wind_kmh)} km/h: Ride with caution",
    ]


def format_verdict_markdown(report: RideReport) -> str:
    """Render a report as short markdown for chat/web clients."""
    verdict = report.verdict
    lines = [
        f"**{report.city}, {report.day.isoformat()}:** {headline(verdict)}",
    ]
    for warning in verdict.warnings:
        lines.append(f"- {warning}")
    return "\n".join(lines)


def format_verdict_text(report: RideReport) -> str:
    """Render a report as plain text for the terminal."""
    verdict = report.verdict
    marker = {
        SafetyLevel.SAFE: "[OK]",
        SafetyLevel.CAUTION: "[CAUTION]",
        SafetyLevel.UNSAFE: "[NO]",
    }[verdict.level]
    lines = [f"{marker} {report.city} {report.day.isoformat()}: {headline(verdict)}"]
    lines.extend(f"  ! {w}" for w in verdict.warnings)
    return "\n".join(lines)
