"""Conversions from provider units (kelvin, m/s) to rider units (°C, km/h)."""

import math

KELVIN_OFFSET = 273.15
MS_TO_KMH = 3.6


def _round_half_up(value: float) -> float:
    """Round to the nearest whole number; halves go towards +infinity."""
    return float(math.floor(value + 0.5))


def to_celsius(kelvin: float) -> float:
    """Convert an absolute temperature to whole degrees Celsius."""
    return _round_half_up(kelvin - KELVIN_OFFSET)


def to_kmh(speed_ms: float) -> float:
    """Convert metres per second to whole kilometres per hour."""
    return _round_half_up(speed_ms * MS_TO_KMH)
