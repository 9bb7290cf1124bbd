"""Domain vocabulary and strict schemas for ride safety checks.

This module defines the contract between the ingestion boundary, the safety
evaluator and the callers: enums, the commute window policy, the rule
thresholds and the Pydantic models for samples and verdicts. No evaluation
logic lives here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class _FrozenModel(BaseModel):
    """Immutable value object; instances are never modified after validation."""

    model_config = ConfigDict(extra="forbid", frozen=True, allow_inf_nan=False)


class SafetyLevel(str, Enum):
    """Outcome of a single rule category or of the whole day."""
    SAFE = "safe"
    CAUTION = "caution"
    UNSAFE = "unsafe"


class Category(str, Enum):
    """Rule categories, in the order they are evaluated."""
    TEMPERATURE = "temperature"
    RAIN = "rain"
    WIND = "wind"


class ForecastEntry(_FrozenModel):
    """One provider forecast slot, still in provider units."""
    time: datetime  # timezone-aware, local to the configured timezone
    temperature_kelvin: float
    wind_speed_ms: float = Field(ge=0.0)
    rain_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    rain_volume_mm: float = Field(default=0.0, ge=0.0)  # volume over the 3h slot


class Sample(_FrozenModel):
    """Normalized forecast slot consumed by the safety evaluator."""
    hour_of_day: int = Field(ge=0, le=23)
    temperature_celsius: float
    rain_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    rain_volume_mm: float = Field(default=0.0, ge=0.0)
    wind_speed_kmh: float = Field(default=0.0, ge=0.0)


class CommuteWindow(_FrozenModel):
    """Hours of day (local time) whose forecast slots count as commute slots."""
    morning_hours: FrozenSet[int] = frozenset({8, 9})
    evening_hours: FrozenSet[int] = frozenset({16, 17, 18})

    @field_validator("morning_hours", "evening_hours", mode="after")
    @classmethod
    def _hours_in_day(cls, v: FrozenSet[int]) -> FrozenSet[int]:
        bad = sorted(h for h in v if not 0 <= h <= 23)
        if bad:
            raise ValueError(f"commute hours must be within 0-23, got {bad}")
        return v

    @property
    def hours(self) -> FrozenSet[int]:
        return self.morning_hours | self.evening_hours

    def contains(self, hour_of_day: int) -> bool:
        return hour_of_day in self.hours


class SafetyThresholds(_FrozenModel):
    """Rule constants shared by the evaluator and the criteria text."""
    cold_celsius: float = 5.0         # below: unsafe
    cool_celsius: float = 10.0        # below: caution
    heavy_rain_mm: float = 7.0        # above, per slot: unsafe
    strong_wind_kmh: float = 50.0     # above: unsafe
    moderate_wind_kmh: float = 30.0   # at or above: caution


DEFAULT_COMMUTE_WINDOW = CommuteWindow()
DEFAULT_THRESHOLDS = SafetyThresholds()


class CategoryFinding(_FrozenModel):
    """Result of one rule category."""
    category: Category
    level: SafetyLevel
    warning: str | None = None
    value: float | None = None  # the min/max the rule compared


class Verdict(_StrictBaseModel):
    """Outcome of one evaluation: overall safety plus ordered warnings."""
    safe: bool
    warnings: List[str] = Field(default_factory=list)

    @property
    def level(self) -> SafetyLevel:
        if not self.safe:
            return SafetyLevel.UNSAFE
        if self.warnings:
            return SafetyLevel.CAUTION
        return SafetyLevel.SAFE
