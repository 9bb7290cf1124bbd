"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Protocol

from ridecheck.domain import ForecastEntry


class ForecastDataSource(Protocol):
    """Interface for anything that can provide a city's forecast entries."""

    def fetch_forecast(self, city: str, *, country_code: str = "ro") -> List[ForecastEntry]:
        """Return forecast entries ordered by time."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap a callable so providers can be swapped without subclassing."""

    forecast: Callable[..., List[ForecastEntry]]

    def fetch_forecast(self, city: str, *, country_code: str = "ro") -> List[ForecastEntry]:
        """Delegate to the configured forecast callable."""
        return self.forecast(city, country_code=country_code)
