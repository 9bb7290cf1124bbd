"""Data source factories for plugging different forecast backends."""

from .base import CallableForecastDataSource, ForecastDataSource
from .factory import build_data_source
from .file_source import JsonFileForecastSource
from .openweather_client import fetch_forecast, parse_forecast_payload

__all__ = [
    "build_data_source",
    "CallableForecastDataSource",
    "ForecastDataSource",
    "JsonFileForecastSource",
    "fetch_forecast",
    "parse_forecast_payload",
]
