"""Factory helpers for choosing a forecast data source at startup."""

from __future__ import annotations

from functools import partial

from ridecheck import config
from ridecheck.data_sources.base import CallableForecastDataSource, ForecastDataSource
from ridecheck.data_sources.openweather_client import fetch_forecast
from ridecheck.errors import ConfigurationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "openweather"


def build_data_source(settings: config.Settings | None = None) -> ForecastDataSource:
    """Instantiate the configured forecast data source."""
    settings = settings or config.settings
    source = (settings.forecast_source or DEFAULT_SOURCE_NAME).lower()

    if source == "openweather":
        if not settings.openweather_api_key:
            logger.warning("No OpenWeatherMap API key configured; forecast requests will fail")
        logger.info("Using OpenWeatherMap data source")
        return CallableForecastDataSource(
            forecast=partial(
                fetch_forecast,
                api_key=settings.openweather_api_key,
                base_url=settings.openweather_base_url,
                timezone=settings.timezone,
                timeout=settings.request_timeout_seconds,
            )
        )

    if source == "file":
        from .file_source import JsonFileForecastSource

        directory = settings.forecast_file_dir
        if not directory:
            raise ConfigurationError("forecast_file_dir must be set for the file data source")
        logger.info("Using saved-forecast file data source", extra={"directory": directory})
        return JsonFileForecastSource(directory, timezone=settings.timezone)

    raise ConfigurationError(f"Unknown forecast source '{source}'")
