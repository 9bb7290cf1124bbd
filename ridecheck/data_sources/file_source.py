"""Forecast source reading saved OpenWeatherMap payloads from disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from ridecheck.cities import city_slug
from ridecheck.data_sources.base import ForecastDataSource
from ridecheck.data_sources.openweather_client import parse_forecast_payload
from ridecheck.domain import ForecastEntry
from ridecheck.errors import ForecastParseError, ProviderError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/file_source")


class JsonFileForecastSource(ForecastDataSource):
    """Serve `<directory>/<city-slug>.json` files holding raw forecast payloads."""

    def __init__(self, directory: str | Path, *, timezone: str = "Europe/Bucharest") -> None:
        self.directory = Path(directory)
        self.timezone = timezone

    def path_for(self, city: str) -> Path:
        return self.directory / f"{city_slug(city)}.json"

    def fetch_forecast(self, city: str, *, country_code: str = "ro") -> List[ForecastEntry]:
        path = self.path_for(city)
        if not path.is_file():
            raise ProviderError(f"No saved forecast for {city}", status_code=404)
        logger.debug("Reading saved forecast", extra={"path": str(path), "country_code": country_code})
        with path.open("r", encoding="utf-8") as fh:
            try:
                payload = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ForecastParseError(f"{path.name} is not valid JSON") from exc
        return parse_forecast_payload(payload, self.timezone)
