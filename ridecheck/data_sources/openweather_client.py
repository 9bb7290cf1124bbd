"""Helpers for fetching the 5-day / 3-hour forecast from OpenWeatherMap."""
from __future__ import annotations

import datetime as dt
import math
from typing import Any, List, Mapping
from zoneinfo import ZoneInfo

import requests
import requests_cache
from pydantic import ValidationError
from retry_requests import retry

from ridecheck.config import settings
from ridecheck.domain import ForecastEntry
from ridecheck.errors import ConfigurationError, ForecastParseError, ProviderError
from utils.logging_utils import get_tagged_logger, mask_secret_url

logger = get_tagged_logger(__name__, tag="openweather_client")

cache_session = requests_cache.CachedSession(".ridecheck_cache", expire_after=settings.cache_expire_seconds)
session = retry(cache_session, retries=3, backoff_factor=0.2)

FORECAST_PATH = "/forecast"


def _number(value: Any, field: str, index: int) -> float:
    """Coerce a provider number, rejecting missing, non-numeric and non-finite values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ForecastParseError(f"Forecast entry {index}: '{field}' is missing or not a number ({value!r})")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    # json accepts NaN and Infinity literals
    if not math.isfinite(number):
        raise ForecastParseError(f"Forecast entry {index}: '{field}' is not a finite number ({value!r})")
    return number


def _section(item: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = item.get(key)
    return section if isinstance(section, Mapping) else {}


def parse_forecast_entry(item: Mapping[str, Any], index: int, tz: ZoneInfo) -> ForecastEntry:
    """Validate one `list[]` item of the forecast payload."""
    if not isinstance(item, Mapping):
        raise ForecastParseError(f"Forecast entry {index} is not an object")

    timestamp = _number(item.get("dt"), "dt", index)
    temp = _number(_section(item, "main").get("temp"), "main.temp", index)
    wind = _number(_section(item, "wind").get("speed"), "wind.speed", index)

    pop_raw = item.get("pop")
    pop = 0.0 if pop_raw is None else _number(pop_raw, "pop", index)
    rain_raw = _section(item, "rain").get("3h")
    rain = 0.0 if rain_raw is None else _number(rain_raw, "rain.3h", index)

    try:
        return ForecastEntry(
            time=dt.datetime.fromtimestamp(timestamp, tz=tz),
            temperature_kelvin=temp,
            wind_speed_ms=wind,
            rain_probability=pop,
            rain_volume_mm=rain,
        )
    except (ValidationError, OverflowError, OSError) as exc:
        raise ForecastParseError(f"Forecast entry {index} is out of range: {exc}") from exc


def parse_forecast_payload(payload: Any, timezone: str = "Europe/Bucharest") -> List[ForecastEntry]:
    """Turn an OpenWeatherMap forecast payload into ordered ForecastEntry objects."""
    if not isinstance(payload, Mapping):
        raise ForecastParseError("Forecast payload is not a JSON object")
    items = payload.get("list")
    if not isinstance(items, list):
        raise ForecastParseError("Forecast payload has no 'list' array")

    tz = ZoneInfo(timezone)
    entries = [parse_forecast_entry(item, i, tz) for i, item in enumerate(items)]
    entries.sort(key=lambda e: e.time)
    logger.debug("Parsed forecast payload", extra={"entries": len(entries), "timezone": timezone})
    return entries


def _error_message(resp: requests.Response) -> str:
    """Return the provider's error message, falling back to the HTTP reason."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, Mapping) and data.get("message"):
        return str(data["message"])
    return resp.reason or f"HTTP {resp.status_code}"


def fetch_forecast(
    city: str,
    *,
    country_code: str = "ro",
    api_key: str | None = None,
    base_url: str = "https://api.openweathermap.org/data/2.5",
    timezone: str = "Europe/Bucharest",
    timeout: float = 10.0,
) -> List[ForecastEntry]:
    """Fetch the 3-hourly forecast for `city` and return validated entries."""
    if not api_key:
        raise ConfigurationError("Weather API key is not configured")

    params = {"q": f"{city},{country_code}", "appid": api_key}
    url = base_url.rstrip("/") + FORECAST_PATH

    resp = session.get(url, params=params, timeout=timeout)
    logger.info(
        "OpenWeatherMap forecast response",
        extra={"url": mask_secret_url(getattr(resp, "url", url) or url), "status": resp.status_code},
    )
    if not resp.ok:
        message = _error_message(resp)
        logger.warning("OpenWeatherMap request failed", extra={"city": city, "status": resp.status_code})
        raise ProviderError(message, status_code=resp.status_code)

    try:
        payload = resp.json()
    except ValueError as exc:
        raise ForecastParseError("Forecast response is not valid JSON") from exc
    return parse_forecast_payload(payload, timezone)
