"""Application configuration pulled from environment variables via pydantic."""
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ridecheck.domain import CommuteWindow
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the ridecheck service and CLI."""
    model_config = SettingsConfigDict(env_prefix="RIDECHECK_", extra="ignore")

    app_name: str = "Motorcycle Weather Check"
    version: str = "0.1.0"
    log_level: str = "INFO"

    forecast_source: str = "openweather"  # options: openweather, file
    forecast_file_dir: str = "./forecasts"
    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    country_code: str = "ro"
    timezone: str = "Europe/Bucharest"
    request_timeout_seconds: float = 10.0
    cache_expire_seconds: int = 600

    # Hours of day (local time) that count as commute slots.
    commute_morning_hours: List[int] = [8, 9]
    commute_evening_hours: List[int] = [16, 17, 18]

    city_store_path: str | None = None
    city_redis_url: str | None = None
    city_ttl_seconds: int | None = None
    default_user: str = "default"

    api_key: str | None = None

    @field_validator("openweather_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("country_code", mode="after")
    @classmethod
    def lower_country_code(cls, v: str) -> str:
        return v.strip().lower()

    def commute_window(self) -> CommuteWindow:
        """Build the commute window policy from the configured hour bands."""
        return CommuteWindow(
            morning_hours=frozenset(self.commute_morning_hours),
            evening_hours=frozenset(self.commute_evening_hours),
        )


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key', 'api_key'})}")
