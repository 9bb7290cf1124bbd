import os

import uvicorn

from ridecheck.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def warn_missing_api_key() -> None:
    """Log a clear message when forecasts cannot be fetched; the API still starts."""
    if settings.forecast_source == "openweather" and not settings.openweather_api_key:
        logger.warning("RIDECHECK_OPENWEATHER_API_KEY is not set; /v1/ride-check will return 500 until it is.")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="ridecheck-api")
    warn_missing_api_key()

    uvicorn.run(
        "ridecheck.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
