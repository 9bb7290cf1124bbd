"""HTTP API for the motorcycle commute weather check."""

import hmac
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel

from .cities import search_cities
from .city_manager import get_last_city, remember_city
from .config import settings
from .data_sources import build_data_source
from .domain import CategoryFinding, Sample, SafetyLevel
from .errors import (
    CityStoreError,
    ConfigurationError,
    ForecastParseError,
    PreconditionViolation,
    ProviderError,
    RideCheckError,
    UnknownCityError,
)
from .forecast_service import RideReport, check_city
from .presentation import describe_commute_hours, format_verdict_markdown, headline, safety_criteria
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="ridecheck/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the static api_key setting, when one is set."""
    if not settings.api_key:
        logger.debug("No API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
DATA_SOURCE = build_data_source(settings)


class CitiesResponse(BaseModel):
    """Cities matching a search query, in catalogue order."""
    cities: List[str]


class CriteriaResponse(BaseModel):
    """Rules applied by the safety check."""
    commute_hours: List[int]
    commute_description: str
    criteria: List[str]


class SelectionRequest(BaseModel):
    """Incoming city selection."""
    city: str


class SelectionResponse(BaseModel):
    """Currently stored city selection."""
    city: Optional[str] = None


class RideCheckResponse(BaseModel):
    """Verdict for a city/day plus the samples it was computed from."""
    city: str
    day: date
    safe: bool
    level: SafetyLevel
    headline: str
    warnings: List[str]
    findings: List[CategoryFinding]
    samples: List[Sample]
    summary_markdown: str


_ERROR_STATUS = (
    (UnknownCityError, status.HTTP_404_NOT_FOUND),
    (PreconditionViolation, 422),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (ForecastParseError, status.HTTP_502_BAD_GATEWAY),
    (CityStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _http_error(exc: RideCheckError) -> HTTPException:
    """Map a ridecheck error onto the HTTP status the client sees."""
    for exc_type, code in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _report_response(report: RideReport) -> RideCheckResponse:
    verdict = report.verdict
    return RideCheckResponse(
        city=report.city,
        day=report.day,
        safe=verdict.safe,
        level=verdict.level,
        headline=headline(verdict),
        warnings=list(verdict.warnings),
        findings=list(report.findings),
        samples=list(report.samples),
        summary_markdown=format_verdict_markdown(report),
    )


@router.get("/cities", response_model=CitiesResponse)
def list_cities(q: Optional[str] = Query(default=None, max_length=64)):
    """Search the supported cities."""
    return CitiesResponse(cities=search_cities(q))


@router.get("/criteria", response_model=CriteriaResponse)
def get_criteria():
    """Describe the safety rules and commute hours in effect."""
    window = settings.commute_window()
    return CriteriaResponse(
        commute_hours=sorted(window.hours),
        commute_description=describe_commute_hours(window),
        criteria=safety_criteria(window),
    )


@router.get("/selection", response_model=SelectionResponse)
def get_selection():
    """Return the last selected city, if any."""
    try:
        return SelectionResponse(city=get_last_city())
    except RideCheckError as exc:
        raise _http_error(exc)


@router.put("/selection", response_model=SelectionResponse)
def set_selection(req: SelectionRequest):
    """Store a new city selection."""
    try:
        city = remember_city(req.city)
    except RideCheckError as exc:
        raise _http_error(exc)
    logger.info(f"Selected city: {city}")
    return SelectionResponse(city=city)


@router.get("/ride-check", response_model=RideCheckResponse)
def ride_check(city: Optional[str] = None, day: Optional[date] = None):
    """Evaluate today's (or `day`'s) commute for a city, defaulting to the stored selection."""
    try:
        if city:
            chosen = remember_city(city)
        else:
            chosen = get_last_city()
            if not chosen:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST,
                                    detail="No city given and no city selected yet.")

        window = settings.commute_window()
        report = check_city(
            chosen,
            data_source=DATA_SOURCE,
            window=window,
            day=day,
            country_code=settings.country_code,
        )
    except RideCheckError as exc:
        logger.warning("Ride check failed", extra={"city": city, "error": str(exc)})
        raise _http_error(exc)

    return _report_response(report)
