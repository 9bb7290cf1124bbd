"""Error taxonomy shared by the evaluator, the provider clients and the callers."""

from __future__ import annotations


class RideCheckError(Exception):
    """Base class for every error raised by ridecheck."""


class PreconditionViolation(RideCheckError, ValueError):
    """Evaluator input is empty or has no sample inside the commute window."""


class ConfigurationError(RideCheckError):
    """A required setting is missing or names an unknown backend."""


class ProviderError(RideCheckError):
    """The weather provider answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ForecastParseError(RideCheckError, ValueError):
    """The provider payload is missing fields or carries non-numeric values."""


class UnknownCityError(RideCheckError, LookupError):
    """The requested city is not in the supported catalogue."""

    def __init__(self, city: str) -> None:
        super().__init__(f"Unknown city: {city}")
        self.city = city


class CityStoreError(RideCheckError):
    """The selected-city backend (file or Redis) could not be read or written."""
