"""
Central logging configuration utilities.

Usage
-----
In an entrypoint (API server, CLI):

    from utils.logging_utils import setup_logging

    def main() -> None:
        setup_logging(level="INFO", job_name="ridecheck-cli", stdout_logs=False)
        ...

In a module:

    from utils.logging_utils import get_tagged_logger

    logger = get_tagged_logger(__name__, tag="openweather_client")

    def fetch_forecast() -> None:
        logger.info("Fetching forecast")

Every record carries `job_name` and `tag` fields so the API server and the CLI
produce the same line layout. The weather API key travels in the request query
string, so URLs are masked before they reach a log line.
"""

from __future__ import annotations

import logging
import logging.config
import re
from typing import Any, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


# Records emitted before setup_logging() still get timestamps and levels.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(job_name)s | %(tag)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Query parameters whose values never reach a log line.
SENSITIVE_QUERY_TOKENS = ("appid", "key", "token", "secret", "pass")

# HTTP client loggers; they echo full request URLs at DEBUG.
THIRD_PARTY_LOGGERS = ("urllib3", "requests_cache")

_CONFIGURED: bool = False


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

class MaxLevelFilter(logging.Filter):
    """Allow only records up to (and including) `max_level`."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        return record.levelno <= self.max_level


class RecordContextFilter(logging.Filter):
    """
    Fill in the `tag` and `job_name` fields the formatter expects.

    Records from a tagged adapter keep their tag; third-party records
    (uvicorn, urllib3) get the last segment of their logger name.
    """

    def __init__(self, job_name: Optional[str] = None) -> None:
        super().__init__()
        self.job_name = job_name or "-"

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "tag"):
            record.tag = record.name.split(".")[-1] if record.name else "-"
        if not hasattr(record, "job_name"):
            record.job_name = self.job_name
        return True


class RedactSecretsFilter(logging.Filter):
    """Mask secret query values (`appid=...`) inside already-formatted messages."""

    _PATTERN = re.compile(
        r"((?:%s)[a-z_]*=)[^&\s\"']+" % "|".join(SENSITIVE_QUERY_TOKENS),
        re.IGNORECASE,
    )

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # left for the handler to report through handleError
            return True
        redacted = self._PATTERN.sub(r"\1***", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


# ---------------------------------------------------------------------------
# Config builder and setup function
# ---------------------------------------------------------------------------


def _level_number(level: str | int) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level).upper())
    return number if isinstance(number, int) else logging.INFO


def build_logging_config(
    *,
    level: str | int = "INFO",
    job_name: Optional[str] = None,
    stdout_logs: bool = True,
) -> Mapping[str, Any]:
    """
    Build a dictConfig-style logging configuration.

    With `stdout_logs` (the API server) DEBUG/INFO go to stdout and WARNING+
    to stderr. Without it (the CLI) every record goes to stderr, leaving
    stdout to the ride report. HTTP client loggers are held at WARNING
    unless `level` is DEBUG.
    """
    level_no = _level_number(level)
    common_filters = ["context", "redact"]

    handlers: dict[str, Any] = {
        "stderr": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "filters": common_filters,
            "level": "WARNING" if stdout_logs else "DEBUG",
            "stream": "ext://sys.stderr",
        },
    }
    if stdout_logs:
        handlers["stdout"] = {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "filters": common_filters + ["stdout_max_info"],
            "level": "DEBUG",
            "stream": "ext://sys.stdout",
        }

    loggers = {}
    if level_no > logging.DEBUG:
        loggers = {name: {"level": "WARNING"} for name in THIRD_PARTY_LOGGERS}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "context": {"()": RecordContextFilter, "job_name": job_name},
            "redact": {"()": RedactSecretsFilter},
            "stdout_max_info": {"()": MaxLevelFilter, "max_level": logging.INFO},
        },
        "formatters": {
            "standard": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "level": level_no,
            "handlers": sorted(handlers),
        },
    }


def setup_logging(
    *,
    level: str | int = "INFO",
    job_name: Optional[str] = None,
    stdout_logs: bool = True,
    override_existing: bool = False,
) -> None:
    """
    Configure application-wide logging once per process.

    Repeated calls are a no-op unless `override_existing` is True.
    """
    global _CONFIGURED

    if _CONFIGURED and not override_existing:
        return

    logging.config.dictConfig(
        build_logging_config(level=level, job_name=job_name, stdout_logs=stdout_logs)
    )
    _CONFIGURED = True


# ---------------------------------------------------------------------------
# Logger helpers
# ---------------------------------------------------------------------------


def get_tagged_logger(
    name: str,
    *,
    tag: Optional[str] = None,
) -> logging.LoggerAdapter:
    """
    Return a LoggerAdapter that always carries a `tag` field.

    If `tag` is omitted it defaults to the last segment of `name`,
    e.g. "ridecheck.data_sources.openweather_client" -> "openweather_client".
    """
    base_logger = logging.getLogger(name)
    if tag is None:
        tag = name.split(".")[-1]
    return logging.LoggerAdapter(base_logger, {"tag": tag})


def mask_secret_url(url: str) -> str:
    """Return a copy of a URL with credentials and secret query values masked.

    Examples
    --------
    - https://api.openweathermap.org/data/2.5/forecast?q=Arad,ro&appid=abc
      -> https://api.openweathermap.org/data/2.5/forecast?q=Arad%2Cro&appid=%2A%2A%2A
    - redis://:secret@localhost:6379/0 -> redis://:***@localhost:6379/0
    """
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return url

    masked_query = urlencode([
        (key, "***" if any(token in key.lower() for token in SENSITIVE_QUERY_TOKENS) else value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
    ])

    credentials = ""
    if parsed.username:
        credentials = "***"
    if parsed.password is not None:
        credentials += ":***"
    netloc = f"{credentials}@" if credentials else ""
    netloc += parsed.hostname or ""
    if port:
        netloc += f":{port}"

    return urlunparse((parsed.scheme, netloc, parsed.path, parsed.params, masked_query, parsed.fragment))
