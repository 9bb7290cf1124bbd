"""Last-selected-city facade over pluggable storage backends."""
from contextlib import contextmanager
from typing import Iterator, Optional

import redis

from ridecheck.cities import resolve_city
from ridecheck.city_store import CityStore, InMemoryCityStore, JsonFileCityStore, RedisCityStore
from ridecheck.config import settings
from ridecheck.errors import CityStoreError
from utils.logging_utils import get_tagged_logger, mask_secret_url

logger = get_tagged_logger(__name__, tag="city_manager")


def _init_store() -> CityStore:
    """Initialize the backing city store based on configuration."""
    if settings.city_redis_url:
        masked = mask_secret_url(settings.city_redis_url)
        try:
            client = redis.Redis.from_url(settings.city_redis_url)
            client.ping()
            logger.info("Using RedisCityStore", extra={"redis_url": masked})
            return RedisCityStore(client, ttl_seconds=settings.city_ttl_seconds)
        except (redis.RedisError, ValueError) as exc:
            logger.warning("Redis unavailable for city storage; falling back", extra={"redis_url": masked, "error": str(exc)})
    if settings.city_store_path:
        logger.info("Using JsonFileCityStore", extra={"path": settings.city_store_path})
        return JsonFileCityStore(settings.city_store_path)
    logger.debug("Using InMemoryCityStore")
    return InMemoryCityStore(ttl_seconds=settings.city_ttl_seconds)


_store: CityStore = _init_store()


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Re-raise backend failures as CityStoreError."""
    try:
        yield
    except (OSError, redis.RedisError) as exc:
        logger.error("City store failure", extra={"action": action, "store": type(_store).__name__, "error": str(exc)})
        raise CityStoreError(f"Could not {action} the selected city: {exc}") from exc


def use_in_memory_store_for_tests(ttl_seconds: int | None = None) -> None:
    """Override store for tests to ensure isolation and determinism."""
    global _store
    _store = InMemoryCityStore(ttl_seconds=ttl_seconds)


def use_store(store: CityStore) -> None:
    """Swap in a specific backend (CLI --store-path, tests)."""
    global _store
    _store = store


def get_last_city(user_id: str | None = None) -> Optional[str]:
    """Return the user's stored city, or None when nothing valid is stored."""
    with _store_errors("load"):
        stored = _store.load(user_id or settings.default_user)
    if not stored:
        return None
    try:
        return resolve_city(stored)
    except LookupError:
        logger.warning("Ignoring stored city that is no longer supported", extra={"city": stored})
        return None


def remember_city(city: str, user_id: str | None = None) -> str:
    """Resolve `city` to its canonical name, store it, and return it."""
    canonical = resolve_city(city)
    with _store_errors("save"):
        _store.save(user_id or settings.default_user, canonical)
    logger.debug("Stored selected city", extra={"city": canonical})
    return canonical


def forget_city(user_id: str | None = None) -> None:
    with _store_errors("delete"):
        _store.delete(user_id or settings.default_user)


def clear_cities() -> None:
    """Clear all stored selections from the backing store (dev/testing)."""
    with _store_errors("clear"):
        _store.clear()
