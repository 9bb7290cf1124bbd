"""Redis-backed city store with optional TTL."""

from typing import Optional

from ridecheck.city_store.base import CityStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="city_store/redis_city_store")


class RedisCityStore(CityStore):
    """Stores each user's city as a plain string under `<prefix><user_id>`."""

    def __init__(self, client, ttl_seconds: int | None = None, prefix: str = "ridecheck:city:") -> None:
        """Initialize with a Redis client, optional TTL, and key prefix."""
        logger.debug("Initializing RedisCityStore")
        self.client = client
        self.ttl = ttl_seconds
        self.prefix = prefix

    def _key(self, user_id: str) -> str:
        return f"{self.prefix}{user_id}"

    def load(self, user_id: str) -> Optional[str]:
        """Fetch the stored city, or None if missing or Redis is unreachable."""
        try:
            raw = self.client.get(self._key(user_id))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to read city from Redis: %s", exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return str(raw)

    def save(self, user_id: str, city: str) -> None:
        """Persist the city; write failures propagate to the caller."""
        payload = city.encode("utf-8")
        try:
            if self.ttl:
                self.client.setex(self._key(user_id), self.ttl, payload)
            else:
                self.client.set(self._key(user_id), payload)
        except Exception as exc:
            logger.error("Failed to write city to Redis: %s", exc)
            raise

    def delete(self, user_id: str) -> None:
        try:
            self.client.delete(self._key(user_id))
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to delete city from Redis: %s", exc)

    def clear(self) -> None:
        """Best-effort clear for all selections under the configured prefix."""
        try:
            for key in self.client.scan_iter(f"{self.prefix}*"):
                self.client.delete(key)
        except Exception as exc:  # pragma: no cover - defensive
            logger.error("Failed to clear cities from Redis: %s", exc)
