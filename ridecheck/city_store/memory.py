"""In-memory city store with optional TTL, intended for development and tests."""

import threading
import time
from typing import Optional

from ridecheck.city_store.base import CityStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="city_store/in_memory_city_store")


class InMemoryCityStore(CityStore):
    """Thread-safe in-memory store; selections vanish with the process."""

    def __init__(self, ttl_seconds: int | None = None) -> None:
        """Initialize the store; `ttl_seconds=None` keeps selections forever."""
        logger.debug("Initializing InMemoryCityStore")
        self.ttl = ttl_seconds
        self._cities: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()

    def _expiry(self) -> float | None:
        if self.ttl is None:
            return None
        return time.monotonic() + self.ttl

    def load(self, user_id: str) -> Optional[str]:
        """Return the stored city, dropping it if its TTL has passed."""
        with self._lock:
            entry = self._cities.get(user_id)
            if entry is None:
                return None
            city, exp = entry
            if exp is not None and exp < time.monotonic():
                self._cities.pop(user_id, None)
                return None
            return city

    def save(self, user_id: str, city: str) -> None:
        with self._lock:
            self._cities[user_id] = (city, self._expiry())

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._cities.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._cities.clear()
