"""JSON-file city store: the on-disk equivalent of browser local storage."""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from ridecheck.city_store.base import CityStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="city_store/json_file_city_store")


class JsonFileCityStore(CityStore):
    """Keeps `{user_id: city}` in a single JSON file, rewritten atomically."""

    def __init__(self, path: str | Path) -> None:
        logger.debug("Initializing JsonFileCityStore", extra={"path": str(path)})
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        """Return the stored mapping; a missing or corrupt file reads as empty."""
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable city store file", extra={"path": str(self.path), "error": str(exc)})
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def load(self, user_id: str) -> Optional[str]:
        with self._lock:
            return self._read().get(user_id)

    def save(self, user_id: str, city: str) -> None:
        with self._lock:
            data = self._read()
            data[user_id] = city
            self._write(data)

    def delete(self, user_id: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(user_id, None) is not None:
                self._write(data)

    def clear(self) -> None:
        with self._lock:
            self._write({})
