"""Shared protocol for last-selected-city storage backends."""

from typing import Optional, Protocol


class CityStore(Protocol):
    """Protocol for storing the city each user picked last."""

    def load(self, user_id: str) -> Optional[str]:
        """Return the stored city, or None if nothing is stored or it expired."""

    def save(self, user_id: str, city: str) -> None:
        """Store `city` as the user's current selection."""

    def delete(self, user_id: str) -> None:
        """Forget the user's selection without raising if it is absent."""

    def clear(self) -> None:
        """Forget every stored selection."""
