"""Storage backends for the last selected city."""

from .base import CityStore
from .file import JsonFileCityStore
from .memory import InMemoryCityStore
from .redis import RedisCityStore

__all__ = [
    "CityStore",
    "InMemoryCityStore",
    "JsonFileCityStore",
    "RedisCityStore",
]
