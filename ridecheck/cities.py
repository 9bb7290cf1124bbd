"""Catalogue of supported cities and name lookup."""

from __future__ import annotations

import unicodedata
from typing import List

from ridecheck.errors import UnknownCityError

ROMANIA_CITIES = (
    "Alba Iulia", "Arad", "Bacău", "Baia Mare", "Bistrița", "Botoșani", "Brăila", "Brașov", "București",
    "Buzău", "Călărași", "Cluj-Napoca", "Constanța", "Craiova", "Deva", "Drobeta-Turnu Severin",
    "Focșani", "Galați", "Giurgiu", "Iași", "Miercurea Ciuc", "Oradea", "Piatra Neamț", "Pitești",
    "Ploiești", "Râmnicu Vâlcea", "Reșița", "Roman", "Satu Mare", "Sfântu Gheorghe", "Sibiu",
    "Sighetu Marmației", "Slatina", "Slobozia", "Suceava", "Târgoviște", "Târgu Jiu", "Târgu Mureș",
    "Timișoara", "Tulcea", "Turda", "Vaslui", "Zalău",
)


def fold(name: str) -> str:
    """Lower-case and strip diacritics ("Brașov" -> "brasov")."""
    decomposed = unicodedata.normalize("NFKD", name.strip())
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def city_slug(name: str) -> str:
    """File-system friendly key for a city ("Cluj-Napoca" -> "cluj-napoca")."""
    return "-".join(fold(name).replace("-", " ").split())


_BY_FOLDED = {fold(c): c for c in ROMANIA_CITIES}


def search_cities(query: str | None = None) -> List[str]:
    """Return catalogue cities containing `query`, ignoring case and diacritics."""
    if not query or not query.strip():
        return list(ROMANIA_CITIES)
    needle = fold(query)
    return [c for c in ROMANIA_CITIES if needle in fold(c)]


def resolve_city(name: str) -> str:
    """Return the canonical spelling of `name` or raise UnknownCityError."""
    city = _BY_FOLDED.get(fold(name or ""))
    if city is None:
        raise UnknownCityError(name)
    return city
