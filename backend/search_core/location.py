"""City / "near me" detection, geocoding with fallback, and search radius parsing."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, NamedTuple

from .cache import TTLCache
from .geocoding import GeocodeFailure, GeocodingClient
from .settings import settings
from .text import latinize, strip_diacritics
from .types import (
    Coordinates,
    GeocodeResult,
    LocationContext,
    LocationParameters,
    LocationType,
)

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


class FallbackCity(NamedTuple):
    latitude: float
    longitude: float
    name: str


FALLBACK_CITIES: dict[str, FallbackCity] = {
    "zagreb": FallbackCity(45.815, 15.9819, "Zagreb"),
    "split": FallbackCity(43.5081, 16.4402, "Split"),
    "rijeka": FallbackCity(45.3271, 14.4422, "Rijeka"),
    "osijek": FallbackCity(45.555, 18.6955, "Osijek"),
    "zadar": FallbackCity(44.1194, 15.2314, "Zadar"),
    "pula": FallbackCity(44.8666, 13.8496, "Pula"),
    "dubrovnik": FallbackCity(42.6507, 18.0944, "Dubrovnik"),
    "karlovac": FallbackCity(45.487, 15.5378, "Karlovac"),
    "varaždin": FallbackCity(46.3044, 16.3378, "Varaždin"),
    "šibenik": FallbackCity(43.735, 15.8942, "Šibenik"),
    "sibenik": FallbackCity(43.735, 15.8942, "Šibenik"),
    "velika gorica": FallbackCity(45.7117, 16.0758, "Velika Gorica"),
    "slavonski brod": FallbackCity(45.16, 18.0158, "Slavonski Brod"),
    "sisak": FallbackCity(45.4891, 16.3915, "Sisak"),
}

# Inflected and diacritic-free spellings -> canonical city key
CITY_ALIASES: dict[str, str] = {
    "varazdin": "varaždin",
    "sibenik": "šibenik",
    "djakovo": "đakovo",
    "cazma": "čazma",
    "zagrebu": "zagreb",
    "zagreba": "zagreb",
    "splitu": "split",
    "splita": "split",
    "rijeci": "rijeka",
    "osijeku": "osijek",
    "zadru": "zadar",
    "puli": "pula",
    "dubrovniku": "dubrovnik",
    "karlovcu": "karlovac",
    "varazdinu": "varaždin",
    "sibeniku": "šibenik",
    "sisku": "sisak",
    "velikoj gorici": "velika gorica",
    "velike gorice": "velika gorica",
    "slavonskom brodu": "slavonski brod",
    "zagrebu centru": "zagreb",
    "split centru": "split",
}

_KNOWN_CITIES = set(FALLBACK_CITIES) | set(CITY_ALIASES.values())

NEAR_ME_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"near me",
        r"nearby",
        r"around here",
        r"in my area",
        r"close to me",
        r"u blizini",
        r"blizu mene",
        r"oko mene",
        r"najbliz[ei]",
        r"u mojoj blizini",
        r"\bblizu\b",
    )
)

_WORD = r"[^\W\d_]+"
_WORDS_RE = re.compile(_WORD)
_IN_RE = re.compile(rf"\bin\s+({_WORD}(?:\s+{_WORD}){{0,2}})")
_HR_PREPOSITION_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"\b{prep}\s+({_WORD}(?:\s+{_WORD}){{0,2}})") for prep in ("u", "na", "iz", "do")
)
_AREA_RE = re.compile(rf"((?:{_WORD}\s+)?{_WORD})\s+(?:area|center|centre|centar|centru)\b")

# Function words that never name a place
_PLACE_STOPWORDS = {
    "radijusu",
    "blizini",
    "mojoj",
    "gradu",
    "my",
    "the",
    "a",
    "an",
    "in",
    "of",
    "u",
    "na",
    "iz",
    "do",
}

RADIUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\bwithin\s+(\d+)\s*km\b",
        r"\b(?:do|up to)\s+(\d+)\s*km\b",
        r"\bu radijusu\s+(\d+)\s*km\b",
        r"(\d+)\s*km\b",
        r"(\d+)\s*kilo(?:metar|metra|metara|metri)\b",
    )
)


def normalize_city_name(name: str | None) -> str | None:
    """Map an inflected or diacritic-free city spelling to its canonical key."""
    if not name:
        return None
    raw = name.lower().strip()
    if not raw:
        return None
    stripped = strip_diacritics(raw)
    for candidate in (raw, stripped):
        if candidate in CITY_ALIASES:
            return CITY_ALIASES[candidate]
    for candidate in (raw, stripped):
        if candidate in FALLBACK_CITIES:
            return candidate
    return raw


def is_known_city(name: str | None) -> bool:
    return normalize_city_name(name) in _KNOWN_CITIES


def _resolve_words(words: list[str]) -> str | None:
    """Longest leading run of words that names a known city, else the first word."""
    for length in range(len(words), 0, -1):
        candidate = " ".join(words[:length])
        if is_known_city(candidate):
            return normalize_city_name(candidate)
    return normalize_city_name(words[0]) if words else None


def _match_after_preposition(pattern: re.Pattern[str], query: str) -> str | None:
    for match in pattern.finditer(query):
        words = match.group(1).split()
        if words[0] in _PLACE_STOPWORDS:
            continue
        return _resolve_words(words)
    return None


def _resolve_area(words: list[str]) -> str | None:
    """Longest trailing run naming a known city, else the last non-stopword."""
    for start in range(len(words)):
        candidate = " ".join(words[start:])
        if is_known_city(candidate):
            return normalize_city_name(candidate)
    for word in reversed(words):
        if word not in _PLACE_STOPWORDS:
            return normalize_city_name(word)
    return None


def extract_city_from_query(text: str | None) -> str | None:
    if not text:
        return None
    query = text.lower()

    city = _match_after_preposition(_IN_RE, query)
    if city:
        return city

    for pattern in _HR_PREPOSITION_RES:
        city = _match_after_preposition(pattern, query)
        if city:
            return city

    area = _AREA_RE.search(query)
    if area:
        city = _resolve_area(area.group(1).split())
        if city:
            return city

    words = _WORDS_RE.findall(query)
    for i, word in enumerate(words):
        if i + 1 < len(words) and is_known_city(f"{word} {words[i + 1]}"):
            return normalize_city_name(f"{word} {words[i + 1]}")
        if is_known_city(word):
            return normalize_city_name(word)
    return None


def is_near_me(text: str | None) -> bool:
    if not text:
        return False
    latin = latinize(text)
    return any(p.search(text) or p.search(latin) for p in NEAR_ME_PATTERNS)


def extract_radius_km(text: str | None) -> int | None:
    if not text:
        return None
    for pattern in RADIUS_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km (haversine), rounded to 2 decimals."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return round(EARTH_RADIUS_KM * c, 2)


class LocationResolver:
    def __init__(
        self,
        geocoder: GeocodingClient | None = None,
        cache: TTLCache | None = None,
        default_city_radius_km: int | None = None,
    ) -> None:
        self.geocoder = geocoder if geocoder is not None else GeocodingClient()
        self.cache = (
            cache
            if cache is not None
            else TTLCache("geocode", default_ttl=settings.GEOCODE_CACHE_TTL_SECONDS)
        )
        self.default_city_radius_km = (
            default_city_radius_km
            if default_city_radius_km is not None
            else settings.DEFAULT_CITY_RADIUS_KM
        )

    normalize_city_name = staticmethod(normalize_city_name)
    extract_city_from_query = staticmethod(extract_city_from_query)
    extract_radius_km = staticmethod(extract_radius_km)
    calculate_distance = staticmethod(calculate_distance)

    def get_city_coordinates(self, city: str | None) -> GeocodeResult | None:
        normalized = normalize_city_name(city)
        if not normalized:
            return None

        cache_key = f"geocode_{normalized}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug("Geocode cache_hit city=%s", normalized)
            return cached

        if self.geocoder.configured:
            try:
                candidate = self.geocoder.geocode(city)
            except GeocodeFailure as exc:
                logger.warning("Geocoding failed for %r, using fallback data: %s", city, exc)
            else:
                result = GeocodeResult(
                    latitude=candidate.geometry.location.lat,
                    longitude=candidate.geometry.location.lng,
                    formatted_address=candidate.formatted_address,
                    canonical_city=normalized,
                    source="api",
                )
                self.cache.set(cache_key, result)
                return result
        else:
            logger.info("Geocoding API key not configured, using fallback data")

        fallback = FALLBACK_CITIES.get(normalized)
        if fallback is None:
            return None
        result = GeocodeResult(
            latitude=fallback.latitude,
            longitude=fallback.longitude,
            canonical_city=normalized,
            source="fallback",
        )
        self.cache.set(cache_key, result)
        return result

    def analyze_location_context(
        self, query: str | None, user_location: Any = None
    ) -> LocationContext:
        user = Coordinates.from_value(user_location)

        if is_near_me(query):
            if user is not None:
                return LocationContext(LocationType.USER_LOCATION, "user", coordinates=user)
            return LocationContext(LocationType.NO_LOCATION, "none")

        # An explicit city beats the device location.
        city = extract_city_from_query(query)
        if city:
            geocode = self.get_city_coordinates(city)
            return LocationContext(
                LocationType.CITY_SPECIFIC,
                "query",
                coordinates=geocode.coordinates if geocode else None,
                city=city,
                geocode=geocode,
            )

        if user is not None:
            return LocationContext(LocationType.USER_LOCATION, "default", coordinates=user)
        return LocationContext(LocationType.NO_LOCATION, "none")

    def get_location_parameters(
        self, query: str | None, user_location: Any = None
    ) -> LocationParameters:
        ctx = self.analyze_location_context(query, user_location)
        if ctx.coordinates is None:
            return LocationParameters()

        radius = extract_radius_km(query)
        if radius is None and ctx.type is LocationType.CITY_SPECIFIC:
            radius = self.default_city_radius_km
        place = ctx.city or (ctx.geocode.formatted_address if ctx.geocode else None)
        return LocationParameters(
            latitude=ctx.coordinates.latitude,
            longitude=ctx.coordinates.longitude,
            radius_km=radius,
            place=place,
        )

    def has_location_mention(self, query: str | None, user_location: Any = None) -> bool:
        ctx = self.analyze_location_context(query, user_location)
        return ctx.type is not LocationType.NO_LOCATION

    @staticmethod
    def supported_cities() -> list[str]:
        return sorted({city.name for city in FALLBACK_CITIES.values()})

    def clear_cache(self) -> None:
        self.cache.clear()

    def cache_size(self) -> int:
        return len(self.cache)

    def close(self) -> None:
        self.geocoder.close()


_default_resolver: LocationResolver | None = None


def get_default_resolver() -> LocationResolver:
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = LocationResolver()
    return _default_resolver


__all__ = [
    "CITY_ALIASES",
    "FALLBACK_CITIES",
    "LocationResolver",
    "calculate_distance",
    "extract_city_from_query",
    "extract_radius_km",
    "get_default_resolver",
    "is_near_me",
    "normalize_city_name",
]
