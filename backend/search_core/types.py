from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from .schemas import TaxonomyPayload

TaxonomyId = str | int


class TaxonomyCategory(Enum):
    FOOD_TYPES = "foodTypes"
    ESTABLISHMENT_TYPES = "establishmentTypes"
    ESTABLISHMENT_PERKS = "establishmentPerks"
    MEAL_TYPES = "mealTypes"
    DIETARY_TYPES = "dietaryTypes"
    ALLERGENS = "allergens"
    PRICE_CATEGORIES = "priceCategories"

    @property
    def ids_field(self) -> str:
        return _IDS_FIELDS[self]


_IDS_FIELDS = {
    TaxonomyCategory.FOOD_TYPES: "food_type_ids",
    TaxonomyCategory.ESTABLISHMENT_TYPES: "establishment_type_ids",
    TaxonomyCategory.ESTABLISHMENT_PERKS: "establishment_perk_ids",
    TaxonomyCategory.MEAL_TYPES: "meal_type_ids",
    TaxonomyCategory.DIETARY_TYPES: "dietary_type_ids",
    TaxonomyCategory.ALLERGENS: "allergen_ids",
    TaxonomyCategory.PRICE_CATEGORIES: "price_category_ids",
}


@dataclass
class CategoryIds:
    """Matched taxonomy identifiers, one ordered, de-duplicated list per category."""

    food_type_ids: list[TaxonomyId] = field(default_factory=list)
    establishment_type_ids: list[TaxonomyId] = field(default_factory=list)
    establishment_perk_ids: list[TaxonomyId] = field(default_factory=list)
    meal_type_ids: list[TaxonomyId] = field(default_factory=list)
    dietary_type_ids: list[TaxonomyId] = field(default_factory=list)
    allergen_ids: list[TaxonomyId] = field(default_factory=list)
    price_category_ids: list[TaxonomyId] = field(default_factory=list)

    def get(self, category: TaxonomyCategory) -> list[TaxonomyId]:
        return getattr(self, category.ids_field)

    def add(self, category: TaxonomyCategory, taxonomy_id: TaxonomyId) -> None:
        bucket = self.get(category)
        if taxonomy_id not in bucket:
            bucket.append(taxonomy_id)

    def is_empty(self) -> bool:
        return not any(self.get(category) for category in TaxonomyCategory)

    def as_dict(self) -> dict[str, list[TaxonomyId]]:
        return {category.ids_field: list(self.get(category)) for category in TaxonomyCategory}


@dataclass
class ExtractionResult:
    ids: CategoryIds = field(default_factory=CategoryIds)
    leftover_terms: list[str] = field(default_factory=list)
    matched_terms: dict[str, TaxonomyId] = field(default_factory=dict)
    taxonomies: TaxonomyPayload | None = None


@dataclass(slots=True)
class VariantSet:
    variants: list[str] = field(default_factory=list)
    like_patterns: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float

    @classmethod
    def from_value(cls, value: Any) -> Coordinates | None:
        """Accept a Coordinates, a (lat, lng) pair or a mapping with lat/lng keys."""
        if value is None:
            return None
        if isinstance(value, Coordinates):
            return value
        if isinstance(value, Mapping):
            lat = value.get("latitude", value.get("lat"))
            lng = value.get("longitude", value.get("lng", value.get("lon")))
        elif isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
            lat, lng = value
        else:
            return None
        try:
            return cls(latitude=float(lat), longitude=float(lng))
        except (TypeError, ValueError):
            return None


@dataclass(slots=True)
class GeocodeResult:
    latitude: float
    longitude: float
    canonical_city: str
    source: Literal["api", "fallback"]
    formatted_address: str | None = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(self.latitude, self.longitude)


class LocationType(str, Enum):
    CITY_SPECIFIC = "city_specific"
    USER_LOCATION = "user_location"
    NO_LOCATION = "no_location"


LocationSource = Literal["query", "user", "default", "none"]


@dataclass(slots=True)
class LocationContext:
    type: LocationType
    source: LocationSource
    coordinates: Coordinates | None = None
    city: str | None = None
    geocode: GeocodeResult | None = None


@dataclass(slots=True)
class LocationParameters:
    latitude: float | None = None
    longitude: float | None = None
    radius_km: int | None = None
    place: str | None = None

    @property
    def origin(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(self.latitude, self.longitude)

    def is_empty(self) -> bool:
        return self.origin is None

    def as_dict(self) -> dict[str, Any]:
        payload = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radiusKm": self.radius_km,
            "place": self.place,
        }
        return {key: value for key, value in payload.items() if value is not None}


@dataclass(slots=True)
class RankedItem:
    item: Mapping[str, Any]
    score: float
    price: float | None = None
    distance_km: float | None = None
