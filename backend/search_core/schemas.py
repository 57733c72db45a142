from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .types import TaxonomyCategory, TaxonomyId


class TaxonomyEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: TaxonomyId
    name_en: str = Field(default="", alias="nameEn")
    name_hr: str = Field(default="", alias="nameHr")


class TaxonomyPayload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    food_types: list[TaxonomyEntry] = Field(alias="foodTypes")
    establishment_types: list[TaxonomyEntry] = Field(alias="establishmentTypes")
    establishment_perks: list[TaxonomyEntry] = Field(alias="establishmentPerks")
    meal_types: list[TaxonomyEntry] = Field(alias="mealTypes")
    dietary_types: list[TaxonomyEntry] = Field(alias="dietaryTypes")
    allergens: list[TaxonomyEntry] = Field(alias="allergens")
    price_categories: list[TaxonomyEntry] = Field(alias="priceCategories")

    def entries(self, category: TaxonomyCategory) -> list[TaxonomyEntry]:
        return getattr(self, _PAYLOAD_FIELDS[category])


_PAYLOAD_FIELDS = {
    TaxonomyCategory.FOOD_TYPES: "food_types",
    TaxonomyCategory.ESTABLISHMENT_TYPES: "establishment_types",
    TaxonomyCategory.ESTABLISHMENT_PERKS: "establishment_perks",
    TaxonomyCategory.MEAL_TYPES: "meal_types",
    TaxonomyCategory.DIETARY_TYPES: "dietary_types",
    TaxonomyCategory.ALLERGENS: "allergens",
    TaxonomyCategory.PRICE_CATEGORIES: "price_categories",
}


class TaxonomyResponse(BaseModel):
    """Envelope returned by the taxonomy endpoint: `{ok, result}`."""

    model_config = ConfigDict(extra="ignore")

    ok: bool = False
    result: TaxonomyPayload | None = None


class GeocodeLocation(BaseModel):
    lat: float
    lng: float


class GeocodeGeometry(BaseModel):
    location: GeocodeLocation


class GeocodeCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    geometry: GeocodeGeometry
    formatted_address: str | None = None


class GeocodeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    results: list[GeocodeCandidate] = Field(default_factory=list)
