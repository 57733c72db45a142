from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Literal

from .location import calculate_distance
from .text import as_text, latinize, normalize_diacritics, word_pattern
from .types import Coordinates, RankedItem

NAME_WEIGHT = 1.0
DESCRIPTION_WEIGHT = 0.7
EXACT_NAME_BOOST = 0.15

SortKey = Literal["relevance", "price_asc", "price_desc", "distance"]
SORT_KEYS: tuple[str, ...] = ("relevance", "price_asc", "price_desc", "distance")


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _strip_wildcards(term: Any) -> str:
    return as_text(term).replace("%", "").replace("_", "")


def localized(item: Any, language: str) -> Mapping[str, Any] | None:
    """Return the {name, description} translation for a language, if any.

    Accepts translations as a list of `{"language": ..}` rows or a mapping
    keyed by language. Items without translations expose their own fields.
    """
    translations = _field(item, "translations")
    if not translations:
        if _field(item, "name") is None and _field(item, "description") is None:
            return None
        return {"name": _field(item, "name"), "description": _field(item, "description")}
    if isinstance(translations, Mapping):
        return translations.get(language)
    for row in translations:
        if _field(row, "language") == language:
            return {"name": _field(row, "name"), "description": _field(row, "description")}
    return None


def exact_word_hit(text: str | None, term: str | None) -> bool:
    if not text or not term:
        return False
    needle = latinize(_strip_wildcards(term))
    if not needle:
        return False
    return word_pattern(needle).search(latinize(text)) is not None


def calculate_text_score(text: Any, terms: Iterable[Any] | None) -> float:
    text = as_text(text)
    if not text or not terms:
        return 0.0
    haystack = normalize_diacritics(text)
    score = 0.0
    for term in terms:
        needle = normalize_diacritics(_strip_wildcards(term))
        if needle and needle in haystack:
            score += len(needle) / len(text)
    return min(score, 1.0)


def calculate_item_score(item: Any, terms: Sequence[str] | None) -> float:
    if not terms:
        return 0.0
    hr = localized(item, "hr") or {}
    en = localized(item, "en") or {}

    best = max(
        calculate_text_score(hr.get("name"), terms) * NAME_WEIGHT,
        calculate_text_score(en.get("name"), terms) * NAME_WEIGHT,
        calculate_text_score(hr.get("description"), terms) * DESCRIPTION_WEIGHT,
        calculate_text_score(en.get("description"), terms) * DESCRIPTION_WEIGHT,
    )
    exact = any(
        exact_word_hit(hr.get("name"), t) or exact_word_hit(en.get("name"), t) for t in terms
    )
    return min(1.0, max(0.0, best + (EXACT_NAME_BOOST if exact else 0.0)))


def _to_price(value: Any) -> float | None:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def get_item_price(item: Any) -> float | None:
    """Direct price, else the cheapest size variant, rounded to 2 decimals."""
    direct = _to_price(_field(item, "price"))
    if direct is not None:
        return round(direct, 2)
    sizes = _field(item, "sizes") or []
    prices = [p for p in (_to_price(_field(size, "price")) for size in sizes) if p is not None]
    if prices:
        return round(min(prices), 2)
    return None


def item_distance_km(item: Any, origin: Coordinates | None) -> float | None:
    if origin is None:
        return None
    coords = Coordinates.from_value(
        {"latitude": _field(item, "latitude"), "longitude": _field(item, "longitude")}
    )
    if coords is None:
        return None
    return calculate_distance(origin.latitude, origin.longitude, coords.latitude, coords.longitude)


def _missing_last(value: float | None, descending: bool = False) -> tuple[bool, float]:
    if value is None:
        return (True, 0.0)
    return (False, -value if descending else value)


def _sort_key(sort: str):
    if sort == "price_asc":
        return lambda r: _missing_last(r.price)
    if sort == "price_desc":
        return lambda r: _missing_last(r.price, descending=True)
    if sort == "distance":
        return lambda r: _missing_last(r.distance_km)
    return lambda r: (-r.score, _missing_last(r.price), _missing_last(r.distance_km))


def rank_items(
    items: Iterable[Any],
    terms: Sequence[str] | None,
    *,
    sort: SortKey = "relevance",
    origin: Coordinates | None = None,
    radius_km: float | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[RankedItem]:
    """Score, filter by radius and sort candidates; ties keep input order."""
    if sort not in SORT_KEYS:
        raise ValueError(f"sort must be one of: {', '.join(SORT_KEYS)}")

    ranked: list[RankedItem] = []
    for item in items:
        distance = item_distance_km(item, origin)
        if radius_km is not None and distance is not None and distance > radius_km:
            continue
        ranked.append(
            RankedItem(
                item=item,
                score=calculate_item_score(item, terms),
                price=get_item_price(item),
                distance_km=distance,
            )
        )

    ranked.sort(key=_sort_key(sort))
    start = max(offset, 0)
    end = None if limit is None else start + max(limit, 0)
    return ranked[start:end]


__all__ = [
    "SORT_KEYS",
    "calculate_item_score",
    "calculate_text_score",
    "exact_word_hit",
    "get_item_price",
    "item_distance_km",
    "rank_items",
]
