"""Consumer-facing facade: prompt -> filters, free-text terms, location, ranking."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .location import LocationResolver, get_default_resolver
from .scoring import SortKey, rank_items
from .settings import clamp_variant_count, settings
from .taxonomy import TaxonomyExtractor, UpstreamUnavailable, get_default_extractor
from .text import split_comma_terms
from .types import CategoryIds, LocationParameters, RankedItem, TaxonomyId
from .variations import create_search_variations, expand_search_terms

logger = logging.getLogger(__name__)


@dataclass
class QueryUnderstanding:
    prompt: str
    filters: CategoryIds = field(default_factory=CategoryIds)
    matched_terms: dict[str, TaxonomyId] = field(default_factory=dict)
    free_text_terms: list[str] = field(default_factory=list)
    search_terms: list[str] = field(default_factory=list)
    like_patterns: list[str] = field(default_factory=list)
    location: LocationParameters = field(default_factory=LocationParameters)
    degraded: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "filters": self.filters.as_dict(),
            "matchedTerms": dict(self.matched_terms),
            "freeTextTerms": list(self.free_text_terms),
            "searchTerms": list(self.search_terms),
            "likePatterns": list(self.like_patterns),
            "location": self.location.as_dict(),
            "degraded": self.degraded,
        }


class QueryPipeline:
    def __init__(
        self,
        extractor: TaxonomyExtractor | None = None,
        resolver: LocationResolver | None = None,
        max_variants: int | None = None,
    ) -> None:
        self.extractor = extractor if extractor is not None else get_default_extractor()
        self.resolver = resolver if resolver is not None else get_default_resolver()
        self.max_variants = clamp_variant_count(
            max_variants if max_variants is not None else settings.max_search_variants
        )

    def understand(self, prompt: str | None, user_location: Any = None) -> QueryUnderstanding:
        prompt = (prompt or "").strip()
        understanding = QueryUnderstanding(prompt=prompt)

        try:
            extraction = self.extractor.extract(prompt)
        except UpstreamUnavailable as exc:
            logger.warning("Taxonomy filters unavailable, searching free text only: %s", exc)
            understanding.degraded = True
            understanding.free_text_terms = split_comma_terms(prompt)
        else:
            understanding.filters = extraction.ids
            understanding.matched_terms = extraction.matched_terms
            understanding.free_text_terms = extraction.leftover_terms

        understanding.search_terms = self.search_terms(understanding.free_text_terms)
        understanding.like_patterns = self.like_patterns(understanding.free_text_terms)
        understanding.location = self.resolver.get_location_parameters(prompt, user_location)
        return understanding

    def close(self) -> None:
        """Release the HTTP clients behind the taxonomy source and geocoder."""
        self.extractor.source.close()
        self.resolver.close()

    def search_terms(self, terms: Iterable[str]) -> list[str]:
        out: dict[str, None] = {}
        for term in terms:
            for candidate in expand_search_terms(term, self.max_variants):
                out.setdefault(candidate, None)
        return list(out)

    def like_patterns(self, terms: Iterable[str]) -> list[str]:
        out: dict[str, None] = {}
        for term in terms:
            for pattern in create_search_variations(term, self.max_variants).like_patterns:
                out.setdefault(pattern, None)
        return list(out)

    def rank(
        self,
        understanding: QueryUnderstanding,
        items: Iterable[Any],
        *,
        sort: SortKey = "relevance",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[RankedItem]:
        location = understanding.location
        return rank_items(
            items,
            understanding.search_terms,
            sort=sort,
            origin=location.origin,
            radius_km=location.radius_km,
            limit=limit,
            offset=offset,
        )


__all__ = ["QueryPipeline", "QueryUnderstanding"]
