"""Taxonomy catalog access and prompt-to-filter extraction."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping

import httpx
from pydantic import ValidationError

from .cache import TTLCache
from .schemas import TaxonomyEntry, TaxonomyPayload, TaxonomyResponse
from .settings import settings
from .synonyms import TAXONOMY_SYNONYMS
from .text import normalize, split_comma_terms
from .types import CategoryIds, ExtractionResult, TaxonomyCategory, TaxonomyId

logger = logging.getLogger(__name__)

TAXONOMY_CACHE_KEY = "taxonomies"

# A phrase valid in several categories resolves to the first one listed here.
EXTRACTION_ORDER: tuple[TaxonomyCategory, ...] = (
    TaxonomyCategory.FOOD_TYPES,
    TaxonomyCategory.ESTABLISHMENT_PERKS,
    TaxonomyCategory.ESTABLISHMENT_TYPES,
    TaxonomyCategory.MEAL_TYPES,
    TaxonomyCategory.DIETARY_TYPES,
    TaxonomyCategory.ALLERGENS,
    TaxonomyCategory.PRICE_CATEGORIES,
)

TaxonomyIndex = dict[str, TaxonomyId]


class UpstreamUnavailable(RuntimeError):
    """Raised when the taxonomy catalog cannot be fetched or is malformed."""


class TaxonomySource:
    """Reads the taxonomy catalog over HTTP, caching the payload for a TTL."""

    def __init__(
        self,
        url: str | None = None,
        *,
        client: httpx.Client | None = None,
        cache: TTLCache | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = url or settings.TAXONOMY_URL
        self.timeout = timeout if timeout is not None else settings.TAXONOMY_TIMEOUT_SECONDS
        self._client = client if client is not None else httpx.Client(timeout=self.timeout)
        self.cache = (
            cache
            if cache is not None
            else TTLCache("taxonomy", default_ttl=settings.TAXONOMY_CACHE_TTL_SECONDS)
        )

    def get_taxonomies(self) -> TaxonomyPayload:
        cached = self.cache.get(TAXONOMY_CACHE_KEY)
        if cached is not None:
            return cached
        # Concurrent misses may each fetch; the last write wins.
        payload = self._fetch()
        self.cache.set(TAXONOMY_CACHE_KEY, payload)
        return payload

    def close(self) -> None:
        self._client.close()

    def _fetch(self) -> TaxonomyPayload:
        started = time.perf_counter()
        try:
            resp = self._client.get(self.url, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.warning("Taxonomy fetch failed: %s", exc)
            raise UpstreamUnavailable(f"Taxonomy request failed: {exc}") from exc
        if resp.status_code != 200:
            logger.warning("Taxonomy fetch failed with status %s", resp.status_code)
            raise UpstreamUnavailable(f"Taxonomy fetch failed: {resp.status_code}")
        try:
            envelope = TaxonomyResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            raise UpstreamUnavailable("Bad taxonomy payload") from exc
        if not envelope.ok or envelope.result is None:
            raise UpstreamUnavailable("Bad taxonomy payload")

        elapsed = (time.perf_counter() - started) * 1000
        logger.info(
            "Taxonomy catalog refreshed entries=%d latency=%.1fms",
            sum(len(envelope.result.entries(c)) for c in TaxonomyCategory),
            elapsed,
        )
        return envelope.result


def build_index(entries: Iterable[TaxonomyEntry], category: TaxonomyCategory) -> TaxonomyIndex:
    """Map normalized EN/HR names and curated synonyms to taxonomy ids.

    Later registrations overwrite earlier ones for the same key.
    """
    entries = list(entries or [])
    index: TaxonomyIndex = {}
    for entry in entries:
        index[normalize(entry.name_hr)] = entry.id
        index[normalize(entry.name_en)] = entry.id
    index.pop("", None)

    for canonical, variants in TAXONOMY_SYNONYMS.get(category, {}).items():
        key = normalize(canonical)
        taxonomy_id = next(
            (e.id for e in entries if normalize(e.name_en) == key or normalize(e.name_hr) == key),
            None,
        )
        if taxonomy_id is None:
            continue
        for variant in variants:
            variant_key = normalize(variant)
            if variant_key:
                index[variant_key] = taxonomy_id
    return index


def build_indexes(payload: TaxonomyPayload) -> dict[TaxonomyCategory, TaxonomyIndex]:
    return {category: build_index(payload.entries(category), category) for category in TaxonomyCategory}


def match_phrase(normalized: str, index: Mapping[str, TaxonomyId]) -> TaxonomyId | None:
    """Exact hit first, then progressively shorter leading-token prefixes."""
    hit = index.get(normalized)
    if hit is not None:
        return hit
    tokens = normalized.split()
    for length in range(len(tokens), 0, -1):
        hit = index.get(" ".join(tokens[:length]))
        if hit is not None:
            return hit
    return None


class TaxonomyExtractor:
    def __init__(self, source: TaxonomySource | None = None) -> None:
        self.source = source if source is not None else TaxonomySource()
        self._indexed: tuple[TaxonomyPayload, dict[TaxonomyCategory, TaxonomyIndex]] | None = None

    def indexes(self) -> tuple[TaxonomyPayload, dict[TaxonomyCategory, TaxonomyIndex]]:
        payload = self.source.get_taxonomies()
        if self._indexed is None or self._indexed[0] is not payload:
            self._indexed = (payload, build_indexes(payload))
        return self._indexed

    def extract(self, prompt: str | None) -> ExtractionResult:
        """Split a prompt on commas and resolve each phrase to one taxonomy id.

        Raises UpstreamUnavailable when the catalog cannot be loaded; callers
        should fall back to free-text search.
        """
        payload, indexes = self.indexes()
        result = ExtractionResult(ids=CategoryIds(), taxonomies=payload)

        for raw in split_comma_terms(prompt):
            normalized = normalize(raw)
            for category in EXTRACTION_ORDER:
                taxonomy_id = match_phrase(normalized, indexes[category])
                if taxonomy_id is not None:
                    result.ids.add(category, taxonomy_id)
                    result.matched_terms[raw] = taxonomy_id
                    break
            else:
                result.leftover_terms.append(raw)

        logger.debug(
            "Extracted taxonomy filters matched=%d leftover=%d",
            len(result.matched_terms),
            len(result.leftover_terms),
        )
        return result


_default_extractor: TaxonomyExtractor | None = None


def get_default_extractor() -> TaxonomyExtractor:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = TaxonomyExtractor()
    return _default_extractor


def get_taxonomies() -> TaxonomyPayload:
    return get_default_extractor().source.get_taxonomies()


def extract_taxonomies_from_prompt(prompt: str | None) -> ExtractionResult:
    return get_default_extractor().extract(prompt)


__all__ = [
    "EXTRACTION_ORDER",
    "TaxonomyExtractor",
    "TaxonomySource",
    "UpstreamUnavailable",
    "build_index",
    "extract_taxonomies_from_prompt",
    "get_taxonomies",
    "match_phrase",
]
