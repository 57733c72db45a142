from __future__ import annotations

import re
from collections.abc import Iterable

from .settings import clamp_variant_count, settings
from .synonyms import (
    EN_SIBILANT_ENDINGS,
    EN_SINGULAR_RULES,
    HR_SUFFIX_RULES,
    KEYWORD_STEMS,
    SEARCH_SYNONYMS,
)
from .text import latinize, word_pattern
from .types import VariantSet

_WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")
_WHITESPACE_RE = re.compile(r"\s+")
_KEYWORD_RE = re.compile("|".join(re.escape(latinize(stem)) for stem in KEYWORD_STEMS))

# latinized synonym groups, computed once
_SYNONYM_GROUPS: list[tuple[str, list[str]]] = [
    (latinize(canonical), list(dict.fromkeys(latinize(s) for s in variants)))
    for canonical, variants in SEARCH_SYNONYMS.items()
]


class _OrderedSet(dict):
    """Insertion-ordered set; ranking ties keep discovery order."""

    def add(self, value: str) -> None:
        self.setdefault(value, None)

    def update_from(self, values: Iterable[str]) -> None:
        for value in values:
            self.add(value)


def expand_with_synonyms(term: str) -> list[str]:
    out = [term]
    for canonical, variants in _SYNONYM_GROUPS:
        if term == canonical or term in variants:
            out.append(canonical)
            out.extend(variants)
    return out


def hr_morphology(word: str) -> list[str]:
    forms = [word]
    for suffix, replacements in HR_SUFFIX_RULES.items():
        if word.endswith(suffix):
            stem = word[: -len(suffix)]
            forms.extend(stem + replacement for replacement in replacements)
    return forms


def en_morphology(word: str) -> list[str]:
    forms = [word]
    for suffix, replacement, min_len in EN_SINGULAR_RULES:
        if word.endswith(suffix) and len(word) >= min_len:
            forms.append(word[: -len(suffix)] + replacement)
            return forms
    if word.endswith(EN_SIBILANT_ENDINGS):
        forms.append(word + "es")
    forms.append(word + "s")
    return forms


def separator_variants(phrase: str) -> list[str]:
    """Space, hyphen and concatenated spellings of a (possibly multi-word) phrase."""
    phrase = _WHITESPACE_RE.sub(" ", phrase).strip()
    forms = [phrase]
    if " " in phrase:
        forms.append(phrase.replace(" ", "-"))
    if "-" in phrase:
        forms.append(_WHITESPACE_RE.sub(" ", re.sub(r"-+", " ", phrase)).strip())
    forms.append(re.sub(r"[\s\-]+", "", phrase))
    return forms


def split_and_combine(term: str) -> list[str]:
    words = [w for w in _WORD_SPLIT_RE.split(latinize(term)) if w]
    if not words:
        return []
    out: list[str] = []
    for word in words:
        out.extend(hr_morphology(word))
        out.extend(en_morphology(word))
    out.extend(separator_variants(" ".join(words)))
    for first, second in zip(words, words[1:]):
        out.extend(separator_variants(f"{first} {second}"))
    return out


def _score(variant: str, original: str, original_word: re.Pattern[str]) -> int:
    score = 0
    if variant == original:
        score += 5
    if variant.startswith(original[: max(3, int(len(original) * 0.6))]):
        score += 2
    if " " in variant:
        score += 1
    if original_word.search(variant):
        score += 1
    if _KEYWORD_RE.search(variant):
        score += 1
    return score


def create_search_variations(term: str | None, max_variants: int | None = None) -> VariantSet:
    """Expand a search term into ranked spelling, inflection and synonym variants.

    Variants are best-first; `like_patterns` wraps each one as `%variant%`
    for substring matching in SQL.
    """
    limit = clamp_variant_count(
        max_variants if max_variants is not None else settings.max_search_variants
    )
    base = latinize(term)
    if not base:
        return VariantSet()

    found = _OrderedSet()
    found.add(base)
    found.update_from(expand_with_synonyms(base))
    found.update_from(hr_morphology(base))
    found.update_from(en_morphology(base))
    found.update_from(split_and_combine(base))
    found.update_from(separator_variants(base))
    if len(base) >= 4:
        found.add(base[:-1])

    candidates = [v for v in found if len(v) > 1]
    original_word = word_pattern(base)
    ranked = sorted(candidates, key=lambda v: _score(v, base, original_word), reverse=True)
    variants = ranked[:limit]
    return VariantSet(variants=variants, like_patterns=[f"%{v}%" for v in variants])


def expand_search_terms(term: str, max_variants: int | None = None) -> list[str]:
    """The raw term followed by its variants, de-duplicated and capped."""
    limit = clamp_variant_count(
        max_variants if max_variants is not None else settings.max_search_variants
    )
    out = _OrderedSet()
    if term and term.strip():
        out.add(term.strip())
    out.update_from(create_search_variations(term, limit).variants)
    return list(out)[:limit]


__all__ = [
    "create_search_variations",
    "en_morphology",
    "expand_search_terms",
    "expand_with_synonyms",
    "hr_morphology",
    "separator_variants",
    "split_and_combine",
]
