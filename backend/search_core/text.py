from __future__ import annotations

import re
import unicodedata
from typing import Any

# Croatian letters plus the Western-European accents seen in menu copy.
LATIN_TABLE = str.maketrans(
    {
        "č": "c",
        "ć": "c",
        "š": "s",
        "đ": "d",
        "ž": "z",
        "á": "a",
        "à": "a",
        "ä": "a",
        "â": "a",
        "å": "a",
        "é": "e",
        "è": "e",
        "ë": "e",
        "ê": "e",
        "í": "i",
        "ì": "i",
        "ï": "i",
        "î": "i",
        "ó": "o",
        "ò": "o",
        "ö": "o",
        "ô": "o",
        "ú": "u",
        "ù": "u",
        "ü": "u",
        "û": "u",
        "ñ": "n",
    }
)

_WHITESPACE_RE = re.compile(r"\s+")


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def strip_diacritics(value: Any) -> str:
    decomposed = unicodedata.normalize("NFD", as_text(value))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(value: Any) -> str:
    """Lowercase, drop diacritics and punctuation, collapse whitespace.

    Used for taxonomy keys, so it must stay idempotent.
    """
    stripped = strip_diacritics(as_text(value).lower())
    cleaned = "".join(ch if ch.isalnum() or ch.isspace() else " " for ch in stripped)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def latinize(value: Any) -> str:
    """Transliterate accented Latin characters to ASCII, keeping punctuation."""
    lowered = as_text(value).strip().lower()
    return strip_diacritics(lowered.translate(LATIN_TABLE))


def normalize_diacritics(value: Any) -> str:
    return latinize(as_text(value).lower())


def split_comma_terms(value: Any) -> list[str]:
    return [part.strip() for part in as_text(value).split(",") if part.strip()]


def word_pattern(term: str, flags: int = 0) -> re.Pattern[str]:
    """Whole-word regex for an arbitrary term; metacharacters are escaped."""
    return re.compile(rf"\b{re.escape(term)}\b", flags)


__all__ = [
    "as_text",
    "latinize",
    "normalize",
    "normalize_diacritics",
    "split_comma_terms",
    "strip_diacritics",
    "word_pattern",
]
