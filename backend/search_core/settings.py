from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"

MIN_VARIANTS = 3
MAX_VARIANTS = 30


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # human-readable console logs instead of JSON
    DEBUG: bool = False
    LOG_JSON: bool = False
    ENVIRONMENT: str = "development"

    # Taxonomy catalog (read-only, polled on cache miss)
    TAXONOMY_URL: str = "http://localhost:3000/api/app/ai/taxonomy"
    TAXONOMY_CACHE_TTL_SECONDS: float = 600.0
    TAXONOMY_TIMEOUT_SECONDS: float = 8.0

    # Geocoding (Google geocode JSON API); without a key only the fallback table is used
    GOOGLE_PLACES_API_KEY: str | None = None
    GEOCODE_URL: str = "https://maps.googleapis.com/maps/api/geocode/json"
    GEOCODE_COUNTRY: str = "HR"
    GEOCODE_LANGUAGE: str = "hr"
    GEOCODE_CACHE_TTL_SECONDS: float = 1800.0
    GEOCODE_TIMEOUT_SECONDS: float = 5.0

    # Search term expansion
    MAX_SEARCH_VARIANTS: int = 10
    DEFAULT_CITY_RADIUS_KM: int = 10

    @property
    def max_search_variants(self) -> int:
        return clamp_variant_count(self.MAX_SEARCH_VARIANTS)


def clamp_variant_count(value: int | None, default: int = 10) -> int:
    if value is None:
        value = default
    return max(MIN_VARIANTS, min(int(value), MAX_VARIANTS))


settings = Settings()
