from __future__ import annotations

import logging
import time

import httpx
from pydantic import ValidationError

from .schemas import GeocodeCandidate, GeocodeResponse
from .settings import settings

logger = logging.getLogger(__name__)


class GeocodeFailure(RuntimeError):
    """The geocoder could not resolve an address; callers fall back to static data."""


class GeocodingClient:
    """Thin client for the Google geocode JSON API, biased to one country."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        url: str | None = None,
        country: str | None = None,
        language: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GOOGLE_PLACES_API_KEY
        self.url = url or settings.GEOCODE_URL
        self.country = country or settings.GEOCODE_COUNTRY
        self.language = language or settings.GEOCODE_LANGUAGE
        self.timeout = timeout if timeout is not None else settings.GEOCODE_TIMEOUT_SECONDS
        self._client = client if client is not None else httpx.Client(timeout=self.timeout)

    @property
    def configured(self) -> bool:
        return bool((self.api_key or "").strip())

    def close(self) -> None:
        self._client.close()

    def geocode(self, address: str) -> GeocodeCandidate:
        if not self.configured:
            raise GeocodeFailure("Geocoding API key not configured")

        started = time.perf_counter()
        params = {
            "address": address,
            "key": self.api_key,
            "language": self.language,
            "components": f"country:{self.country}",
        }
        try:
            resp = self._client.get(self.url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            body = GeocodeResponse.model_validate(resp.json())
        except httpx.HTTPError as exc:
            raise GeocodeFailure(f"Geocoding request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise GeocodeFailure("Malformed geocoding response") from exc

        if body.status != "OK" or not body.results:
            raise GeocodeFailure(f"Geocoding status {body.status}")

        elapsed = (time.perf_counter() - started) * 1000
        logger.info("Geocoded address=%r latency=%.1fms", address, elapsed)
        return body.results[0]


__all__ = ["GeocodeFailure", "GeocodingClient"]
