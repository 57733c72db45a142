import copy
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.search_core.cache import TTLCache, clear_all_caches  # noqa: E402
from backend.search_core.geocoding import GeocodingClient  # noqa: E402
from backend.search_core.location import LocationResolver  # noqa: E402
from backend.search_core.settings import settings  # noqa: E402
from backend.search_core.taxonomy import TaxonomyExtractor, TaxonomySource  # noqa: E402

TAXONOMY_URL = "http://taxonomy.test/api/app/ai/taxonomy"

TAXONOMY_PAYLOAD = {
    "ok": True,
    "result": {
        "foodTypes": [
            {"id": 1, "nameEn": "Pizza", "nameHr": "Pizza"},
            {"id": 2, "nameEn": "Burgers", "nameHr": "Burgeri"},
            {"id": 3, "nameEn": "Ćevapi", "nameHr": "Ćevapi"},
        ],
        "establishmentTypes": [
            {"id": 10, "nameEn": "Restaurant", "nameHr": "Restoran"},
            {"id": 11, "nameEn": "Bar", "nameHr": "Bar"},
            {"id": 12, "nameEn": "Brunch place", "nameHr": "Mjesto za brunch"},
        ],
        "establishmentPerks": [
            {"id": 20, "nameEn": "Outdoor seating", "nameHr": "Vanjska terasa"},
        ],
        "mealTypes": [
            {"id": 30, "nameEn": "Breakfast", "nameHr": "Doručak"},
            {"id": 31, "nameEn": "Brunch", "nameHr": "Brunch"},
        ],
        "dietaryTypes": [
            {"id": 40, "nameEn": "Vegan", "nameHr": "Veganski"},
            {"id": 41, "nameEn": "Gluten-free", "nameHr": "Bez glutena"},
        ],
        "allergens": [
            {"id": 50, "nameEn": "Gluten", "nameHr": "Gluten"},
        ],
        "priceCategories": [
            {"id": 60, "nameEn": "Budget friendly", "nameHr": "Pristupačno"},
        ],
    },
}


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingTransport(httpx.MockTransport):
    """MockTransport that records every outbound request."""

    def __init__(self, handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_PLACES_API_KEY", None)
    monkeypatch.setattr(settings, "TAXONOMY_URL", TAXONOMY_URL)
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def taxonomy_transport() -> CountingTransport:
    return CountingTransport(lambda request: httpx.Response(200, json=TAXONOMY_PAYLOAD))


@pytest.fixture
def taxonomy_source(taxonomy_transport, clock) -> TaxonomySource:
    return TaxonomySource(
        TAXONOMY_URL,
        client=httpx.Client(transport=taxonomy_transport),
        cache=TTLCache("taxonomy-test", default_ttl=600, clock=clock),
    )


@pytest.fixture
def extractor(taxonomy_source) -> TaxonomyExtractor:
    return TaxonomyExtractor(taxonomy_source)


@pytest.fixture
def resolver(clock) -> LocationResolver:
    """Resolver with no geocoding credential: only the static fallback table answers."""
    return LocationResolver(
        geocoder=GeocodingClient(api_key=""),
        cache=TTLCache("geocode-test", default_ttl=1800, clock=clock),
    )


@pytest.fixture
def taxonomy_payload() -> dict:
    return copy.deepcopy(TAXONOMY_PAYLOAD)


@pytest.fixture
def make_transport():
    """Build a call-counting MockTransport from a request handler."""
    return CountingTransport
