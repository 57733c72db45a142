"""Query understanding for restaurant and menu search (taxonomy filters, location, relevance)."""

from .location import LocationResolver
from .pipeline import QueryPipeline, QueryUnderstanding
from .taxonomy import TaxonomyExtractor, TaxonomySource, UpstreamUnavailable

__all__ = [
    "LocationResolver",
    "QueryPipeline",
    "QueryUnderstanding",
    "TaxonomyExtractor",
    "TaxonomySource",
    "UpstreamUnavailable",
]
