"""
Enrichment Module
=================

Keeps stored places enriched with live data from the place provider.

Responsibilities:
- Deciding between fetch-by-id and search-by-name for a place
- Identity resolution (persisting a newly found provider id)
- Merging closure status, address, website and opening hours
- Caching provider responses and enriched snapshots
"""

from .cache import (
    PLACE_DETAILS_CACHE,
    PLACES_CACHE,
    EnrichmentCache,
    InMemoryEnrichmentCache,
    RedisEnrichmentCache,
    build_enrichment_cache,
)
from .locks import KeyedLock
from .place_enrichment_service import (
    PlaceEnrichmentService,
    build_place_enrichment_service,
)

__all__ = [
    "PLACE_DETAILS_CACHE",
    "PLACES_CACHE",
    "EnrichmentCache",
    "InMemoryEnrichmentCache",
    "RedisEnrichmentCache",
    "build_enrichment_cache",
    "KeyedLock",
    "PlaceEnrichmentService",
    "build_place_enrichment_service",
]
