"""
Pytest fixtures: in-memory store, stub provider and a controllable clock.
"""
import asyncio
import os
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID, uuid4

# Must be set before app.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CACHE_BACKEND", "memory")

import pytest

from app.enrichment.cache import InMemoryEnrichmentCache
from app.enrichment.place_enrichment_service import PlaceEnrichmentService
from app.errors import ProviderUnavailableError
from app.models.places import (
    Place,
    PlaceCategory,
    ProviderDetails,
    ProviderPeriod,
    ProviderPeriodPoint,
)
from app.repositories.places import PlaceRepository
from app.services.feed_service import FeedService
from app.services.google_places import PlacesProvider

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryPlaceRepository(PlaceRepository):
    """Dict-backed store that copies on read and write like a real database."""

    def __init__(self) -> None:
        self.places: Dict[UUID, Place] = {}
        self.save_count = 0
        self.fail_saves = False

    def add(self, place: Place) -> Place:
        self.places[place.place_id] = place.model_copy(deep=True)
        return place

    async def find_by_id(self, place_id: UUID) -> Optional[Place]:
        place = self.places.get(place_id)
        return place.model_copy(deep=True) if place else None

    async def find_all(self) -> List[Place]:
        return [place.model_copy(deep=True) for place in self.places.values()]

    async def save(self, place: Place) -> Place:
        if self.fail_saves:
            raise RuntimeError("database unavailable")
        self.save_count += 1
        stored = place.model_copy(deep=True)
        # Opening hours are not persisted
        stored.opening_hours = {}
        self.places[place.place_id] = stored
        return place

    async def delete_by_id(self, place_id: UUID) -> None:
        self.places.pop(place_id, None)


class StubPlacesProvider(PlacesProvider):
    """Provider double with canned responses and call counters."""

    def __init__(self) -> None:
        self.details: Dict[str, ProviderDetails] = {}
        self.search_results: Dict[str, List[ProviderDetails]] = {}
        self.fetch_calls: List[str] = []
        self.search_calls: List[str] = []
        self.delay = 0.0

    async def fetch_by_id(self, provider_id: str) -> ProviderDetails:
        self.fetch_calls.append(provider_id)
        await asyncio.sleep(self.delay)
        if provider_id not in self.details:
            raise ProviderUnavailableError(f"Failed to fetch place: {provider_id}")
        return self.details[provider_id]

    async def search_by_name(self, text: str) -> List[ProviderDetails]:
        self.search_calls.append(text)
        await asyncio.sleep(self.delay)
        return list(self.search_results.get(text, []))


def make_details(
    provider_id: str = "ChIJ-test-1",
    business_status: Optional[str] = "OPERATIONAL",
    periods: Optional[List[ProviderPeriod]] = None,
    **kwargs,
) -> ProviderDetails:
    if periods is None:
        periods = [
            ProviderPeriod(
                open=ProviderPeriodPoint(day=1, hour=11, minute=30),
                close=ProviderPeriodPoint(day=1, hour=22, minute=0),
            )
        ]
    defaults = {
        "name": "Chat Thai",
        "formatted_address": "20 Campbell St, Haymarket NSW 2000, Australia",
        "website": "https://chatthai.com.au/",
    }
    defaults.update(kwargs)
    return ProviderDetails(
        provider_id=provider_id,
        business_status=business_status,
        periods=periods,
        **defaults,
    )


def make_place(
    name: str = "Chat Thai",
    category: Optional[PlaceCategory] = PlaceCategory.RESTAURANT,
    visited: Optional[bool] = False,
    provider_id: Optional[str] = None,
    **kwargs,
) -> Place:
    kwargs.setdefault("created_at", FIXED_NOW)
    kwargs.setdefault("last_updated_at", FIXED_NOW)
    return Place(
        place_id=kwargs.pop("place_id", uuid4()),
        name=name,
        category=category,
        visited=visited,
        provider_id=provider_id,
        **kwargs,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> InMemoryPlaceRepository:
    return InMemoryPlaceRepository()


@pytest.fixture
def provider() -> StubPlacesProvider:
    return StubPlacesProvider()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryEnrichmentCache:
    return InMemoryEnrichmentCache(max_entries=500, ttl_seconds=600, clock=clock)


@pytest.fixture
def service(
    repository: InMemoryPlaceRepository,
    provider: StubPlacesProvider,
    cache: InMemoryEnrichmentCache,
) -> PlaceEnrichmentService:
    return PlaceEnrichmentService(
        repository=repository,
        provider=provider,
        cache=cache,
        now=lambda: FIXED_NOW,
    )


@pytest.fixture
def feed_service(repository: InMemoryPlaceRepository) -> FeedService:
    return FeedService(repository)
