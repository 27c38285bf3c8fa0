"""
Enrichment service for keeping stored places in sync with the place provider.

Given a stored place this service decides whether the provider identity is
known, calls fetch-by-id or search-by-name accordingly, merges the returned
fields into the place and keeps the enrichment cache consistent with the
store:

- ``places`` holds the enriched snapshot returned by get_place
- ``placeDetails`` holds provider responses keyed by provider id, or by
  place id while a name search result is being persisted

Enrichment of a single place id is serialized through a per-id lock, so
concurrent readers of an unresolved place trigger one provider search.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Union
from uuid import UUID, uuid4

from app.config import Settings, settings
from app.enrichment.cache import PLACE_DETAILS_CACHE, PLACES_CACHE, EnrichmentCache
from app.enrichment.locks import KeyedLock
from app.errors import NotFoundError, PlaceServiceError, ProviderUnavailableError
from app.models.places import (
    AddPlaceRequest,
    OpeningHoursPeriod,
    Place,
    ProviderDetails,
    RefreshPlacesResponse,
    UpdatePlaceRequest,
)
from app.repositories.places import PlaceRepository
from app.services.google_places import PlacesProvider
from app.utils.normalizers import (
    is_closed_status,
    normalize_opening_hours,
    parse_category,
    parse_place_id,
    parse_visited,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("rating", "notes")


def utc_now() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PlaceEnrichmentService:
    """Orchestrates store reads/writes, provider calls and cache upkeep."""

    def __init__(
        self,
        repository: PlaceRepository,
        provider: PlacesProvider,
        cache: EnrichmentCache,
        enrich_on_add: bool = True,
        overwrite_known_closure: bool = False,
        refresh_batch_size: int = 5,
        now: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.provider = provider
        self.cache = cache
        self.enrich_on_add = enrich_on_add
        self.overwrite_known_closure = overwrite_known_closure
        self.refresh_batch_size = max(1, refresh_batch_size)
        self._now = now
        self._locks = KeyedLock()

    async def get_place(self, place_id: Union[str, UUID]) -> Place:
        """
        Return a place enriched with live provider data.

        Args:
            place_id: Local place id (UUID text)

        Returns:
            The enriched place. Only identity resolution (first successful
            name search) is persisted; closure and opening hours live on the
            returned copy and in the ``places`` cache.

        Raises:
            InvalidArgumentError: Malformed id
            NotFoundError: Unknown id, or the name search found nothing
            ProviderUnavailableError / ProviderUnauthenticatedError: Provider failure
        """
        uuid = parse_place_id(place_id)
        key = str(uuid)

        cached = await self.cache.get(PLACES_CACHE, key)
        if cached is not None:
            return cached

        async with self._locks.hold(key):
            # Another request may have enriched this place while we waited
            cached = await self.cache.get(PLACES_CACHE, key)
            if cached is not None:
                return cached

            place = await self._find(uuid)
            if place.provider_id:
                details = await self._details_by_provider_id(place.provider_id)
            else:
                details = await self._resolve_identity(place)

            self._apply_closure(place, details)
            if details.periods is not None:
                place.opening_hours = self._opening_hours(details)

            await self.cache.put(PLACES_CACHE, key, place)
            return place

    async def add_place(self, request: AddPlaceRequest) -> Place:
        """
        Create and persist a new place.

        When ``enrich_on_add`` is on and a provider id was supplied, the
        provider is queried before the first persist; a provider failure
        fails the add instead of saving bare data.
        """
        category = parse_category(request.category)
        visited = parse_visited(request.visited)
        provider_id = (request.provider_id or "").strip() or None
        now = self._now()

        place = Place(
            place_id=uuid4(),
            name=request.name,
            cuisine=request.cuisine,
            category=category,
            location_text=request.location_text,
            influence_text=request.influence_text,
            visited=visited,
            notes=request.notes,
            rating=request.rating,
            website=request.website,
            social_media=request.social_media,
            provider_id=provider_id,
            created_at=now,
            last_updated_at=now,
        )

        if provider_id and self.enrich_on_add:
            details = await self._details_by_provider_id(provider_id)
            self._apply_closure(place, details)
            if not place.is_permanently_closed and details.periods is not None:
                place.opening_hours = self._opening_hours(details)
            if details.formatted_address:
                place.full_address = details.formatted_address
            if details.website:
                place.website = details.website

        await self.repository.save(place)
        logger.info(f"Added place {place.place_id} ({place.name})")
        return place

    async def update_place(
        self, place_id: Union[str, UUID], request: UpdatePlaceRequest
    ) -> Place:
        """Apply rating/notes changes; any update marks the place as visited."""
        uuid = parse_place_id(place_id)
        key = str(uuid)

        async with self._locks.hold(key):
            place = await self._find(uuid)
            for field in UPDATABLE_FIELDS:
                if field in request.model_fields_set:
                    setattr(place, field, getattr(request, field))
            place.visited = True
            place.last_updated_at = self._now()

            await self.repository.save(place)
            await self.cache.evict(PLACES_CACHE, key)

        logger.info(f"Updated place {uuid}")
        return place

    async def delete_place(self, place_id: Union[str, UUID]) -> None:
        """Delete a place; deleting an unknown id is not an error."""
        uuid = parse_place_id(place_id)
        key = str(uuid)

        async with self._locks.hold(key):
            await self.repository.delete_by_id(uuid)
            await self.cache.evict(PLACES_CACHE, key)
            await self.cache.evict(PLACE_DETAILS_CACHE, key)

        logger.info(f"Deleted place {uuid}")

    async def refresh_places(self, place_ids: Iterable[str]) -> RefreshPlacesResponse:
        """
        Drop cached snapshots and re-enrich places in parallel batches.

        Both the enriched snapshot and the cached provider details are
        evicted, so every resolved place is fetched from the provider again.
        Places still lacking a provider id get resolved by name. A failure
        for one id is reported in ``failed`` and does not stop the others.
        """
        ids = list(dict.fromkeys(place_ids))
        refreshed: List[Place] = []
        failed: Dict[str, str] = {}

        for i in range(0, len(ids), self.refresh_batch_size):
            batch = ids[i:i + self.refresh_batch_size]
            results = await asyncio.gather(
                *[self._refresh_one(place_id) for place_id in batch],
                return_exceptions=True,
            )

            for place_id, result in zip(batch, results):
                if isinstance(result, Place):
                    refreshed.append(result)
                elif isinstance(result, PlaceServiceError):
                    logger.warning(f"Refresh failed for place {place_id}: {result.message}")
                    failed[place_id] = result.message
                elif isinstance(result, Exception):
                    logger.error(f"Refresh failed for place {place_id}: {result}")
                    failed[place_id] = str(result)
                else:
                    raise result

        return RefreshPlacesResponse(refreshed=refreshed, failed=failed)

    async def _refresh_one(self, place_id: str) -> Place:
        uuid = parse_place_id(place_id)
        key = str(uuid)
        place = await self._find(uuid)
        await self.cache.evict(PLACES_CACHE, key)
        if place.provider_id:
            await self.cache.evict(PLACE_DETAILS_CACHE, place.provider_id)
        return await self.get_place(key)

    async def _find(self, uuid: UUID) -> Place:
        place = await self.repository.find_by_id(uuid)
        if place is None:
            raise NotFoundError(f"Place not found: {uuid}")
        return place

    async def _details_by_provider_id(self, provider_id: str) -> ProviderDetails:
        details = await self.cache.get(PLACE_DETAILS_CACHE, provider_id)
        if details is None:
            details = await self.provider.fetch_by_id(provider_id)
            await self.cache.put(PLACE_DETAILS_CACHE, provider_id, details)
        return details

    async def _resolve_identity(self, place: Place) -> ProviderDetails:
        """
        Resolve the provider id of a place by searching for its name.

        The first match in provider order wins. The match is cached under the
        place id until the place is persisted, then that entry is evicted so
        later reads go through the provider id.
        """
        key = str(place.place_id)

        details = await self.cache.get(PLACE_DETAILS_CACHE, key)
        if details is None:
            matches = await self.provider.search_by_name(place.name)
            if not matches:
                raise NotFoundError(f"No matching external record for place: {place.name}")
            details = matches[0]
            await self.cache.put(PLACE_DETAILS_CACHE, key, details)

        if not details.provider_id:
            raise ProviderUnavailableError(
                f"Provider match for {place.name!r} has no provider id"
            )

        place.provider_id = details.provider_id
        if details.formatted_address:
            place.full_address = details.formatted_address
        if details.website:
            place.website = details.website
        place.last_updated_at = self._now()

        await self.repository.save(place)
        await self.cache.evict(PLACE_DETAILS_CACHE, key)
        logger.info(f"Resolved place {key} to provider id {place.provider_id}")
        return details

    def _apply_closure(self, place: Place, details: ProviderDetails) -> None:
        closed = is_closed_status(details.business_status)
        if closed is None:
            logger.warning(
                f"No business status for place {place.place_id}; closure left unchanged"
            )
            return
        if place.is_permanently_closed is None or self.overwrite_known_closure:
            place.is_permanently_closed = closed

    def _opening_hours(self, details: ProviderDetails) -> Dict[str, List[OpeningHoursPeriod]]:
        try:
            return normalize_opening_hours(details.periods or [])
        except ValueError as exc:
            raise ProviderUnavailableError(
                f"Provider returned malformed opening hours: {exc}"
            ) from exc


def build_place_enrichment_service(
    repository: PlaceRepository,
    provider: PlacesProvider,
    cache: EnrichmentCache,
    config: Optional[Settings] = None,
) -> PlaceEnrichmentService:
    """Wire the service using the application settings."""
    config = config or settings
    return PlaceEnrichmentService(
        repository=repository,
        provider=provider,
        cache=cache,
        enrich_on_add=config.enrich_on_add,
        overwrite_known_closure=config.overwrite_known_closure,
        refresh_batch_size=config.refresh_batch_size,
    )
