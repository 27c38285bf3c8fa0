"""Places API router: feed queries and place CRUD with provider enrichment."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from app.dependencies import get_enrichment_service, get_feed_service
from app.enrichment.place_enrichment_service import PlaceEnrichmentService
from app.models.places import (
    AddPlaceRequest,
    Place,
    RefreshPlacesResponse,
    UpdatePlaceRequest,
)
from app.services.feed_service import FeedService

router = APIRouter(prefix="/places", tags=["places"])
logger = logging.getLogger(__name__)


@router.get("/feed", response_model=List[Place])
async def get_feed(
    type: str = Query("all", description="ALL or a place category, e.g. RESTAURANT"),
    visited: Optional[str] = Query(None, description="true / false; omit for no filter"),
    feed_service: FeedService = Depends(get_feed_service),
):
    """
    List places filtered by category and visited state.

    `type=all` (any case) returns every place and ignores `visited`.
    """
    return await feed_service.get_feed(type, visited)


@router.get("/place/{place_id}", response_model=Place)
async def get_place(
    place_id: str,
    service: PlaceEnrichmentService = Depends(get_enrichment_service),
):
    """Retrieve a place enriched with live provider data."""
    return await service.get_place(place_id)


@router.post("/add", response_model=Place, status_code=status.HTTP_201_CREATED)
async def add_place(
    payload: AddPlaceRequest,
    service: PlaceEnrichmentService = Depends(get_enrichment_service),
):
    """Create a new place, enriching it first when a Google place id is given."""
    return await service.add_place(payload)


@router.post("/update/{place_id}", response_model=Place)
async def update_place(
    place_id: str,
    payload: UpdatePlaceRequest,
    service: PlaceEnrichmentService = Depends(get_enrichment_service),
):
    """Update rating/notes. Updating a place also marks it as visited."""
    return await service.update_place(place_id, payload)


@router.put("/delete/{place_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_place(
    place_id: str,
    service: PlaceEnrichmentService = Depends(get_enrichment_service),
):
    """Delete a place. Unknown ids are accepted."""
    await service.delete_place(place_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/refresh", response_model=RefreshPlacesResponse)
async def refresh_places(
    place_ids: List[str] = Body(..., description="Place ids to re-enrich"),
    service: PlaceEnrichmentService = Depends(get_enrichment_service),
):
    """Re-enrich a set of places, resolving missing Google place ids by name."""
    logger.info(f"Refreshing {len(place_ids)} places")
    return await service.refresh_places(place_ids)
