"""Dependencies for FastAPI routes."""
from fastapi import Request

from app.enrichment.place_enrichment_service import PlaceEnrichmentService
from app.services.feed_service import FeedService


def get_enrichment_service(request: Request) -> PlaceEnrichmentService:
    """
    Return the process-wide enrichment service.

    Built once in the application lifespan so that the enrichment cache and
    the per-place locks are shared by every request.
    """
    return request.app.state.enrichment_service


def get_feed_service(request: Request) -> FeedService:
    return request.app.state.feed_service
