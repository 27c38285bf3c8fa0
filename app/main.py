"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import AsyncSessionLocal, engine, init_models
from app.enrichment.cache import build_enrichment_cache
from app.enrichment.place_enrichment_service import build_place_enrichment_service
from app.errors import PlaceServiceError
from app.repositories.places import SqlPlaceRepository
from app.routers import places
from app.services.feed_service import FeedService
from app.services.google_places import GooglePlacesClient

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the shared services once per process."""
    await init_models()

    repository = SqlPlaceRepository(AsyncSessionLocal)
    cache = build_enrichment_cache(settings)
    provider = GooglePlacesClient(settings)
    if not settings.google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY not set; place enrichment will fail")

    app.state.enrichment_service = build_place_enrichment_service(
        repository, provider, cache, settings
    )
    app.state.feed_service = FeedService(repository)
    try:
        yield
    finally:
        await provider.aclose()
        await cache.close()
        await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Bitebook API",
    description="Backend API for Bitebook - tracked places enriched with Google Places data",
    version="1.0.0",
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url="/redoc" if settings.environment == "development" else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlaceServiceError)
async def place_service_error_handler(request: Request, exc: PlaceServiceError):
    """Render service errors with their mapped HTTP status."""
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.model_dump())


# Include routers
app.include_router(places.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to Bitebook API",
        "version": "1.0.0",
        "docs": "/docs" if settings.environment == "development" else "disabled",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
