"""
Enrichment cache used to suppress repeated provider calls.

Two logical caches are used by the enrichment service:

- ``places``: enriched Place snapshots keyed by place id
- ``placeDetails``: ProviderDetails keyed by provider id, or by place id
  while a name-based identity resolution is in progress

Every entry expires after a fixed TTL. The cache is best-effort: any backend
failure is logged and reported to the caller as a miss.
"""
import abc
import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel

from app.config import Settings, settings
from app.models.places import Place, ProviderDetails
from app.services.redis_client import RedisClient

logger = logging.getLogger(__name__)

PLACES_CACHE = "places"
PLACE_DETAILS_CACHE = "placeDetails"

CACHE_MODELS: Dict[str, Type[BaseModel]] = {
    PLACES_CACHE: Place,
    PLACE_DETAILS_CACHE: ProviderDetails,
}


class EnrichmentCache(abc.ABC):
    """get/put/evict over (cache name, key) pairs that never raise."""

    async def get(self, cache_name: str, key: str) -> Optional[BaseModel]:
        try:
            return await self._get(cache_name, key)
        except Exception as exc:
            logger.warning(f"Cache get failed for {cache_name}:{key}: {exc}")
            return None

    async def put(self, cache_name: str, key: str, value: BaseModel) -> None:
        try:
            await self._put(cache_name, key, value)
        except Exception as exc:
            logger.warning(f"Cache put failed for {cache_name}:{key}: {exc}")

    async def evict(self, cache_name: str, key: str) -> None:
        try:
            await self._evict(cache_name, key)
        except Exception as exc:
            logger.warning(f"Cache evict failed for {cache_name}:{key}: {exc}")

    async def close(self) -> None:
        return None

    @abc.abstractmethod
    async def _get(self, cache_name: str, key: str) -> Optional[BaseModel]:
        ...

    @abc.abstractmethod
    async def _put(self, cache_name: str, key: str, value: BaseModel) -> None:
        ...

    @abc.abstractmethod
    async def _evict(self, cache_name: str, key: str) -> None:
        ...


class InMemoryEnrichmentCache(EnrichmentCache):
    """Per-process cache bounded by entry count and age.

    Each cache name holds at most ``max_entries`` entries; inserting past
    capacity drops the oldest insertion. Values are copied on the way in and
    out so cached snapshots cannot be mutated by callers.
    """

    def __init__(
        self,
        max_entries: int = 500,
        ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._caches: Dict[str, "OrderedDict[str, Tuple[float, BaseModel]]"] = {}
        self._lock = threading.Lock()

    async def _get(self, cache_name: str, key: str) -> Optional[BaseModel]:
        with self._lock:
            entries = self._caches.get(cache_name)
            if not entries or key not in entries:
                return None
            inserted_at, value = entries[key]
            if self._clock() - inserted_at >= self.ttl_seconds:
                del entries[key]
                return None
            return value.model_copy(deep=True)

    async def _put(self, cache_name: str, key: str, value: BaseModel) -> None:
        with self._lock:
            entries = self._caches.setdefault(cache_name, OrderedDict())
            entries.pop(key, None)
            entries[key] = (self._clock(), value.model_copy(deep=True))
            while len(entries) > self.max_entries:
                entries.popitem(last=False)

    async def _evict(self, cache_name: str, key: str) -> None:
        with self._lock:
            entries = self._caches.get(cache_name)
            if entries is not None:
                entries.pop(key, None)

    def size(self, cache_name: str) -> int:
        with self._lock:
            return len(self._caches.get(cache_name) or {})


class RedisEnrichmentCache(EnrichmentCache):
    """Shared cache in Redis; TTL via SETEX, capacity left to Redis eviction."""

    def __init__(
        self,
        redis_client: RedisClient,
        ttl_seconds: int = 600,
        key_prefix: str = "bitebook",
    ) -> None:
        self.redis_client = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    def _key(self, cache_name: str, key: str) -> str:
        return f"{self.key_prefix}:{cache_name}:{key}"

    async def _get(self, cache_name: str, key: str) -> Optional[BaseModel]:
        raw = await self.redis_client.get(self._key(cache_name, key))
        if raw is None:
            return None
        return CACHE_MODELS[cache_name].model_validate_json(raw)

    async def _put(self, cache_name: str, key: str, value: BaseModel) -> None:
        await self.redis_client.set(
            self._key(cache_name, key),
            value.model_dump_json(),
            ttl=self.ttl_seconds,
        )

    async def _evict(self, cache_name: str, key: str) -> None:
        await self.redis_client.delete(self._key(cache_name, key))

    async def close(self) -> None:
        await self.redis_client.close()


def build_enrichment_cache(config: Optional[Settings] = None) -> EnrichmentCache:
    """Create the cache backend selected by ``cache_backend``."""
    config = config or settings
    backend = config.cache_backend.lower()
    if backend == "redis":
        logger.info(f"Using Redis enrichment cache at {config.redis_host}:{config.redis_port}")
        return RedisEnrichmentCache(
            RedisClient(config),
            ttl_seconds=config.cache_ttl_seconds,
            key_prefix=config.redis_key_prefix,
        )
    if backend != "memory":
        logger.warning(f"Unknown cache backend {config.cache_backend!r}, using in-memory cache")
    return InMemoryEnrichmentCache(
        max_entries=config.cache_max_entries,
        ttl_seconds=config.cache_ttl_seconds,
    )
