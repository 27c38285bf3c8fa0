"""Redis client for caching."""
import logging
from typing import Optional

import redis.asyncio as redis

from app.config import Settings, settings

logger = logging.getLogger(__name__)


class RedisClient:
    """Async Redis client wrapper with caching utilities.

    Errors are logged and reported as misses/failures, never raised.
    """

    def __init__(self, config: Optional[Settings] = None, client: Optional[redis.Redis] = None):
        config = config or settings
        self.client = client or redis.Redis(
            host=config.redis_host,
            port=config.redis_port,
            db=config.redis_db,
            password=config.redis_password,
            decode_responses=True,
            socket_timeout=1.0,
            socket_connect_timeout=1.0,
        )

    async def get(self, key: str) -> Optional[str]:
        """Get raw value from cache."""
        try:
            return await self.client.get(key)
        except Exception as e:
            logger.warning(f"Redis GET error: {e}")
            return None

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Set value in cache with optional TTL."""
        try:
            if ttl:
                await self.client.setex(key, ttl, value)
            else:
                await self.client.set(key, value)
            return True
        except Exception as e:
            logger.warning(f"Redis SET error: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        try:
            await self.client.delete(key)
            return True
        except Exception as e:
            logger.warning(f"Redis DELETE error: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()
