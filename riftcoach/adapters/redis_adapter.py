"""Redis cache adapter implementing CachePort over raw bytes."""

import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from riftcoach.config import get_settings
from riftcoach.core.metrics import mark_cache
from riftcoach.core.ports import CachePort

logger = logging.getLogger(__name__)


def _namespace(key: str) -> str:
    """Metric label for a key, e.g. ``cohort`` or ``player-stats``."""
    if key.startswith("cache:cohort:"):
        return "cohort"
    if key.startswith("cache/"):
        return key.split("/", 2)[1]
    return "other"


class RedisAdapter(CachePort):
    """Redis cache adapter using the async redis client.

    Every failure is logged and reported as a miss (reads) or ``False``
    (writes); callers recompute from the data source.
    """

    def __init__(self, client: Any = None) -> None:
        self.settings = get_settings()
        self._client: Any = client  # aioredis.Redis (untyped library)

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client:
            logger.warning("Redis client already connected")
            return

        try:
            self._client = aioredis.from_url(self.settings.redis_url, decode_responses=False)
            await self._client.ping()
            logger.info("Redis client connected")
        except (RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self) -> None:
        """Disconnect from Redis."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis client disconnected")

    async def get(self, key: str) -> bytes | None:
        if not self._client:
            logger.error("Redis client not connected")
            mark_cache(_namespace(key), "error")
            return None

        try:
            value = await self._client.get(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error getting key {key}: {e}")
            mark_cache(_namespace(key), "error")
            return None

        mark_cache(_namespace(key), "miss" if value is None else "hit")
        return value

    async def get_many(self, keys: list[str]) -> dict[str, bytes | None]:
        """Batch read with a single MGET; an error misses every key."""
        if not keys:
            return {}
        if not self._client:
            logger.error("Redis client not connected")
            return dict.fromkeys(keys)

        try:
            values = await self._client.mget(keys)
        except (RedisError, OSError) as e:
            logger.error(f"Error reading {len(keys)} keys: {e}")
            for key in keys:
                mark_cache(_namespace(key), "error")
            return dict.fromkeys(keys)

        for key, value in zip(keys, values, strict=True):
            mark_cache(_namespace(key), "miss" if value is None else "hit")
        return dict(zip(keys, values, strict=True))

    async def set(self, key: str, value: bytes, ttl: int | None = None) -> bool:
        """Set value in cache with optional TTL in seconds."""
        if not self._client:
            logger.error("Redis client not connected")
            return False

        try:
            if ttl:
                await self._client.setex(key, ttl, value)
            else:
                await self._client.set(key, value)
            return True
        except (RedisError, OSError) as e:
            logger.error(f"Error setting key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        if not self._client:
            logger.error("Redis client not connected")
            return False

        try:
            await self._client.delete(key)
            return True
        except (RedisError, OSError) as e:
            logger.error(f"Error deleting key {key}: {e}")
            return False

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        if not self._client:
            return False

        try:
            await self._client.ping()
            return True
        except (RedisError, OSError):
            return False
