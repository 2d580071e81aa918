"""Redis-backed cache store."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from skycache_api.cache.store import DEFAULT_TTL, CacheStore
from skycache_api.errors import CacheUnavailableError
from skycache_core.schemas import CacheEntry

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

INDEX_KEY = "skycache:search:index"

# Redis drops keys a little after the logical TTL so the explicit
# written_at check decides expiry.
_EXPIRY_GRACE = 60


class RedisCacheStore(CacheStore):
    """Cache store keeping JSON entries in Redis plus a written_at index.

    The sorted set at :data:`INDEX_KEY` scores every key by its
    ``written_at`` timestamp so expired entries can be found by range.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        client: redis.Redis | None = None,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl=ttl, clock=clock)
        if url is None and client is None:
            msg = "RedisCacheStore needs either a url or a client"
            raise ValueError(msg)
        self._url = url
        self._redis = client

    async def open(self) -> None:
        if self._redis is None:
            self._redis = redis.from_url(self._url, decode_responses=True)
            logger.info("Redis cache store initialised: %s", self._url)

    def _pool(self) -> redis.Redis:
        if self._redis is None:
            msg = "Redis cache store has not been opened"
            raise CacheUnavailableError(msg)
        return self._redis

    async def get(self, key: str) -> CacheEntry | None:
        pool = self._pool()
        try:
            raw = await pool.get(key)
        except (RedisError, OSError) as exc:
            msg = f"Cache read failed for {key}: {exc}"
            raise CacheUnavailableError(msg) from exc
        if raw is None:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValidationError as exc:
            msg = f"Cached payload for {key} could not be decoded"
            raise CacheUnavailableError(msg) from exc

        if entry.is_expired(self.now(), self.ttl):
            await self._delete(pool, [key])
            logger.debug("Evicted expired cache entry %s", key)
            return None
        return entry

    async def put(self, key: str, entry: CacheEntry) -> None:
        pool = self._pool()
        try:
            pipe = pool.pipeline()
            pipe.set(key, entry.model_dump_json(), ex=int(self.ttl) + _EXPIRY_GRACE)
            pipe.zadd(INDEX_KEY, {key: entry.written_at})
            await pipe.execute()
        except (RedisError, OSError) as exc:
            msg = f"Cache write failed for {key}: {exc}"
            raise CacheUnavailableError(msg) from exc

    async def evict_expired(self) -> int:
        pool = self._pool()
        cutoff = self.now() - self.ttl
        try:
            expired = await pool.zrangebyscore(INDEX_KEY, "-inf", f"({cutoff}")
        except (RedisError, OSError) as exc:
            msg = f"Cache eviction failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        if not expired:
            return 0
        await self._delete(pool, list(expired))
        logger.info("Evicted %d expired cache entries", len(expired))
        return len(expired)

    async def clear(self) -> int:
        pool = self._pool()
        try:
            keys = await pool.zrange(INDEX_KEY, 0, -1)
        except (RedisError, OSError) as exc:
            msg = f"Cache clear failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        if keys:
            await self._delete(pool, list(keys))
        return len(keys)

    async def _delete(self, pool: redis.Redis, keys: list[str]) -> None:
        try:
            pipe = pool.pipeline()
            pipe.delete(*keys)
            pipe.zrem(INDEX_KEY, *keys)
            await pipe.execute()
        except (RedisError, OSError) as exc:
            msg = f"Cache delete failed: {exc}"
            raise CacheUnavailableError(msg) from exc

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis cache store closed")
