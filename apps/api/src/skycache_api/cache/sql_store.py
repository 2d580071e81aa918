"""SQLite-backed cache store (SQLAlchemy async + aiosqlite)."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from skycache_api.cache.store import DEFAULT_TTL, CacheStore
from skycache_api.errors import CacheUnavailableError
from skycache_core.schemas import CacheEntry
from skycache_db.database import (
    create_cache_engine,
    create_session_factory,
    init_schema,
)
from skycache_db.models import SearchCacheRow

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class SqlCacheStore(CacheStore):
    """Cache store keeping one row per search key in a local database file."""

    def __init__(
        self,
        url: str,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(ttl=ttl, clock=clock)
        self._url = url
        self._engine: AsyncEngine | None = None
        self._sessions = None

    async def open(self) -> None:
        if self._engine is not None:
            return
        try:
            self._engine = create_cache_engine(self._url)
            self._sessions = create_session_factory(self._engine)
            await init_schema(self._engine)
        except (SQLAlchemyError, OSError) as exc:
            await self.close()
            msg = f"Cache database unavailable: {exc}"
            raise CacheUnavailableError(msg) from exc
        logger.info("SQL cache store opened: %s", self._engine.url)

    def _session(self):
        if self._sessions is None:
            msg = "SQL cache store has not been opened"
            raise CacheUnavailableError(msg)
        return self._sessions()

    async def get(self, key: str) -> CacheEntry | None:
        try:
            async with self._session() as session:
                row = await session.get(SearchCacheRow, key)
                if row is None:
                    return None
                if self.now() - row.written_at > self.ttl:
                    await session.delete(row)
                    await session.commit()
                    logger.debug("Evicted expired cache entry %s", key)
                    return None
                payload = row.payload
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache read failed for {key}: {exc}"
            raise CacheUnavailableError(msg) from exc

        try:
            return CacheEntry.model_validate_json(payload)
        except ValidationError as exc:
            msg = f"Cached payload for {key} could not be decoded"
            raise CacheUnavailableError(msg) from exc

    async def put(self, key: str, entry: CacheEntry) -> None:
        request = entry.request
        row = SearchCacheRow(
            key=key,
            origin=request.origin,
            destination=request.destination,
            departure_date=request.departure_date.isoformat(),
            payload=entry.model_dump_json(),
            written_at=entry.written_at,
        )
        try:
            async with self._session() as session:
                await session.merge(row)
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache write failed for {key}: {exc}"
            raise CacheUnavailableError(msg) from exc

    async def evict_expired(self) -> int:
        cutoff = self.now() - self.ttl
        try:
            async with self._session() as session:
                result = await session.execute(
                    delete(SearchCacheRow).where(SearchCacheRow.written_at < cutoff)
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache eviction failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        count = result.rowcount or 0
        if count:
            logger.info("Evicted %d expired cache entries", count)
        return count

    async def clear(self) -> int:
        try:
            async with self._session() as session:
                result = await session.execute(delete(SearchCacheRow))
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache clear failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        return result.rowcount or 0

    async def count(self) -> int:
        try:
            async with self._session() as session:
                total = await session.scalar(
                    select(func.count()).select_from(SearchCacheRow)
                )
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache count failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        return total or 0

    async def find_by_route(
        self, origin: str, destination: str, departure_date: str | None = None
    ) -> list[str]:
        """Return keys of live entries for a route, newest first."""
        cutoff = self.now() - self.ttl
        stmt = (
            select(SearchCacheRow.key)
            .where(
                SearchCacheRow.origin == origin.upper(),
                SearchCacheRow.destination == destination.upper(),
                SearchCacheRow.written_at >= cutoff,
            )
            .order_by(SearchCacheRow.written_at.desc())
        )
        if departure_date is not None:
            stmt = stmt.where(SearchCacheRow.departure_date == departure_date)
        try:
            async with self._session() as session:
                result = await session.execute(stmt)
                keys = list(result.scalars().all())
        except (SQLAlchemyError, OSError) as exc:
            msg = f"Cache route lookup failed: {exc}"
            raise CacheUnavailableError(msg) from exc
        return keys

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None
            logger.info("SQL cache store closed")
