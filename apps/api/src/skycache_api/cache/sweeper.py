"""Periodic eviction of expired cache entries."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from skycache_api.errors import CacheUnavailableError

if TYPE_CHECKING:
    from skycache_api.cache.store import CacheStore

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Background task that calls ``evict_expired`` every *interval* seconds."""

    def __init__(self, store: CacheStore, interval: float) -> None:
        self._store = store
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self._interval <= 0:
            logger.info("Cache sweeper disabled")
            return
        if self.is_running:
            logger.warning("Cache sweeper is already running")
            return
        self._task = asyncio.create_task(self._loop(), name="skycache-cache-sweeper")
        logger.info("Cache sweeper started (every %.0fs)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Cache sweeper stopped")

    async def sweep_once(self) -> int:
        """Run one eviction pass; storage failures are logged, not raised."""
        self.runs += 1
        try:
            return await self._store.evict_expired()
        except CacheUnavailableError as exc:
            logger.warning("Cache sweep failed: %s", exc)
            return 0

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.sweep_once()
