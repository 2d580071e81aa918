"""Abstract cache store contract shared by the SQL and Redis backends."""

from __future__ import annotations

import abc
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from skycache_core.schemas import CacheEntry

DEFAULT_TTL = 30 * 60  # 30 minutes in seconds


class CacheStore(abc.ABC):
    """Durable key-value store of search results with a fixed TTL.

    ``get`` treats entries older than the TTL as absent and deletes them.
    ``put`` replaces any existing entry for the key. Backend failures are
    raised as :class:`~skycache_api.errors.CacheUnavailableError`.
    """

    def __init__(
        self,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> float:
        return self._ttl

    def now(self) -> float:
        return self._clock()

    async def open(self) -> None:  # noqa: B027
        """Prepare the backend (create tables, connect)."""

    @abc.abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for *key*, or None if missing or expired."""

    @abc.abstractmethod
    async def put(self, key: str, entry: CacheEntry) -> None:
        """Store *entry* under *key*, overwriting any previous value."""

    @abc.abstractmethod
    async def evict_expired(self) -> int:
        """Delete every expired entry and return how many were removed."""

    @abc.abstractmethod
    async def clear(self) -> int:
        """Delete every entry and return how many were removed."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any held connections."""
