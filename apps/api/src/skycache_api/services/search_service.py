"""Flight search orchestration: cache lookup, upstream fetch, worker evaluation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Self, TypeVar

from pydantic import BaseModel, ValidationError

from skycache_api.cache.cache_keys import search_key
from skycache_api.errors import (
    CacheUnavailableError,
    FlightNotFoundError,
    SearchValidationError,
)
from skycache_api.services.assembly import assemble_records
from skycache_core.schemas import (
    CacheEntry,
    FilterCriteria,
    SearchRequest,
    SearchResult,
    SortSpec,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from skycache_api.cache.store import CacheStore
    from skycache_api.cache.sweeper import CacheSweeper
    from skycache_api.upstream.base import FlightDataSource
    from skycache_api.worker.client import QueryWorker
    from skycache_core.schemas import FlightRecord

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _validate(
    model: type[M], value: M | Mapping[str, Any], what: str
) -> M:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or what
        msg = f"Invalid {what}: {location}: {first['msg']}"
        raise SearchValidationError(msg) from exc


def default_criteria(request: SearchRequest) -> FilterCriteria:
    """Requested cabin with room for every passenger."""
    return FilterCriteria(
        cabin_class=request.cabin_class,
        minimum_seats=request.passengers.total,
    )


class SearchOrchestrator:
    """Answers flight searches from the cache store or the record API.

    Cache misses are fetched upstream and written back; raw rows from
    either source are assembled into records and filtered/sorted on the
    query worker. The orchestrator owns its collaborators' lifecycles:
    ``start()`` opens them and ``aclose()`` releases them.
    """

    def __init__(
        self,
        store: CacheStore,
        data_source: FlightDataSource,
        worker: QueryWorker,
        *,
        scheduled_status: str = "scheduled",
        sweeper: CacheSweeper | None = None,
    ) -> None:
        self._store = store
        self._data_source = data_source
        self._worker = worker
        self._scheduled_status = scheduled_status
        self._sweeper = sweeper

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open the store and start the worker and sweeper.

        A store that cannot be opened is logged and left closed; every
        lookup then reads as a miss and every write is skipped.
        """
        try:
            await self._store.open()
        except CacheUnavailableError as exc:
            logger.warning("Cache store unavailable, searching uncached: %s", exc)
        self._worker.start()
        if self._sweeper is not None:
            self._sweeper.start()

    async def aclose(self) -> None:
        if self._sweeper is not None:
            await self._sweeper.stop()
        await self._worker.stop()
        await self._data_source.close()
        await self._store.close()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self,
        params: SearchRequest | Mapping[str, Any],
        criteria: FilterCriteria | Mapping[str, Any] | None = None,
        sort: SortSpec | Mapping[str, Any] | None = None,
    ) -> SearchResult:
        """Run one search.

        Without *criteria* the results are limited to the requested cabin
        with at least one seat per passenger; without *sort* they are
        ordered by departure time.
        """
        request = _validate(SearchRequest, params, "search parameters")
        if criteria is None:
            filters = default_criteria(request)
        else:
            filters = _validate(FilterCriteria, criteria, "filter criteria")
            if filters.cabin_class is None:
                filters = filters.model_copy(
                    update={"cabin_class": request.cabin_class}
                )
        order = _validate(SortSpec, sort, "sort") if sort is not None else SortSpec()

        key = search_key(request)
        entry = await self._read_cache(key)
        cached = entry is not None
        if entry is None:
            entry = await self._fetch(key, request)
            await self._write_cache(key, entry)

        outbound = assemble_records(entry.outbound, entry.prices, entry.seats)
        inbound = assemble_records(entry.return_flights, entry.prices, entry.seats)
        outbound, inbound = await asyncio.gather(
            self._evaluate(outbound, filters, order),
            self._evaluate(inbound, filters, order),
        )
        logger.info(
            "Search %s->%s on %s: %d outbound, %d return (%s)",
            request.origin,
            request.destination,
            request.departure_date,
            len(outbound),
            len(inbound),
            "cached" if cached else "fetched",
        )
        return SearchResult(
            key=key, outbound=outbound, return_flights=inbound, cached=cached
        )

    async def _evaluate(
        self,
        records: list[FlightRecord],
        criteria: FilterCriteria,
        sort: SortSpec,
    ) -> list[FlightRecord]:
        if not records:
            return []
        return await self._worker.evaluate(records, criteria, sort)

    async def _read_cache(self, key: str) -> CacheEntry | None:
        try:
            entry = await self._store.get(key)
        except CacheUnavailableError as exc:
            logger.warning("Cache read failed for %s, treating as miss: %s", key, exc)
            return None
        logger.debug("Cache %s for %s", "hit" if entry else "miss", key)
        return entry

    async def _write_cache(self, key: str, entry: CacheEntry) -> None:
        try:
            await self._store.put(key, entry)
        except CacheUnavailableError as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def _fetch(self, key: str, request: SearchRequest) -> CacheEntry:
        """Fetch flights, then their prices and seat maps, from the record API."""
        source = self._data_source
        status = self._scheduled_status
        if request.return_date is not None:
            outbound, inbound = await asyncio.gather(
                source.fetch_flights(
                    request.origin, request.destination, request.departure_date, status
                ),
                source.fetch_flights(
                    request.destination, request.origin, request.return_date, status
                ),
            )
        else:
            outbound = await source.fetch_flights(
                request.origin, request.destination, request.departure_date, status
            )
            inbound = []

        flight_ids = list(dict.fromkeys(f.id for f in [*outbound, *inbound]))
        prices, seats = await asyncio.gather(
            source.fetch_prices(flight_ids),
            source.fetch_seats(flight_ids),
        )
        return CacheEntry(
            key=key,
            request=request,
            outbound=outbound,
            return_flights=inbound,
            prices=prices,
            seats=seats,
            written_at=self._store.now(),
        )

    # ------------------------------------------------------------------
    # Single flight / cache maintenance
    # ------------------------------------------------------------------

    async def get_flight(self, flight_id: str) -> FlightRecord:
        """Look one flight up directly upstream, bypassing the cache."""
        row = await self._data_source.fetch_flight(flight_id)
        if row is None:
            msg = f"Flight {flight_id} not found"
            raise FlightNotFoundError(msg)
        prices, seats = await asyncio.gather(
            self._data_source.fetch_prices([row.id]),
            self._data_source.fetch_seats([row.id]),
        )
        return assemble_records([row], prices, seats)[0]

    async def evict_expired(self) -> int:
        evicted = await self._store.evict_expired()
        logger.info("Evicted %d expired cache entries", evicted)
        return evicted

    async def clear_cache(self) -> int:
        cleared = await self._store.clear()
        logger.info("Cleared %d cache entries", cleared)
        return cleared
