"""SQL cache store: TTL, overwrite, eviction and route lookup."""

from __future__ import annotations

import pytest

from skycache_api.cache.cache_keys import search_key
from skycache_api.cache.sql_store import SqlCacheStore
from skycache_api.errors import CacheUnavailableError
from skycache_core.schemas import CacheEntry, SearchRequest

from .conftest import TRAVEL_DAY, make_flight_row

TTL = 30 * 60


def _entry(request: SearchRequest, written_at: float, *flight_ids: str) -> CacheEntry:
    return CacheEntry(
        key=search_key(request),
        request=request,
        outbound=[make_flight_row(fid) for fid in flight_ids],
        written_at=written_at,
    )


async def test_get_missing_returns_none(sql_store):
    assert await sql_store.get("search:v1:nope") is None


async def test_put_then_get_round_trips_rows(sql_store, clock, search_request):
    entry = _entry(search_request, clock(), "ua-1", "dl-1")
    await sql_store.put(entry.key, entry)

    loaded = await sql_store.get(entry.key)

    assert loaded == entry
    assert [f.id for f in loaded.outbound] == ["ua-1", "dl-1"]


async def test_entry_expires_after_ttl(sql_store, clock, search_request):
    entry = _entry(search_request, clock(), "ua-1")
    await sql_store.put(entry.key, entry)

    clock.advance(TTL)
    assert await sql_store.get(entry.key) is not None

    clock.advance(1)
    assert await sql_store.get(entry.key) is None
    # lazily deleted on read
    assert await sql_store.count() == 0


async def test_put_overwrites(sql_store, clock, search_request):
    first = _entry(search_request, clock(), "ua-1")
    await sql_store.put(first.key, first)
    clock.advance(60)
    second = _entry(search_request, clock(), "dl-1")
    await sql_store.put(second.key, second)

    loaded = await sql_store.get(first.key)

    assert [f.id for f in loaded.outbound] == ["dl-1"]
    assert await sql_store.count() == 1


async def test_evict_expired_is_idempotent(sql_store, clock, search_request):
    old = _entry(search_request, clock(), "ua-1")
    await sql_store.put(old.key, old)
    clock.advance(TTL + 5)
    other = SearchRequest(origin="LAX", destination="JFK", departure_date=TRAVEL_DAY)
    fresh = _entry(other, clock(), "dl-1")
    await sql_store.put(fresh.key, fresh)

    assert await sql_store.evict_expired() == 1
    assert await sql_store.evict_expired() == 0
    assert await sql_store.get(fresh.key) is not None


async def test_find_by_route_lists_live_keys(sql_store, clock, search_request):
    entry = _entry(search_request, clock(), "ua-1")
    await sql_store.put(entry.key, entry)

    assert await sql_store.find_by_route("sfo", "jfk") == [entry.key]
    assert await sql_store.find_by_route("SFO", "JFK", "2030-01-01") == []

    clock.advance(TTL + 1)
    assert await sql_store.find_by_route("SFO", "JFK") == []


async def test_clear_removes_everything(sql_store, clock, search_request):
    entry = _entry(search_request, clock(), "ua-1")
    await sql_store.put(entry.key, entry)

    assert await sql_store.clear() == 1
    assert await sql_store.get(entry.key) is None


async def test_file_database_persists_across_reopen(tmp_path, clock, search_request):
    url = f"sqlite+aiosqlite:///{tmp_path / 'nested' / 'cache.db'}"
    entry = _entry(search_request, clock(), "ua-1")

    store = SqlCacheStore(url, clock=clock)
    await store.open()
    await store.put(entry.key, entry)
    await store.close()

    reopened = SqlCacheStore(url, clock=clock)
    await reopened.open()
    try:
        assert await reopened.get(entry.key) == entry
    finally:
        await reopened.close()


async def test_unopened_store_is_unavailable(clock):
    store = SqlCacheStore("sqlite+aiosqlite:///:memory:", clock=clock)
    with pytest.raises(CacheUnavailableError):
        await store.get("search:v1:abc")
