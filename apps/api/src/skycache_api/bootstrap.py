"""Construct the orchestrator and its collaborators from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from skycache_api.cache.redis_store import RedisCacheStore
from skycache_api.cache.sql_store import SqlCacheStore
from skycache_api.cache.sweeper import CacheSweeper
from skycache_api.services.search_service import SearchOrchestrator
from skycache_api.upstream.rest_client import RestFlightDataSource
from skycache_api.worker.client import QueryWorker

if TYPE_CHECKING:
    from skycache_api.cache.store import CacheStore
    from skycache_api.config import ApiSettings


def build_store(settings: ApiSettings) -> CacheStore:
    if settings.cache_backend == "redis":
        return RedisCacheStore(settings.redis_url, ttl=settings.search_cache_ttl)
    return SqlCacheStore(settings.cache_database_url, ttl=settings.search_cache_ttl)


def build_orchestrator(
    settings: ApiSettings, *, with_sweeper: bool = True
) -> SearchOrchestrator:
    """Wire a fresh orchestrator from *settings*; the caller owns its lifecycle."""
    store = build_store(settings)
    data_source = RestFlightDataSource(
        settings.upstream_url,
        api_key=settings.upstream_api_key,
        timeout=settings.upstream_timeout,
        max_retries=settings.upstream_max_retries,
    )
    sweeper = (
        CacheSweeper(store, settings.cache_sweep_interval) if with_sweeper else None
    )
    return SearchOrchestrator(
        store,
        data_source,
        QueryWorker(max_pending=settings.worker_max_pending),
        scheduled_status=settings.scheduled_status,
        sweeper=sweeper,
    )
