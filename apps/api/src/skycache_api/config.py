"""Service configuration via environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    # Cache store
    cache_backend: Literal["sql", "redis"] = "sql"
    cache_database_url: str = "sqlite+aiosqlite:///~/.skycache/cache.db"
    redis_url: str = "redis://localhost:6379/0"
    search_cache_ttl: int = 1800  # 30 min
    cache_sweep_interval: int = 300  # 5 min, 0 disables

    # External record API (PostgREST / Supabase)
    upstream_url: str = "http://localhost:54321"
    upstream_api_key: str = ""
    upstream_timeout: float = 30.0
    upstream_max_retries: int = 3
    scheduled_status: str = "scheduled"

    # Query worker
    worker_max_pending: int = 8

    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SKYCACHE_", env_file=".env", extra="ignore"
    )
