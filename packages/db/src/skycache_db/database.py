"""Async engine and session construction for the local cache database."""

from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)

DEFAULT_CACHE_URL = "sqlite+aiosqlite:///~/.skycache/cache.db"


def _resolve_sqlite_url(url: str) -> str:
    """Expand ``~`` in SQLite file paths and create the parent directory."""
    parsed = make_url(url)
    if not parsed.drivername.startswith("sqlite"):
        return url
    database = parsed.database
    if not database or database == ":memory:":
        return url
    path = Path(database).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return parsed.set(database=str(path)).render_as_string(hide_password=False)


def create_cache_engine(
    url: str = DEFAULT_CACHE_URL, *, echo: bool = False
) -> AsyncEngine:
    """Create an engine for the cache database.

    In-memory SQLite shares a single connection so every session sees the
    same tables.
    """
    resolved = _resolve_sqlite_url(url)
    if make_url(resolved).database in (None, "", ":memory:"):
        return create_async_engine(
            resolved,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(resolved, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_schema(engine: AsyncEngine) -> None:
    """Create cache tables and indexes if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("Cache schema ready on %s", engine.url)
