"""SQLAlchemy ORM models for SkyCache."""

from .base import Base
from .search_cache import SearchCacheRow

__all__ = [
    "Base",
    "SearchCacheRow",
]
