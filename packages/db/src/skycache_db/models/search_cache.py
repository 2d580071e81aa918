"""Search result cache table."""

from __future__ import annotations

from sqlalchemy import Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class SearchCacheRow(Base):
    """search_cache table - one serialized CacheEntry per search key."""

    __tablename__ = "search_cache"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    origin: Mapped[str] = mapped_column(String(3), nullable=False)
    destination: Mapped[str] = mapped_column(String(3), nullable=False)
    departure_date: Mapped[str] = mapped_column(String(10), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    written_at: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("ix_search_cache_written_at", "written_at"),
        Index("ix_search_cache_route", "origin", "destination", "departure_date"),
    )

    def __repr__(self) -> str:
        route = f"{self.origin}-{self.destination}"
        return f"<SearchCacheRow {route} {self.departure_date}>"
