"""Cached search result envelope."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .flight import FlightRow, PriceRow, SeatRow
from .search import SearchRequest


class CacheEntry(BaseModel):
    """Raw rows fetched for one search, as written to the cache store.

    Seat rows are kept unaggregated; availability is recomputed from them
    every time the entry is read.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    request: SearchRequest
    outbound: list[FlightRow] = Field(default_factory=list)
    return_flights: list[FlightRow] = Field(default_factory=list)
    prices: list[PriceRow] = Field(default_factory=list)
    seats: list[SeatRow] = Field(default_factory=list)
    written_at: float = Field(description="Unix timestamp (seconds)")

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.written_at > ttl
