"""Search and cache endpoint schemas."""

from __future__ import annotations

from pydantic import BaseModel

from skycache_core.schemas import (  # noqa: TC001
    FilterCriteria,
    FlightRecord,
    SearchRequest,
    SearchResult,
    SortSpec,
)


class FlightSearchBody(BaseModel):
    """POST body for a flight search."""

    params: SearchRequest
    criteria: FilterCriteria | None = None
    sort: SortSpec | None = None


class FlightSearchResponse(BaseModel):
    """Search response."""

    key: str
    outbound: list[FlightRecord]
    return_flights: list[FlightRecord]
    total: int
    cached: bool

    @classmethod
    def from_result(cls, result: SearchResult) -> FlightSearchResponse:
        return cls(
            key=result.key,
            outbound=result.outbound,
            return_flights=result.return_flights,
            total=result.total,
            cached=result.cached,
        )


class EvictResponse(BaseModel):
    evicted: int


class ClearResponse(BaseModel):
    cleared: int
