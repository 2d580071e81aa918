"""Search results returned to callers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .flight import FlightRecord


class SearchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    outbound: list[FlightRecord] = Field(default_factory=list)
    return_flights: list[FlightRecord] = Field(default_factory=list)
    cached: bool = False

    @property
    def total(self) -> int:
        return len(self.outbound) + len(self.return_flights)
