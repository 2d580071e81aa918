"""Abstract base class for the external flight record service."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import date

    from skycache_core.schemas import FlightRow, PriceRow, SeatRow


class FlightDataSource(abc.ABC):
    """Read-only access to flight, price and seat-map rows.

    Implementations raise :class:`~skycache_api.errors.UpstreamFetchError`
    for any transport, HTTP or decoding failure.
    """

    @abc.abstractmethod
    async def fetch_flights(
        self, origin: str, destination: str, day: date, status: str
    ) -> list[FlightRow]:
        """Flights on the route departing during *day* with the given status."""

    @abc.abstractmethod
    async def fetch_flight(self, flight_id: str) -> FlightRow | None:
        """A single flight by id, or None if it does not exist."""

    @abc.abstractmethod
    async def fetch_prices(self, flight_ids: Sequence[str]) -> list[PriceRow]:
        """Price rows for every flight in *flight_ids*."""

    @abc.abstractmethod
    async def fetch_seats(self, flight_ids: Sequence[str]) -> list[SeatRow]:
        """Seat-map rows for every flight in *flight_ids*."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any held resources (HTTP clients, etc.)."""
