"""Build immutable flight records from raw upstream rows."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from skycache_core.schemas import CabinClass, CabinFare, FlightRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from skycache_core.schemas import FlightRow, PriceRow, SeatRow


def aggregate_seats(seats: Iterable[SeatRow]) -> dict[tuple[str, CabinClass], int]:
    """Count available seats per ``(flight_id, cabin)``.

    Unavailable seats are skipped. The result depends only on the multiset of
    rows, not on their order.
    """
    counts: Counter[tuple[str, CabinClass]] = Counter(
        (seat.flight_id, seat.cabin_class) for seat in seats if seat.is_available
    )
    return dict(counts)


def lowest_prices(prices: Iterable[PriceRow]) -> dict[tuple[str, CabinClass], float]:
    """Cheapest listed price per ``(flight_id, cabin)``."""
    lowest: dict[tuple[str, CabinClass], float] = {}
    for row in prices:
        key = (row.flight_id, row.cabin_class)
        if key not in lowest or row.price < lowest[key]:
            lowest[key] = row.price
    return lowest


def assemble_record(
    flight: FlightRow,
    prices: dict[tuple[str, CabinClass], float],
    seats: dict[tuple[str, CabinClass], int],
) -> FlightRecord:
    cabins = {
        cabin: CabinFare(
            price=prices.get((flight.id, cabin)),
            available_seats=seats.get((flight.id, cabin), 0),
        )
        for cabin in CabinClass
    }
    return FlightRecord(
        id=flight.id,
        flight_number=flight.flight_number,
        airline=flight.airline,
        origin=flight.departure_airport,
        destination=flight.arrival_airport,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
        duration_minutes=flight.duration,
        status=flight.status,
        base_price=flight.price,
        cabins=cabins,
    )


def assemble_records(
    flights: Sequence[FlightRow],
    prices: Iterable[PriceRow],
    seats: Iterable[SeatRow],
) -> list[FlightRecord]:
    """Join flights with their price and seat-map rows, preserving flight order."""
    price_index = lowest_prices(prices)
    seat_index = aggregate_seats(seats)
    return [assemble_record(f, price_index, seat_index) for f in flights]
