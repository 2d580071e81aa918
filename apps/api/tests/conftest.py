"""Shared fixtures and factories for API tests."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from skycache_api.cache.sql_store import SqlCacheStore
from skycache_api.errors import UpstreamFetchError
from skycache_api.upstream.base import FlightDataSource
from skycache_api.worker.client import QueryWorker
from skycache_core.schemas import (
    CabinClass,
    CabinFare,
    FlightRecord,
    FlightRow,
    FlightStatus,
    PriceRow,
    SearchRequest,
    SeatRow,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

TRAVEL_DAY = date(2026, 11, 20)
RETURN_DAY = date(2026, 11, 27)


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeDataSource(FlightDataSource):
    """In-memory record API that counts every call."""

    def __init__(
        self,
        flights: Sequence[FlightRow] = (),
        prices: Sequence[PriceRow] = (),
        seats: Sequence[SeatRow] = (),
    ) -> None:
        self.flights = list(flights)
        self.prices = list(prices)
        self.seats = list(seats)
        self.calls: Counter[str] = Counter()
        self.fail_with: Exception | None = None
        self.closed = False

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def _record(self, name: str) -> None:
        self.calls[name] += 1
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch_flights(
        self, origin: str, destination: str, day: date, status: str
    ) -> list[FlightRow]:
        self._record("fetch_flights")
        return [
            f
            for f in self.flights
            if f.departure_airport == origin
            and f.arrival_airport == destination
            and f.departure_time.date() == day
            and f.status.value == status
        ]

    async def fetch_flight(self, flight_id: str) -> FlightRow | None:
        self._record("fetch_flight")
        return next((f for f in self.flights if f.id == flight_id), None)

    async def fetch_prices(self, flight_ids: Sequence[str]) -> list[PriceRow]:
        self._record("fetch_prices")
        return [p for p in self.prices if p.flight_id in flight_ids]

    async def fetch_seats(self, flight_ids: Sequence[str]) -> list[SeatRow]:
        self._record("fetch_seats")
        return [s for s in self.seats if s.flight_id in flight_ids]

    async def close(self) -> None:
        self.closed = True


def make_flight_row(
    flight_id: str,
    *,
    airline: str = "UA",
    origin: str = "SFO",
    destination: str = "JFK",
    day: date = TRAVEL_DAY,
    hour: int = 8,
    duration: int = 330,
    price: float = 300.0,
    status: FlightStatus = FlightStatus.SCHEDULED,
) -> FlightRow:
    departure = datetime(day.year, day.month, day.day, hour, 0)
    return FlightRow(
        id=flight_id,
        flight_number=f"{airline}{100 + hour}",
        airline=airline,
        departure_airport=origin,
        arrival_airport=destination,
        departure_time=departure,
        arrival_time=departure + timedelta(minutes=duration),
        duration=duration,
        price=price,
        status=status,
    )


def make_seat_rows(
    flight_id: str,
    cabin: CabinClass = CabinClass.ECONOMY,
    *,
    available: int = 1,
    taken: int = 0,
) -> list[SeatRow]:
    rows = [
        SeatRow(
            flight_id=flight_id,
            cabin_class=cabin,
            seat_number=f"{cabin.value[:1].upper()}{n}",
            is_available=True,
        )
        for n in range(available)
    ]
    rows += [
        SeatRow(
            flight_id=flight_id,
            cabin_class=cabin,
            seat_number=f"X{n}",
            is_available=False,
        )
        for n in range(taken)
    ]
    return rows


def make_record(
    flight_id: str,
    *,
    airline: str = "UA",
    hour: int = 8,
    duration: int = 330,
    price: float | None = 300.0,
    seats: int = 5,
    cabin: CabinClass = CabinClass.ECONOMY,
) -> FlightRecord:
    row = make_flight_row(
        flight_id, airline=airline, hour=hour, duration=duration, price=price or 0
    )
    cabins = {c: CabinFare() for c in CabinClass}
    cabins[cabin] = CabinFare(price=price, available_seats=seats)
    return FlightRecord(
        id=row.id,
        flight_number=row.flight_number,
        airline=row.airline,
        origin=row.departure_airport,
        destination=row.arrival_airport,
        departure_time=row.departure_time,
        arrival_time=row.arrival_time,
        duration_minutes=row.duration,
        status=row.status,
        base_price=row.price,
        cabins=cabins,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def search_request() -> SearchRequest:
    return SearchRequest(
        origin="SFO",
        destination="JFK",
        departure_date=TRAVEL_DAY,
        passengers={"adults": 2},
    )


@pytest.fixture
def sfo_jfk_source() -> FakeDataSource:
    """Three SFO->JFK flights; the cheap-looking AA one has a single seat."""
    flights = [
        make_flight_row("ua-1", airline="UA", hour=8, price=300),
        make_flight_row("aa-1", airline="AA", hour=6, price=450),
        make_flight_row("dl-1", airline="DL", hour=10, price=250),
        make_flight_row(
            "ua-r", airline="UA", origin="JFK", destination="SFO", day=RETURN_DAY
        ),
        make_flight_row("xx-1", airline="XX", hour=12, status=FlightStatus.CANCELLED),
    ]
    prices = [
        PriceRow(flight_id="ua-1", cabin_class="economy", price=300),
        PriceRow(flight_id="aa-1", cabin_class="economy", price=450),
        PriceRow(flight_id="dl-1", cabin_class="economy", price=250),
        PriceRow(flight_id="dl-1", cabin_class="business", price=900),
        PriceRow(flight_id="ua-r", cabin_class="economy", price=320),
    ]
    seats = [
        *make_seat_rows("ua-1", available=5, taken=2),
        *make_seat_rows("aa-1", available=1, taken=10),
        *make_seat_rows("dl-1", available=3),
        *make_seat_rows("dl-1", CabinClass.BUSINESS, available=2),
        *make_seat_rows("ua-r", available=4),
    ]
    return FakeDataSource(flights, prices, seats)


@pytest.fixture
def failing_source() -> FakeDataSource:
    source = FakeDataSource()
    source.fail_with = UpstreamFetchError("flights query failed with HTTP 503")
    return source


@pytest.fixture
async def sql_store(clock: FakeClock) -> AsyncIterator[SqlCacheStore]:
    store = SqlCacheStore("sqlite+aiosqlite:///:memory:", clock=clock)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def worker() -> AsyncIterator[QueryWorker]:
    query_worker = QueryWorker(max_pending=8)
    query_worker.start()
    yield query_worker
    await query_worker.stop()
