"""HTTP client for a PostgREST-style (Supabase) record API."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from skycache_api.errors import UpstreamFetchError
from skycache_api.upstream.base import FlightDataSource
from skycache_api.upstream.retry import call_with_retry
from skycache_core.schemas import FlightRow, PriceRow, SeatRow

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from datetime import date

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_REST_PATH = "/rest/v1"


def _is_transient(exc: Exception) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return False


def _in_filter(values: Sequence[str]) -> str:
    quoted = ",".join(f'"{value}"' for value in values)
    return f"in.({quoted})"


class RestFlightDataSource(FlightDataSource):
    """Async wrapper around the ``flights``, ``flight_prices`` and ``seat_map``
    tables of the record API."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str = "",
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        headers = {"Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + _REST_PATH,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        self._max_retries = max_retries
        self._sleep = sleep

    async def _select(
        self, table: str, params: list[tuple[str, str]]
    ) -> list[dict[str, Any]]:
        """``GET /<table>`` with PostgREST filters, retrying transient failures."""

        async def _get() -> Any:
            resp = await self._client.get(f"/{table}", params=params)
            resp.raise_for_status()
            return resp.json()

        _get.__name__ = f"select {table}"
        try:
            data = await call_with_retry(
                _get,
                max_retries=self._max_retries,
                retry_if=_is_transient,
                sleep=self._sleep,
            )
        except httpx.HTTPStatusError as exc:
            msg = f"{table} query failed with HTTP {exc.response.status_code}"
            raise UpstreamFetchError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"{table} query failed: {exc}"
            raise UpstreamFetchError(msg) from exc
        except ValueError as exc:
            msg = f"{table} query returned invalid JSON"
            raise UpstreamFetchError(msg) from exc

        if not isinstance(data, list):
            msg = f"{table} query returned {type(data).__name__}, expected a list"
            raise UpstreamFetchError(msg)
        logger.debug("%s returned %d rows", table, len(data))
        return data

    @staticmethod
    def _parse(model: type[M], table: str, rows: list[dict[str, Any]]) -> list[M]:
        try:
            return [model.model_validate(row) for row in rows]
        except ValidationError as exc:
            msg = f"{table} returned malformed rows: {exc.error_count()} error(s)"
            raise UpstreamFetchError(msg) from exc

    async def fetch_flights(
        self, origin: str, destination: str, day: date, status: str
    ) -> list[FlightRow]:
        day_str = day.isoformat()
        rows = await self._select(
            "flights",
            [
                ("select", "*"),
                ("departure_airport", f"eq.{origin}"),
                ("arrival_airport", f"eq.{destination}"),
                ("departure_time", f"gte.{day_str}T00:00:00"),
                ("departure_time", f"lte.{day_str}T23:59:59"),
                ("status", f"eq.{status}"),
                ("order", "departure_time.asc"),
            ],
        )
        return self._parse(FlightRow, "flights", rows)

    async def fetch_flight(self, flight_id: str) -> FlightRow | None:
        rows = await self._select(
            "flights",
            [("select", "*"), ("id", f"eq.{flight_id}"), ("limit", "1")],
        )
        flights = self._parse(FlightRow, "flights", rows)
        return flights[0] if flights else None

    async def fetch_prices(self, flight_ids: Sequence[str]) -> list[PriceRow]:
        if not flight_ids:
            return []
        rows = await self._select(
            "flight_prices",
            [("select", "*"), ("flight_id", _in_filter(flight_ids))],
        )
        return self._parse(PriceRow, "flight_prices", rows)

    async def fetch_seats(self, flight_ids: Sequence[str]) -> list[SeatRow]:
        if not flight_ids:
            return []
        rows = await self._select(
            "seat_map",
            [("select", "*"), ("flight_id", _in_filter(flight_ids))],
        )
        return self._parse(SeatRow, "seat_map", rows)

    async def close(self) -> None:
        """Shut down the underlying HTTPX client."""
        await self._client.aclose()
