"""Upstream row DTOs and the assembled flight record."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field

from .enums import CabinClass, CabinClassLabel, FlightStatus


class FlightRow(BaseModel):
    """One row of the ``flights`` table as served by the record API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    flight_number: str
    airline: str
    departure_airport: str = Field(description="IATA airport code")
    arrival_airport: str = Field(description="IATA airport code")
    departure_time: datetime
    arrival_time: datetime
    duration: int = Field(ge=0, description="Minutes")
    price: float = Field(ge=0)
    status: FlightStatus = FlightStatus.SCHEDULED


class PriceRow(BaseModel):
    """One row of the ``flight_prices`` table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    flight_id: str
    cabin_class: CabinClassLabel
    price: float = Field(ge=0)
    currency: str = "USD"


class SeatRow(BaseModel):
    """One row of the ``seat_map`` table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    flight_id: str
    cabin_class: CabinClassLabel
    seat_number: str
    is_available: bool = True


class CabinFare(BaseModel):
    """Price and seat availability for one cabin of one flight."""

    model_config = ConfigDict(frozen=True)

    price: float | None = None
    available_seats: int = Field(default=0, ge=0)


def _empty_cabins() -> dict[CabinClass, CabinFare]:
    return {cabin: CabinFare() for cabin in CabinClass}


class FlightRecord(BaseModel):
    """Immutable snapshot of a flight at fetch time."""

    model_config = ConfigDict(frozen=True)

    id: str
    flight_number: str
    airline: str
    origin: str
    destination: str
    departure_time: datetime
    arrival_time: datetime
    duration_minutes: int
    status: FlightStatus
    base_price: float
    cabins: dict[CabinClass, CabinFare] = Field(default_factory=_empty_cabins)

    def fare(self, cabin: CabinClass) -> CabinFare:
        """Return the fare for *cabin*; cabins absent upstream read as empty."""
        return self.cabins.get(cabin) or CabinFare()

    def price_for(self, cabin: CabinClass) -> float | None:
        return self.fare(cabin).price

    def seats_for(self, cabin: CabinClass) -> int:
        return self.fare(cabin).available_seats
