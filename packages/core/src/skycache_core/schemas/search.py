"""Search request and passenger schemas."""

from __future__ import annotations

from datetime import date  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import CabinClass, CabinClassLabel


class PassengerCount(BaseModel):
    """Number of passengers by type."""

    model_config = ConfigDict(frozen=True)

    adults: int = Field(default=1, ge=1, le=9)
    children: int = Field(default=0, ge=0, le=8)
    infants: int = Field(default=0, ge=0, le=4)

    @model_validator(mode="after")
    def _validate_totals(self) -> PassengerCount:
        if self.total > 9:
            msg = f"Total passengers ({self.total}) exceeds maximum of 9"
            raise ValueError(msg)
        if self.infants > self.adults:
            msg = "Each infant requires at least one adult"
            raise ValueError(msg)
        return self

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants


class SearchRequest(BaseModel):
    """Flight search parameters."""

    model_config = ConfigDict(frozen=True)

    origin: str = Field(min_length=3, max_length=3, description="IATA airport code")
    destination: str = Field(
        min_length=3, max_length=3, description="IATA airport code"
    )
    departure_date: date
    return_date: date | None = None
    cabin_class: CabinClassLabel = CabinClass.ECONOMY
    passengers: PassengerCount = Field(default_factory=PassengerCount)

    @field_validator("origin", "destination")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _validate_dates(self) -> SearchRequest:
        if self.return_date and self.return_date < self.departure_date:
            msg = "return_date must be after departure_date"
            raise ValueError(msg)
        return self

    @property
    def is_round_trip(self) -> bool:
        return self.return_date is not None
