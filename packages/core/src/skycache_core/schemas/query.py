"""Filter and sort parameters for the query worker."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import CabinClassLabel, SortField, SortOrder


class PriceRange(BaseModel):
    """Inclusive price bounds."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0)
    max: float = Field(ge=0)

    @model_validator(mode="after")
    def _validate_bounds(self) -> PriceRange:
        if self.max < self.min:
            msg = "price_range.max must be >= price_range.min"
            raise ValueError(msg)
        return self


class TimeRange(BaseModel):
    """Inclusive departure window."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _validate_bounds(self) -> TimeRange:
        if self.end < self.start:
            msg = "departure_time_range.end must be >= departure_time_range.start"
            raise ValueError(msg)
        return self


class FilterCriteria(BaseModel):
    """Caller-supplied predicates; every field is optional and ANDed."""

    model_config = ConfigDict(frozen=True)

    price_range: PriceRange | None = None
    airlines: list[str] | None = None
    departure_time_range: TimeRange | None = None
    cabin_class: CabinClassLabel | None = None
    minimum_seats: int | None = Field(default=None, ge=0)


class SortSpec(BaseModel):
    """Field and direction for ordering results."""

    model_config = ConfigDict(frozen=True)

    field: SortField = SortField.DEPARTURE_TIME
    order: SortOrder = SortOrder.ASC
