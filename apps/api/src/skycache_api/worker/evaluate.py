"""Filtering and sorting of flight records.

These functions are pure: they never mutate their inputs and always
return new lists. They run on the query worker thread.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from skycache_core.schemas import (
    CabinClass,
    FilterCriteria,
    SortField,
    SortOrder,
    SortSpec,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from skycache_core.schemas import FlightRecord


def _instant(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def matches(record: FlightRecord, criteria: FilterCriteria) -> bool:
    """Return True if *record* satisfies every supplied predicate."""
    cabin = criteria.cabin_class or CabinClass.ECONOMY

    if criteria.price_range is not None:
        price = record.price_for(cabin)
        if price is None:
            return False
        if price < criteria.price_range.min or price > criteria.price_range.max:
            return False

    if criteria.airlines and record.airline not in criteria.airlines:
        return False

    if criteria.departure_time_range is not None:
        departure = _instant(record.departure_time)
        start = _instant(criteria.departure_time_range.start)
        end = _instant(criteria.departure_time_range.end)
        if departure < start or departure > end:
            return False

    if criteria.cabin_class is not None and criteria.minimum_seats is not None:
        if record.seats_for(criteria.cabin_class) < criteria.minimum_seats:
            return False

    return True


def filter_flights(
    records: Sequence[FlightRecord], criteria: FilterCriteria
) -> list[FlightRecord]:
    return [record for record in records if matches(record, criteria)]


def _sort_key(
    field: SortField, cabin: CabinClass
) -> Callable[[FlightRecord], float | datetime | None]:
    if field is SortField.PRICE:
        return lambda record: record.price_for(cabin)
    if field is SortField.DURATION:
        return lambda record: record.duration_minutes
    if field is SortField.DEPARTURE_TIME:
        return lambda record: _instant(record.departure_time)
    if field is SortField.ARRIVAL_TIME:
        return lambda record: _instant(record.arrival_time)
    msg = f"Unsupported sort field: {field}"
    raise ValueError(msg)


def sort_flights(
    records: Sequence[FlightRecord],
    spec: SortSpec,
    cabin: CabinClass = CabinClass.ECONOMY,
) -> list[FlightRecord]:
    """Stable sort on ``spec.field``.

    Equal keys keep their input order in both directions. Records without
    a price for *cabin* go last when sorting by price.
    """
    key = _sort_key(spec.field, cabin)
    keyed = [(key(record), record) for record in records]
    present = [(value, record) for value, record in keyed if value is not None]
    missing = [record for value, record in keyed if value is None]
    ordered = sorted(
        present,
        key=lambda pair: pair[0],
        reverse=spec.order is SortOrder.DESC,
    )
    return [record for _, record in ordered] + missing


def evaluate(
    records: Sequence[FlightRecord],
    criteria: FilterCriteria | None = None,
    spec: SortSpec | None = None,
) -> list[FlightRecord]:
    """Filter then sort; either step is skipped when its argument is None."""
    result = list(records)
    if criteria is not None:
        result = filter_flights(result, criteria)
    if spec is not None:
        cabin = (criteria.cabin_class if criteria else None) or CabinClass.ECONOMY
        result = sort_flights(result, spec, cabin)
    return result
