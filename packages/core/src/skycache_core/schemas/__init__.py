"""Core schemas for SkyCache."""

from .cache import CacheEntry
from .enums import CabinClass, CabinClassLabel, FlightStatus, SortField, SortOrder
from .flight import CabinFare, FlightRecord, FlightRow, PriceRow, SeatRow
from .query import FilterCriteria, PriceRange, SortSpec, TimeRange
from .result import SearchResult
from .search import PassengerCount, SearchRequest

__all__ = [
    "CabinClass",
    "CabinClassLabel",
    "CabinFare",
    "CacheEntry",
    "FilterCriteria",
    "FlightRecord",
    "FlightRow",
    "FlightStatus",
    "PassengerCount",
    "PriceRange",
    "PriceRow",
    "SearchRequest",
    "SearchResult",
    "SeatRow",
    "SortField",
    "SortOrder",
    "SortSpec",
    "TimeRange",
]
