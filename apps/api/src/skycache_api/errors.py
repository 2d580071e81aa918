"""Error taxonomy for the search pipeline."""

from __future__ import annotations


class SearchError(Exception):
    """Base class for every error a search can surface to its caller."""

    code = "search_error"


class SearchValidationError(SearchError):
    """Search parameters are missing or invalid; no I/O was attempted."""

    code = "validation_error"


class CacheUnavailableError(SearchError):
    """The cache store could not be read or written."""

    code = "cache_unavailable"


class UpstreamFetchError(SearchError):
    """The external record API failed or returned unusable data."""

    code = "upstream_fetch_error"


class FlightNotFoundError(SearchError):
    """The requested flight id does not exist upstream."""

    code = "flight_not_found"


class WorkerEvaluationError(SearchError):
    """The query worker rejected the request or crashed."""

    code = "worker_evaluation_error"


class WorkerBusyError(WorkerEvaluationError):
    """The query worker's pending queue is full."""

    code = "worker_busy"
