"""Message shapes exchanged with the query worker, and the worker-side handler."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from skycache_api.worker.evaluate import evaluate, filter_flights, sort_flights
from skycache_core.schemas import CabinClass, FilterCriteria, FlightRecord, SortSpec

logger = logging.getLogger(__name__)


class WorkerOp(StrEnum):
    """Operations the worker understands."""

    FILTER = "FILTER"
    SORT = "SORT"
    EVALUATE = "EVALUATE"


class WorkerRequest(BaseModel):
    """Inbound message: one filter and/or sort job tagged with its request id."""

    request_id: str = Field(min_length=1)
    type: WorkerOp
    flights: list[FlightRecord]
    criteria: FilterCriteria | None = None
    sort: SortSpec | None = None


class WorkerResponse(BaseModel):
    """Outbound message, correlated to its request by ``request_id``."""

    request_id: str | None
    success: bool
    data: list[FlightRecord] | None = None
    error: str | None = None


def _failure(request_id: str | None, error: str) -> dict[str, Any]:
    response = WorkerResponse(request_id=request_id, success=False, error=error)
    return response.model_dump()


def handle_message(message: dict[str, Any]) -> dict[str, Any]:
    """Process one request message and return the response message.

    Never raises: malformed payloads and evaluation failures come back as
    ``success=False`` responses carrying the error text.
    """
    request_id = message.get("request_id") if isinstance(message, dict) else None
    if not isinstance(request_id, str):
        request_id = None
    try:
        request = WorkerRequest.model_validate(message)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "message"
        return _failure(
            request_id, f"Malformed worker request: {location}: {first['msg']}"
        )

    try:
        if request.type is WorkerOp.FILTER:
            if request.criteria is None:
                return _failure(request.request_id, "Filter criteria not provided")
            data = filter_flights(request.flights, request.criteria)
        elif request.type is WorkerOp.SORT:
            if request.sort is None:
                return _failure(request.request_id, "Sort parameters not provided")
            cabin = (
                request.criteria.cabin_class if request.criteria else None
            ) or CabinClass.ECONOMY
            data = sort_flights(request.flights, request.sort, cabin)
        else:
            data = evaluate(request.flights, request.criteria, request.sort)
    except (TypeError, ValueError) as exc:
        logger.warning("Worker request %s failed: %s", request.request_id, exc)
        return _failure(request.request_id, str(exc))

    # data holds FlightRecord objects, not dicts.
    return {
        "request_id": request.request_id,
        "success": True,
        "data": data,
        "error": None,
    }
