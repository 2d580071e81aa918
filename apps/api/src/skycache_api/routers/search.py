"""Flight search router."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends

from skycache_api.dependencies import get_orchestrator
from skycache_api.schemas.search import FlightSearchBody, FlightSearchResponse

if TYPE_CHECKING:
    from skycache_api.services.search_service import SearchOrchestrator

router = APIRouter(prefix="/search", tags=["search"])

OrchestratorDep = Annotated["SearchOrchestrator", Depends(get_orchestrator)]


@router.post("/flights", response_model=FlightSearchResponse)
async def search_flights(
    body: FlightSearchBody,
    orchestrator: OrchestratorDep,
) -> FlightSearchResponse:
    """Search for flights, answering from the cache when possible."""
    result = await orchestrator.search(body.params, body.criteria, body.sort)
    return FlightSearchResponse.from_result(result)
