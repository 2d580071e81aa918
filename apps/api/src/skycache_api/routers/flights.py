"""Single flight lookup router."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends

from skycache_api.dependencies import get_orchestrator
from skycache_core.schemas import FlightRecord

if TYPE_CHECKING:
    from skycache_api.services.search_service import SearchOrchestrator

router = APIRouter(prefix="/flights", tags=["flights"])

OrchestratorDep = Annotated["SearchOrchestrator", Depends(get_orchestrator)]


@router.get("/{flight_id}", response_model=FlightRecord)
async def get_flight(flight_id: str, orchestrator: OrchestratorDep) -> FlightRecord:
    return await orchestrator.get_flight(flight_id)
