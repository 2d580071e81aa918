"""Cache maintenance router."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends

from skycache_api.dependencies import get_orchestrator
from skycache_api.schemas.search import ClearResponse, EvictResponse

if TYPE_CHECKING:
    from skycache_api.services.search_service import SearchOrchestrator

router = APIRouter(prefix="/cache", tags=["cache"])

OrchestratorDep = Annotated["SearchOrchestrator", Depends(get_orchestrator)]


@router.post("/evict", response_model=EvictResponse)
async def evict_expired(orchestrator: OrchestratorDep) -> EvictResponse:
    """Delete every expired search result now instead of waiting for the sweeper."""
    return EvictResponse(evicted=await orchestrator.evict_expired())


@router.delete("", response_model=ClearResponse)
async def clear_cache(orchestrator: OrchestratorDep) -> ClearResponse:
    return ClearResponse(cleared=await orchestrator.clear_cache())
