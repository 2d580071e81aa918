"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from skycache_api.bootstrap import build_orchestrator
from skycache_api.config import ApiSettings
from skycache_api.errors import (
    FlightNotFoundError,
    SearchError,
    SearchValidationError,
    UpstreamFetchError,
    WorkerEvaluationError,
)
from skycache_api.routers import cache, flights, search
from skycache_api.schemas.common import ErrorResponse

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import Request

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[SearchError], int]] = [
    (SearchValidationError, 422),
    (FlightNotFoundError, status.HTTP_404_NOT_FOUND),
    (UpstreamFetchError, status.HTTP_502_BAD_GATEWAY),
    (WorkerEvaluationError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


async def _search_error_handler(request: Request, exc: Exception) -> JSONResponse:
    code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            code = status_code
            break
    if code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    payload = ErrorResponse(detail=str(exc), code=getattr(exc, "code", None))
    return JSONResponse(status_code=code, content=payload.model_dump())


async def _request_validation_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first["loc"])
        detail = f"{location}: {first['msg']}"
    else:
        detail = str(exc)
    payload = ErrorResponse(detail=detail, code=SearchValidationError.code)
    return JSONResponse(status_code=422, content=payload.model_dump())


def create_app(settings: ApiSettings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or ApiSettings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Create the orchestrator on startup and dispose of it on shutdown."""
        orchestrator = build_orchestrator(settings)
        await orchestrator.start()
        app.state.orchestrator = orchestrator
        try:
            yield
        finally:
            app.state.orchestrator = None
            await orchestrator.aclose()

    app = FastAPI(
        title="SkyCache API",
        version="0.1.0",
        lifespan=_lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SearchError, _search_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    # Routers
    _prefix = "/api/v1"
    app.include_router(search.router, prefix=_prefix)
    app.include_router(flights.router, prefix=_prefix)
    app.include_router(cache.router, prefix=_prefix)

    return app


app = create_app()
