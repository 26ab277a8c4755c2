"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from facetsearch.application.search_service import SearchService, get_search_service

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    generation: int
    rebuilding: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    from facetsearch.infrastructure.config import settings

    return HealthResponse(
        status="healthy",
        service="facetsearch",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse, responses={503: {"model": ReadinessResponse}})
async def readiness_check(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> ReadinessResponse | JSONResponse:
    """Check if service is ready to answer queries.

    Ready once an index snapshot is serving.

    Returns:
        Readiness status; HTTP 503 while no index is available.
    """
    state = service.status()
    body = ReadinessResponse(
        status="ready" if state["ready"] else "not_ready",
        generation=state["generation"],
        rebuilding=state["rebuilding"],
    )
    if not state["ready"]:
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body.model_dump())
    return body
