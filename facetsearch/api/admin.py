"""Admin API endpoints.

Provides the explicit index rebuild trigger and the last rebuild report.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from facetsearch.api.errors import to_http_exception
from facetsearch.api.schemas import ErrorResponse, RebuildReportResponse
from facetsearch.application.search_service import SearchService, get_search_service
from facetsearch.domain.exceptions import DomainError

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/rebuild",
    response_model=RebuildReportResponse,
    responses={
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Rebuild index",
    description=(
        "Rebuild the search index from the current catalog and configuration. "
        "The serving index is swapped only when the rebuild completes."
    ),
)
async def rebuild_index(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> RebuildReportResponse:
    """Trigger a rebuild and wait for it to finish.

    Args:
        service: Search service.

    Returns:
        Report of the completed rebuild.

    Raises:
        HTTPException: 409 if a rebuild is running, 500 if it failed.
    """
    try:
        report = await service.rebuild()
    except DomainError as e:
        raise to_http_exception(e) from e
    return RebuildReportResponse(**report.to_dict())


@router.get(
    "/rebuild",
    response_model=RebuildReportResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Last rebuild report",
)
async def get_rebuild_report(
    service: Annotated[SearchService, Depends(get_search_service)],
) -> RebuildReportResponse:
    """Get the report of the last rebuild attempt."""
    if service.last_report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "error_code": "NO_REBUILD",
                "message": "No rebuild has been attempted yet",
            },
        )
    return RebuildReportResponse(**service.last_report.to_dict())
