"""Mapping of domain errors to HTTP errors."""

from fastapi import HTTPException, status

from facetsearch.domain.exceptions import (
    CatalogSourceError,
    ConfigurationError,
    DomainError,
    IndexNotReadyError,
    InvalidFilterValueError,
    RebuildInProgressError,
)

ERROR_STATUS: list[tuple[type[DomainError], int, str]] = [
    (IndexNotReadyError, status.HTTP_503_SERVICE_UNAVAILABLE, "INDEX_NOT_READY"),
    (InvalidFilterValueError, status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_FILTER_VALUE"),
    (RebuildInProgressError, status.HTTP_409_CONFLICT, "REBUILD_IN_PROGRESS"),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "REBUILD_FAILED"),
    (CatalogSourceError, status.HTTP_500_INTERNAL_SERVER_ERROR, "REBUILD_FAILED"),
]


def to_http_exception(error: DomainError) -> HTTPException:
    """Convert a domain error to an HTTPException with the error envelope detail.

    Args:
        error: Domain error raised by the service.

    Returns:
        HTTPException carrying error code, message and details.
    """
    status_code, error_code = status.HTTP_400_BAD_REQUEST, "DOMAIN_ERROR"
    for error_type, mapped_status, mapped_code in ERROR_STATUS:
        if isinstance(error, error_type):
            status_code, error_code = mapped_status, mapped_code
            break
    return HTTPException(
        status_code=status_code,
        detail={
            "error_code": error_code,
            "message": error.message,
            "details": [
                {"field": key, "message": str(value)}
                for key, value in error.details.items()
                if value is not None
            ],
        },
    )
