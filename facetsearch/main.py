"""facetsearch API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from facetsearch.api.admin import router as admin_router
from facetsearch.api.errors import to_http_exception
from facetsearch.api.health import router as health_router
from facetsearch.api.middleware import setup_middleware
from facetsearch.api.search import router as search_router
from facetsearch.application.search_service import get_search_service
from facetsearch.domain.exceptions import DomainError
from facetsearch.infrastructure.config import settings
from facetsearch.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Builds the first index snapshot when ``rebuild_on_startup`` is set.
    A failed initial rebuild leaves the service up but not ready.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings.log_level, settings.debug)
    logger.info(
        "Starting facetsearch API",
        version=settings.api_version,
        debug=settings.debug,
        config_source=settings.config_source,
        catalog_source=settings.catalog_source,
    )

    if settings.rebuild_on_startup:
        service = get_search_service()
        try:
            await service.rebuild()
        except DomainError as e:
            logger.error("Initial index rebuild failed", error=e.message)

    yield

    logger.info("Shutting down facetsearch API")


app = FastAPI(
    title="facetsearch API",
    description="Faceted product search with rule-based taxonomy classification",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(search_router)
app.include_router(admin_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _error_response(request: Request, status_code: int, detail) -> JSONResponse:
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    return _error_response(request, exc.status_code, exc.detail)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors not mapped by a router."""
    http_error = to_http_exception(exc)
    return _error_response(request, http_error.status_code, http_error.detail)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return _error_response(
        request,
        500,
        {"error_code": "INTERNAL_ERROR", "message": "An internal error occurred"},
    )
