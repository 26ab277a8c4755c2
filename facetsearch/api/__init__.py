"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from facetsearch.api.admin import router as admin_router
from facetsearch.api.health import router as health_router
from facetsearch.api.search import router as search_router

__all__ = [
    "admin_router",
    "health_router",
    "search_router",
]
