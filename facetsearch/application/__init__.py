"""Application layer module.

Contains application services (use cases) that orchestrate
domain logic and infrastructure.
"""

from facetsearch.application.search_service import (
    IndexStore,
    SearchService,
    Statistic,
    TaxonomyCount,
    get_search_service,
)

__all__ = [
    "IndexStore",
    "SearchService",
    "Statistic",
    "TaxonomyCount",
    "get_search_service",
]
