"""Search application service.

Owns the serving index (a double buffer of immutable snapshots), runs
rebuilds and exposes the five client operations: search, count, facets,
taxonomy_tree and statistics.

A rebuild builds a complete new snapshot off the event loop and then
swaps the current pointer in a single assignment. Queries read whichever
snapshot is current when they start and are never blocked by a rebuild.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog

from facetsearch.catalog.config_store import (
    ConfigurationStore,
    FileConfigurationStore,
    StaticConfigurationStore,
)
from facetsearch.catalog.generator import GeneratorConfig
from facetsearch.catalog.source import CatalogSource, GeneratedCatalogSource
from facetsearch.domain.exceptions import (
    DomainError,
    IndexNotReadyError,
    RebuildInProgressError,
)
from facetsearch.domain.value_objects import PageRequest, SortMode
from facetsearch.search.facets import DEFAULT_HISTOGRAM_BUCKETS, FacetResult, compute_facets
from facetsearch.search.query import QueryContext, SearchResult
from facetsearch.search.query import count as count_matches
from facetsearch.search.query import search as search_products
from facetsearch.search.snapshot import IndexSnapshot, RebuildReport, build_snapshot

logger = structlog.get_logger()


# ============================================================================
# Index Store
# ============================================================================


class IndexStore:
    """Double buffer of index generations.

    ``current`` serves queries; ``previous`` is kept for inspection and is
    released on the next swap. Snapshots are never modified in place.
    """

    def __init__(self) -> None:
        self.current: IndexSnapshot | None = None
        self.previous: IndexSnapshot | None = None

    def swap(self, snapshot: IndexSnapshot) -> None:
        """Make a new snapshot current."""
        self.previous, self.current = self.current, snapshot

    def require(self) -> IndexSnapshot:
        """Get the serving snapshot.

        Raises:
            IndexNotReadyError: If no rebuild has completed yet.
        """
        snapshot = self.current
        if snapshot is None:
            raise IndexNotReadyError()
        return snapshot

    @property
    def is_ready(self) -> bool:
        """Whether a snapshot is serving."""
        return self.current is not None

    @property
    def generation(self) -> int:
        """Generation of the serving snapshot (0 when none)."""
        return self.current.generation if self.current is not None else 0


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass(frozen=True)
class TaxonomyCount:
    """Taxonomy node with its product count."""

    code: str
    parent_code: str | None
    level: int
    name: str
    product_count: int


@dataclass(frozen=True)
class Statistic:
    """Named aggregate counter."""

    name: str
    value: int


# ============================================================================
# Search Service
# ============================================================================


class SearchService:
    """Application service for index rebuilds and search queries.

    Example usage:
        service = SearchService(StaticConfigurationStore(), InMemoryCatalogSource(products))
        await service.rebuild()
        result = await service.search(QueryContext.create(query_text="downlight"))
    """

    def __init__(
        self,
        config_store: ConfigurationStore,
        catalog_source: CatalogSource,
        store: IndexStore | None = None,
        workers: int = 1,
        chunk_size: int = 2000,
        histogram_buckets: int = DEFAULT_HISTOGRAM_BUCKETS,
    ) -> None:
        """Initialize service.

        Args:
            config_store: Source of configuration snapshots.
            catalog_source: Source of product records.
            store: Index double buffer.
            workers: Worker processes for rebuilds.
            chunk_size: Products per rebuild work unit.
            histogram_buckets: Buckets per numeric facet.
        """
        self.config_store = config_store
        self.catalog_source = catalog_source
        self.store = store or IndexStore()
        self.workers = workers
        self.chunk_size = chunk_size
        self.histogram_buckets = histogram_buckets
        self.last_report: RebuildReport | None = None
        self._running: RebuildReport | None = None
        self._lock = asyncio.Lock()
        self._generation = 0

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    @property
    def is_rebuilding(self) -> bool:
        """Whether a rebuild is running."""
        return self._lock.locked()

    async def rebuild(self) -> RebuildReport:
        """Rebuild the index from the current catalog and configuration.

        On failure the serving snapshot stays untouched and the error is
        re-raised after being recorded in ``last_report``.

        Returns:
            Report of the completed rebuild.

        Raises:
            RebuildInProgressError: If another rebuild is running.
            ConfigurationError: If the configuration cannot be loaded.
            CatalogSourceError: If the catalog cannot be read.
        """
        if self._lock.locked():
            started_at = self._running.started_at.isoformat() if self._running else None
            raise RebuildInProgressError(started_at)

        async with self._lock:
            generation = self._generation + 1
            self._running = RebuildReport(generation=generation, workers=self.workers)
            logger.info("Index rebuild started", generation=generation, workers=self.workers)
            try:
                config = await self.config_store.load_snapshot()
                self._running.config_source = config.source
                products = await self.catalog_source.fetch_products()
                snapshot = await asyncio.to_thread(
                    build_snapshot,
                    products,
                    config,
                    generation,
                    self.workers,
                    self.chunk_size,
                )
            except DomainError as e:
                self._running.finish("failed", e.message)
                self.last_report = self._running
                logger.error(
                    "Index rebuild failed",
                    generation=generation,
                    error=e.message,
                    serving_generation=self.store.generation,
                )
                raise
            except Exception as e:
                self._running.finish("failed", str(e) or type(e).__name__)
                self.last_report = self._running
                logger.exception(
                    "Index rebuild failed unexpectedly",
                    generation=generation,
                    serving_generation=self.store.generation,
                )
                raise
            finally:
                self._running = None

            self.store.swap(snapshot)
            self._generation = generation
            self.last_report = snapshot.report
            logger.info(
                "Index snapshot swapped",
                generation=generation,
                previous_generation=(
                    self.store.previous.generation if self.store.previous else None
                ),
            )
            return snapshot.report

    # ------------------------------------------------------------------
    # Client operations
    # ------------------------------------------------------------------

    async def search(
        self,
        context: QueryContext,
        sort: SortMode = SortMode.RELEVANCE,
        page: PageRequest | None = None,
    ) -> SearchResult:
        """Ranked page of products matching a context.

        Raises:
            IndexNotReadyError: If no snapshot is serving.
            InvalidFilterValueError: If a structured value has the wrong shape.
        """
        return search_products(self.store.require(), context, sort, page)

    async def count(self, context: QueryContext) -> int:
        """Total number of products matching a context."""
        return count_matches(self.store.require(), context)

    async def facets(self, context: QueryContext) -> FacetResult:
        """Available filter options in a context."""
        return compute_facets(self.store.require(), context, self.histogram_buckets)

    async def taxonomy_tree(self) -> list[TaxonomyCount]:
        """Active taxonomy nodes in display order with product counts."""
        snapshot = self.store.require()
        return [
            TaxonomyCount(
                code=branch.code,
                parent_code=branch.node.parent_code,
                level=branch.node.level,
                name=branch.node.name,
                product_count=snapshot.count_in_taxonomy(branch.code),
            )
            for branch in snapshot.config.tree.walk()
        ]

    async def statistics(self) -> list[Statistic]:
        """Aggregate counters of the serving snapshot."""
        snapshot = self.store.require()
        counters: list[tuple[str, int]] = [
            ("total_products", snapshot.size),
            ("unclassified_products", snapshot.unclassified_count),
        ]
        counters.extend(
            (f"{flag}_products", snapshot.count_with_flag(flag)) for flag in snapshot.flag_names
        )
        counters.extend(
            [
                ("filter_entries", snapshot.entry_count),
                ("taxonomy_nodes", len(snapshot.config.tree)),
                ("classification_rules", len(snapshot.config.active_rules)),
                ("filter_definitions", len(snapshot.config.active_filters)),
                ("skipped_rules", len(snapshot.report.skipped_rules)),
                ("index_generation", snapshot.generation),
            ]
        )
        return [Statistic(name, value) for name, value in counters]

    def status(self) -> dict[str, Any]:
        """Index availability for readiness checks."""
        return {
            "ready": self.store.is_ready,
            "generation": self.store.generation,
            "rebuilding": self.is_rebuilding,
        }


# ============================================================================
# Service Factory
# ============================================================================


def _create_config_store() -> ConfigurationStore:
    from facetsearch.infrastructure.config import settings

    if settings.config_source == "database":
        from facetsearch.catalog.repository import DatabaseConfigurationStore
        from facetsearch.infrastructure.database import async_session_factory

        return DatabaseConfigurationStore(async_session_factory)
    if settings.config_source == "file" and settings.config_path:
        return FileConfigurationStore(settings.config_path)
    return StaticConfigurationStore()


def _create_catalog_source() -> CatalogSource:
    from facetsearch.infrastructure.config import settings

    if settings.catalog_source == "database":
        from facetsearch.catalog.repository import DatabaseCatalogSource
        from facetsearch.infrastructure.database import async_session_factory

        return DatabaseCatalogSource(async_session_factory)
    return GeneratedCatalogSource(
        GeneratorConfig(seed=settings.generator_seed, product_count=settings.generator_products)
    )


_search_service: SearchService | None = None


def get_search_service() -> SearchService:
    """Get search service singleton configured from settings."""
    global _search_service
    if _search_service is None:
        from facetsearch.infrastructure.config import settings

        _search_service = SearchService(
            config_store=_create_config_store(),
            catalog_source=_create_catalog_source(),
            workers=settings.rebuild_workers,
            chunk_size=settings.rebuild_chunk_size,
            histogram_buckets=settings.facet_histogram_buckets,
        )
    return _search_service
