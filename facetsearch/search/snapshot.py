"""Immutable index snapshot and the rebuild that produces it.

A rebuild classifies and indexes every product of a catalog snapshot
against one configuration snapshot. Per-product work is independent and
runs across a process pool; a single merge phase then assembles the
per-code, per-flag and per-filter-key bitsets.

A finished IndexSnapshot is never mutated. Queries read it concurrently
while the next rebuild builds a fresh one.
"""

import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any

import structlog

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.domain.entities import (
    FilterDefinition,
    FilterIndexEntry,
    Product,
    TaxonomyAssignment,
)
from facetsearch.search import bitset
from facetsearch.search.classifier import Classifier, RuleIssue
from facetsearch.search.filter_index import FilterKeyIndex, FilterValue, extract_value
from facetsearch.search.text import SearchableText

logger = structlog.get_logger()


# ============================================================================
# Rebuild Report
# ============================================================================


@dataclass
class RebuildReport:
    """Outcome of one rebuild attempt.

    Attributes:
        generation: Generation number of the produced snapshot.
        status: "running", "completed" or "failed".
        started_at: Start timestamp.
        finished_at: End timestamp.
        duration_ms: Wall-clock duration.
        config_source: Where the configuration was loaded from.
        workers: Worker processes used for per-product work.
        product_count: Indexed products.
        unclassified_count: Products with no taxonomy code.
        entry_count: Filter index entries.
        skipped_rules: Rules skipped as malformed.
        error: Failure message of a failed rebuild.
    """

    generation: int
    status: str = "running"
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    duration_ms: float = 0.0
    config_source: str | None = None
    workers: int = 1
    product_count: int = 0
    unclassified_count: int = 0
    entry_count: int = 0
    skipped_rules: list[RuleIssue] = field(default_factory=list)
    error: str | None = None

    def finish(self, status: str, error: str | None = None) -> None:
        """Mark the attempt finished."""
        self.status = status
        self.error = error
        self.finished_at = datetime.now(timezone.utc)
        self.duration_ms = round(
            (self.finished_at - self.started_at).total_seconds() * 1000, 2
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "generation": self.generation,
            "status": self.status,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_ms": self.duration_ms,
            "config_source": self.config_source,
            "workers": self.workers,
            "product_count": self.product_count,
            "unclassified_count": self.unclassified_count,
            "entry_count": self.entry_count,
            "skipped_rules": [issue.to_dict() for issue in self.skipped_rules],
            "error": self.error,
        }


# ============================================================================
# Index Snapshot
# ============================================================================


class IndexSnapshot:
    """One immutable generation of the search index.

    Products are stored in id order; a product's position in that order is
    its bit in every bitset of the snapshot.

    Attributes:
        generation: Monotonic generation number.
        config: Configuration snapshot the index was built from.
        products: Products in id order.
        assignments: Taxonomy assignment per product position.
        texts: Searchable text per product position.
        flag_names: Every flag the classifier can set.
        taxonomy_postings: Taxonomy code -> products carrying it.
        flag_postings: Flag name -> products with the flag true.
        supplier_postings: Supplier -> products.
        filters: Filter key -> secondary structure.
        report: Report of the rebuild that produced the snapshot.
    """

    def __init__(
        self,
        generation: int,
        config: ConfigSnapshot,
        products: Sequence[Product],
        assignments: Sequence[TaxonomyAssignment],
        flag_names: Sequence[str],
        filters: dict[str, FilterKeyIndex],
        report: RebuildReport,
    ) -> None:
        self.generation = generation
        self.config = config
        self.products = tuple(products)
        self.product_ids = tuple(p.id for p in self.products)
        self.positions = {pid: i for i, pid in enumerate(self.product_ids)}
        self.assignments = tuple(assignments)
        self.flag_names = tuple(flag_names)
        self.filters = filters
        self.report = report
        self.built_at = datetime.now(timezone.utc)
        self.all = bitset.full(len(self.products))

        self.texts = tuple(SearchableText.from_product(p) for p in self.products)
        self.prices = tuple(
            float(p.price) if p.price is not None else None for p in self.products
        )

        size = len(self.products)
        codes: dict[str, list[int]] = {}
        flags: dict[str, list[int]] = {name: [] for name in self.flag_names}
        suppliers: dict[str, list[int]] = {}
        for position, (product, assignment) in enumerate(zip(self.products, self.assignments)):
            for code in assignment.codes:
                codes.setdefault(code, []).append(position)
            for name, value in assignment.flags.items():
                if value:
                    flags.setdefault(name, []).append(position)
            if product.supplier:
                suppliers.setdefault(product.supplier, []).append(position)

        self.taxonomy_postings = {c: bitset.from_positions(p, size) for c, p in codes.items()}
        self.flag_postings = {f: bitset.from_positions(p, size) for f, p in flags.items()}
        self.supplier_postings = {s: bitset.from_positions(p, size) for s, p in suppliers.items()}
        self.classified = bitset.union(self.taxonomy_postings.values())

    @property
    def size(self) -> int:
        """Number of indexed products."""
        return len(self.products)

    def get_product(self, product_id: str) -> Product | None:
        """Get product by id."""
        position = self.positions.get(product_id)
        return self.products[position] if position is not None else None

    def get_assignment(self, product_id: str) -> TaxonomyAssignment | None:
        """Get the taxonomy assignment of a product."""
        position = self.positions.get(product_id)
        return self.assignments[position] if position is not None else None

    def get_entry(self, product_id: str, filter_key: str) -> FilterValue | None:
        """Get the typed filter value of a (product, filter key) pair."""
        position = self.positions.get(product_id)
        index = self.filters.get(filter_key)
        if position is None or index is None:
            return None
        return index.values.get(position)

    def entries(self) -> list[FilterIndexEntry]:
        """All filter index entries ordered by product id, then filter key."""
        result: list[FilterIndexEntry] = []
        for key in sorted(self.filters):
            result.extend(self.filters[key].entries(self.product_ids))
        result.sort(key=lambda e: (e.product_id, e.filter_key))
        return result

    @property
    def entry_count(self) -> int:
        """Total number of filter index entries."""
        return sum(len(index) for index in self.filters.values())

    @property
    def unclassified_count(self) -> int:
        """Products without any taxonomy code."""
        return self.size - bitset.count(self.classified)

    def count_in_taxonomy(self, code: str) -> int:
        """Products carrying a taxonomy code."""
        return bitset.count(self.taxonomy_postings.get(code, bitset.EMPTY))

    def count_with_flag(self, flag_name: str) -> int:
        """Products with a flag set true."""
        return bitset.count(self.flag_postings.get(flag_name, bitset.EMPTY))


# ============================================================================
# Rebuild
# ============================================================================


ProductResult = tuple[TaxonomyAssignment, list[tuple[str, FilterValue]]]


def process_chunk(
    classifier: Classifier,
    filters: Sequence[FilterDefinition],
    products: Sequence[Product],
) -> list[ProductResult]:
    """Classify and index a chunk of products.

    Module-level so that worker processes can import it.

    Args:
        classifier: Compiled classifier.
        filters: Active filter definitions.
        products: Products to process.

    Returns:
        Assignment and (filter key, value) pairs per product, in input order.
    """
    results: list[ProductResult] = []
    for product in products:
        values = []
        for definition in filters:
            typed = extract_value(definition, product.attributes.get(definition.source_attribute))
            if typed is not None:
                values.append((definition.key, typed))
        results.append((classifier.classify(product), values))
    return results


def _chunks(items: Sequence[Product], size: int) -> Iterable[Sequence[Product]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _unique_products(products: Iterable[Product]) -> list[Product]:
    unique: dict[str, Product] = {}
    for product in products:
        if product.id in unique:
            logger.warning("Duplicate product id skipped", product_id=product.id)
            continue
        unique[product.id] = product
    return sorted(unique.values(), key=lambda p: p.id)


def build_snapshot(
    products: Iterable[Product],
    config: ConfigSnapshot,
    generation: int = 1,
    workers: int = 1,
    chunk_size: int = 2000,
) -> IndexSnapshot:
    """Run a full rebuild.

    Args:
        products: Catalog snapshot.
        config: Configuration snapshot.
        generation: Generation number for the new snapshot.
        workers: Worker processes for per-product work (1 = inline).
        chunk_size: Products per work unit.

    Returns:
        New immutable index snapshot.
    """
    report = RebuildReport(generation=generation, config_source=config.source, workers=workers)
    start = time.perf_counter()

    ordered = _unique_products(products)
    classifier = Classifier.from_config(config)
    filters = config.active_filters
    report.skipped_rules = list(classifier.issues)
    for issue in classifier.issues:
        logger.warning("Classification rule skipped", rule=issue.rule_name, reason=issue.reason)

    work = partial(process_chunk, classifier, filters)
    chunks = list(_chunks(ordered, max(chunk_size, 1)))
    if workers > 1 and len(chunks) > 1:
        with ProcessPoolExecutor(max_workers=workers) as executor:
            chunk_results = list(executor.map(work, chunks))
    else:
        chunk_results = [work(chunk) for chunk in chunks]

    assignments: list[TaxonomyAssignment] = []
    values_by_key: dict[str, dict[int, FilterValue]] = {f.key: {} for f in filters}
    position = 0
    for results in chunk_results:
        for assignment, values in results:
            assignments.append(assignment)
            for key, value in values:
                values_by_key[key][position] = value
            position += 1

    size = len(ordered)
    indexes = {
        f.key: FilterKeyIndex.build(f, values_by_key[f.key], size) for f in filters
    }
    snapshot = IndexSnapshot(
        generation=generation,
        config=config,
        products=ordered,
        assignments=assignments,
        flag_names=classifier.flag_names,
        filters=indexes,
        report=report,
    )

    report.product_count = snapshot.size
    report.unclassified_count = snapshot.unclassified_count
    report.entry_count = snapshot.entry_count
    report.finish("completed")
    logger.info(
        "Index snapshot built",
        generation=generation,
        products=report.product_count,
        unclassified=report.unclassified_count,
        entries=report.entry_count,
        skipped_rules=len(report.skipped_rules),
        workers=workers,
        elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return snapshot
