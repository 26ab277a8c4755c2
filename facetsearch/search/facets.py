"""Facet engine.

Computes the filter options available in a query context, with product
counts. For each eligible filter the candidate set is the context with
that filter's own selection removed, so options of a multi-select filter
stay visible after one of them is picked.

Only values with a positive count are emitted, so selecting any emitted
option always yields results (no dead ends).
"""

from dataclasses import dataclass, field
from typing import Any

from facetsearch.catalog.taxonomy import TaxonomyTree
from facetsearch.domain.entities import FilterDefinition
from facetsearch.domain.value_objects import ValueKind
from facetsearch.search import bitset
from facetsearch.search.filter_index import FilterValue
from facetsearch.search.query import QueryContext, QueryPlan
from facetsearch.search.snapshot import IndexSnapshot

DEFAULT_HISTOGRAM_BUCKETS = 10


@dataclass(frozen=True)
class FacetValue:
    """Discrete facet option."""

    value: FilterValue
    count: int
    selected: bool = False


@dataclass(frozen=True)
class HistogramBucket:
    """Numeric facet bucket (inclusive minimum; maximum inclusive only for the last bucket)."""

    minimum: float
    maximum: float
    count: int

    @property
    def label(self) -> str:
        """Display label, e.g. "10-20"."""
        return f"{_format_number(self.minimum)}-{_format_number(self.maximum)}"


@dataclass(frozen=True)
class FacetRow:
    """Flat (filter key, value or bucket, count) row."""

    filter_key: str
    value: FilterValue
    count: int
    minimum: float | None = None
    maximum: float | None = None


@dataclass
class Facet:
    """Available options of one filter in a context.

    Attributes:
        definition: Filter definition.
        values: Discrete options (boolean / categorical).
        minimum: Smallest observed value (numeric).
        maximum: Largest observed value (numeric).
        histogram: Non-empty buckets (numeric).
        count: Candidates having a value for the filter.
    """

    definition: FilterDefinition
    values: list[FacetValue] = field(default_factory=list)
    minimum: float | None = None
    maximum: float | None = None
    histogram: list[HistogramBucket] = field(default_factory=list)
    count: int = 0

    @property
    def key(self) -> str:
        """Filter key."""
        return self.definition.key

    def rows(self) -> list[FacetRow]:
        """Flat rows of the facet."""
        if self.definition.kind is ValueKind.NUMERIC_RANGE:
            return [
                FacetRow(self.key, b.label, b.count, b.minimum, b.maximum)
                for b in self.histogram
            ]
        return [FacetRow(self.key, v.value, v.count) for v in self.values]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        d = self.definition
        return {
            "key": d.key,
            "label": d.label,
            "kind": d.kind.value,
            "category": d.category,
            "unit": d.unit,
            "count": self.count,
            "values": [
                {"value": v.value, "count": v.count, "selected": v.selected}
                for v in self.values
            ],
            "min": self.minimum,
            "max": self.maximum,
            "histogram": [
                {"label": b.label, "min": b.minimum, "max": b.maximum, "count": b.count}
                for b in self.histogram
            ],
        }


@dataclass(frozen=True)
class FlagFacet:
    """True/false counts of one classifier flag.

    A side with no products is None so it is never offered as an option.
    """

    name: str
    true_count: int | None = None
    false_count: int | None = None
    requirement: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "true_count": self.true_count,
            "false_count": self.false_count,
            "requirement": self.requirement,
        }


@dataclass
class FacetResult:
    """All facets of a context."""

    facets: list[Facet] = field(default_factory=list)
    flags: list[FlagFacet] = field(default_factory=list)

    def rows(self) -> list[FacetRow]:
        """Flat rows over all filter facets."""
        return [row for facet in self.facets for row in facet.rows()]

    def get(self, key: str) -> Facet | None:
        """Facet of a filter key, if emitted."""
        for facet in self.facets:
            if facet.key == key:
                return facet
        return None


# ============================================================================
# Computation
# ============================================================================


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def is_applicable(
    definition: FilterDefinition,
    tree: TaxonomyTree,
    taxonomy_codes: tuple[str, ...],
) -> bool:
    """Check whether a filter is shown for the context's taxonomy scope.

    A filter without applicable codes is universal. With no taxonomy code
    selected every filter is shown. Otherwise some selected code and some
    applicable code must lie on one root path (their subtrees intersect).
    """
    if definition.applicable_taxonomy_codes is None or not taxonomy_codes:
        return True
    return tree.overlaps(taxonomy_codes, definition.applicable_taxonomy_codes)


def build_histogram(values: list[float], bucket_count: int) -> list[HistogramBucket]:
    """Bucket values into equal-width ranges.

    The last bucket includes the maximum. Empty buckets are dropped.

    Args:
        values: Observed numeric values.
        bucket_count: Number of equal-width buckets.

    Returns:
        Non-empty buckets in ascending order.
    """
    if not values:
        return []
    low, high = min(values), max(values)
    if low == high or bucket_count <= 1:
        return [HistogramBucket(low, high, len(values))]

    width = (high - low) / bucket_count
    counts = [0] * bucket_count
    for value in values:
        counts[min(int((value - low) / width), bucket_count - 1)] += 1
    return [
        HistogramBucket(low + i * width, high if i == bucket_count - 1 else low + (i + 1) * width, n)
        for i, n in enumerate(counts)
        if n
    ]


def _discrete_facet(
    definition: FilterDefinition,
    snapshot: IndexSnapshot,
    candidates: int,
    selected: tuple[FilterValue, ...],
) -> Facet:
    index = snapshot.filters[definition.key]
    counts = sorted(index.count_values(candidates), key=lambda vc: (-vc[1], str(vc[0])))
    return Facet(
        definition=definition,
        values=[FacetValue(v, n, v in selected) for v, n in counts],
        count=bitset.count(candidates & index.present),
    )


def _numeric_facet(
    definition: FilterDefinition,
    snapshot: IndexSnapshot,
    candidates: int,
    buckets: int,
) -> Facet:
    values = snapshot.filters[definition.key].numeric_values(candidates)
    if not values:
        return Facet(definition=definition)
    return Facet(
        definition=definition,
        minimum=min(values),
        maximum=max(values),
        histogram=build_histogram(values, buckets),
        count=len(values),
    )


def compute_facets(
    snapshot: IndexSnapshot,
    context: QueryContext,
    histogram_buckets: int = DEFAULT_HISTOGRAM_BUCKETS,
) -> FacetResult:
    """Compute filter and flag facets for a context.

    Args:
        snapshot: Index snapshot.
        context: Query context including the user's selections.
        histogram_buckets: Buckets per numeric facet.

    Returns:
        Facets of every eligible filter with at least one value, in display
        order, and the flag facets.
    """
    plan = QueryPlan(snapshot, context)
    config = snapshot.config
    result = FacetResult()

    for definition in config.active_filters:
        if definition.key not in snapshot.filters:
            continue
        if not is_applicable(definition, config.tree, context.taxonomy_codes):
            continue
        candidates = plan.candidates(exclude_filter=definition.key)
        if definition.kind is ValueKind.NUMERIC_RANGE:
            facet = _numeric_facet(definition, snapshot, candidates, histogram_buckets)
            if not facet.histogram:
                continue
        else:
            selection = plan.selections.get(definition.key)
            selected = selection.values if selection is not None else ()
            facet = _discrete_facet(definition, snapshot, candidates, selected)
            if not facet.values:
                continue
        result.facets.append(facet)

    for name in snapshot.flag_names:
        candidates = plan.candidates(exclude_flag=name)
        total = bitset.count(candidates)
        true_count = bitset.count(candidates & snapshot.flag_postings.get(name, bitset.EMPTY))
        false_count = total - true_count
        if not total:
            continue
        requirement = context.flags.get(name)
        result.flags.append(
            FlagFacet(
                name=name,
                true_count=true_count or None,
                false_count=false_count or None,
                requirement=requirement.value if requirement is not None else None,
            )
        )

    return result
