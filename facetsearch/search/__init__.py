"""Search index: classification, filter indexing, facets and queries.

- **Classifier**: rule-based taxonomy membership and flags
- **Filter index**: typed per-key secondary structures
- **Snapshot**: immutable index generation and the rebuild producing it
- **Query**: search and count over a query context
- **Facets**: context-aware filter options with counts
"""

from facetsearch.search.classifier import Classifier, CompiledRule, RuleIssue, compile_rule
from facetsearch.search.facets import (
    Facet,
    FacetResult,
    FacetRow,
    FacetValue,
    FlagFacet,
    HistogramBucket,
    build_histogram,
    compute_facets,
)
from facetsearch.search.filter_index import FilterKeyIndex, build_entries, extract_value
from facetsearch.search.query import (
    FilterSelection,
    QueryContext,
    QueryPlan,
    SearchHit,
    SearchResult,
    count,
    parse_selection,
    search,
)
from facetsearch.search.snapshot import IndexSnapshot, RebuildReport, build_snapshot

__all__ = [
    # Classifier
    "Classifier",
    "CompiledRule",
    "RuleIssue",
    "compile_rule",
    # Filter index
    "FilterKeyIndex",
    "build_entries",
    "extract_value",
    # Snapshot
    "IndexSnapshot",
    "RebuildReport",
    "build_snapshot",
    # Query
    "FilterSelection",
    "QueryContext",
    "QueryPlan",
    "SearchHit",
    "SearchResult",
    "count",
    "parse_selection",
    "search",
    # Facets
    "Facet",
    "FacetResult",
    "FacetRow",
    "FacetValue",
    "FlagFacet",
    "HistogramBucket",
    "build_histogram",
    "compute_facets",
]
