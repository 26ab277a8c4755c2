"""Query executor.

Composes the predicates of a query context into a product bitset and turns
it into a ranked page (search) or a total (count). Both go through the
same QueryPlan, so a count always equals the length of the unbounded
search over the same context.

Predicate composition:
    - taxonomy codes are OR'd among themselves
    - flags are tri-state (require true / require false / ignore)
    - suppliers are OR'd among themselves
    - structured filters are AND'd; values within one categorical
      filter are OR'd; numeric ranges are inclusive and an absent bound
      is unconstrained
    - every predicate kind is AND'd with the others
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from itertools import islice
from typing import Any

from facetsearch.domain.entities import FilterDefinition, Product, TaxonomyAssignment
from facetsearch.domain.exceptions import InvalidFilterValueError
from facetsearch.domain.value_objects import (
    FlagRequirement,
    NumericRange,
    PageRequest,
    SortMode,
    ValueKind,
    parse_bool,
    parse_number,
)
from facetsearch.search import bitset
from facetsearch.search.filter_index import FilterKeyIndex, FilterValue
from facetsearch.search.snapshot import IndexSnapshot
from facetsearch.search.text import TextQuery


# ============================================================================
# Query Context
# ============================================================================


@dataclass(frozen=True)
class QueryContext:
    """Predicate set shared by search, count and facets.

    Attributes:
        query_text: Free-text query.
        taxonomy_codes: Active taxonomy codes (OR semantics).
        flags: Flag name -> requirement.
        suppliers: Supplier names (OR semantics).
        filters: Filter key -> raw selected value(s).
    """

    query_text: str | None = None
    taxonomy_codes: tuple[str, ...] = ()
    flags: Mapping[str, FlagRequirement] = field(default_factory=dict)
    suppliers: tuple[str, ...] = ()
    filters: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        query_text: str | None = None,
        taxonomy_codes: Sequence[str] | None = None,
        flags: Mapping[str, bool | str | FlagRequirement | None] | None = None,
        suppliers: Sequence[str] | None = None,
        filters: Mapping[str, Any] | None = None,
    ) -> "QueryContext":
        """Build a context from loosely typed request values.

        Flags given as None or "ignore" are dropped.
        """
        requirements = {}
        for name, value in (flags or {}).items():
            requirement = FlagRequirement.from_value(value, name)
            if requirement is not FlagRequirement.IGNORE:
                requirements[name] = requirement
        return cls(
            query_text=query_text or None,
            taxonomy_codes=tuple(dict.fromkeys(taxonomy_codes or ())),
            flags=requirements,
            suppliers=tuple(dict.fromkeys(suppliers or ())),
            filters={k: v for k, v in (filters or {}).items() if v is not None},
        )

    def without_filter(self, key: str) -> "QueryContext":
        """Copy of the context with one structured filter removed."""
        return replace(self, filters={k: v for k, v in self.filters.items() if k != key})

    def with_filter(self, key: str, value: Any) -> "QueryContext":
        """Copy of the context with one structured filter set."""
        return replace(self, filters={**self.filters, key: value})

    def with_flag(self, name: str, value: bool | str | FlagRequirement | None) -> "QueryContext":
        """Copy of the context with one flag requirement set."""
        flags = dict(self.flags)
        requirement = FlagRequirement.from_value(value, name)
        if requirement is FlagRequirement.IGNORE:
            flags.pop(name, None)
        else:
            flags[name] = requirement
        return replace(self, flags=flags)


# ============================================================================
# Filter Selections
# ============================================================================


@dataclass(frozen=True)
class FilterSelection:
    """Parsed selection for one structured filter.

    Attributes:
        key: Filter key.
        kind: Value kind of the filter.
        values: Selected discrete values (boolean / categorical).
        bounds: Selected range (numeric).
    """

    key: str
    kind: ValueKind
    values: tuple[FilterValue, ...] = ()
    bounds: NumericRange | None = None

    @property
    def is_constraining(self) -> bool:
        """Whether the selection narrows the result at all."""
        if self.kind is ValueKind.NUMERIC_RANGE:
            return self.bounds is not None and not self.bounds.is_unbounded
        return bool(self.values)

    def match(self, index: FilterKeyIndex) -> int:
        """Products satisfying the selection."""
        if self.kind is ValueKind.NUMERIC_RANGE:
            return index.lookup_range(self.bounds)
        return index.lookup_any(self.values)


def _parse_bound(definition: FilterDefinition, raw: Any, bound: Any) -> float | None:
    if bound is None or bound == "":
        return None
    number = parse_number(bound)
    if number is None:
        raise InvalidFilterValueError(definition.key, definition.kind.value, raw)
    return number


def parse_selection(definition: FilterDefinition, raw: Any) -> FilterSelection:
    """Parse a raw structured filter value for its definition.

    Accepted shapes:
        boolean       True / False / "yes" / [True, False]
        categorical   "IP65" / ["IP65", "IP67"]
        numeric       {"min": 10, "max": 20} / [10, 20] / [None, 20]

    Args:
        definition: Active filter definition.
        raw: Value from the request.

    Returns:
        Parsed selection.

    Raises:
        InvalidFilterValueError: If the value has the wrong shape.
    """
    kind = definition.kind

    if kind is ValueKind.NUMERIC_RANGE:
        if isinstance(raw, Mapping):
            lower, upper = raw.get("min"), raw.get("max")
        elif isinstance(raw, (list, tuple)) and len(raw) == 2:
            lower, upper = raw
        else:
            raise InvalidFilterValueError(definition.key, kind.value, raw)
        bounds = NumericRange(
            _parse_bound(definition, raw, lower),
            _parse_bound(definition, raw, upper),
        )
        return FilterSelection(definition.key, kind, bounds=bounds)

    items = list(raw) if isinstance(raw, (list, tuple, set, frozenset)) else [raw]

    if kind is ValueKind.BOOLEAN:
        values = []
        for item in items:
            parsed = parse_bool(item) if isinstance(item, (bool, str)) else None
            if parsed is None:
                raise InvalidFilterValueError(definition.key, kind.value, raw)
            values.append(parsed)
        return FilterSelection(definition.key, kind, values=tuple(dict.fromkeys(values)))

    values = []
    for item in items:
        if not isinstance(item, str):
            raise InvalidFilterValueError(definition.key, kind.value, raw)
        if item.strip():
            values.append(item.strip())
    return FilterSelection(definition.key, kind, values=tuple(dict.fromkeys(values)))


# ============================================================================
# Query Plan
# ============================================================================


class QueryPlan:
    """Per-request evaluation of a context against one snapshot.

    Each predicate is resolved to a bitset once; candidate sets with a
    filter or flag left out (for facets) reuse them.

    Example usage:
        plan = QueryPlan(snapshot, context)
        plan.candidates()                         # full context
        plan.candidates(exclude_filter="ip")      # for the "ip" facet
    """

    def __init__(self, snapshot: IndexSnapshot, context: QueryContext) -> None:
        """Resolve the context's predicates.

        Unknown or inactive filter keys and unknown flag names are ignored.

        Raises:
            InvalidFilterValueError: If a structured value has the wrong shape.
        """
        self.snapshot = snapshot
        self.context = context

        base = snapshot.all
        if context.taxonomy_codes:
            base &= bitset.union(
                snapshot.taxonomy_postings.get(c, bitset.EMPTY) for c in context.taxonomy_codes
            )
        if context.suppliers:
            base &= bitset.union(
                snapshot.supplier_postings.get(s, bitset.EMPTY) for s in context.suppliers
            )

        self.flag_bits: dict[str, int] = {}
        for name, requirement in context.flags.items():
            if name not in snapshot.flag_postings:
                continue
            flagged = snapshot.flag_postings[name]
            if requirement is FlagRequirement.REQUIRE_TRUE:
                self.flag_bits[name] = flagged
            elif requirement is FlagRequirement.REQUIRE_FALSE:
                self.flag_bits[name] = snapshot.all & ~flagged

        self.selections: dict[str, FilterSelection] = {}
        self.filter_bits: dict[str, int] = {}
        for key, raw in context.filters.items():
            definition = snapshot.config.get_filter(key)
            index = snapshot.filters.get(key)
            if definition is None or index is None:
                continue
            selection = parse_selection(definition, raw)
            if not selection.is_constraining:
                continue
            self.selections[key] = selection
            self.filter_bits[key] = selection.match(index)

        self.text_query = TextQuery.parse(context.query_text)
        self.tiers: dict[int, int] = {}
        if self.text_query is not None:
            for position in bitset.iter_positions(base):
                tier = self.text_query.tier(snapshot.texts[position])
                if tier is not None:
                    self.tiers[position] = tier
            base = bitset.from_positions(self.tiers, snapshot.size)

        self.base = base

    def candidates(self, exclude_filter: str | None = None, exclude_flag: str | None = None) -> int:
        """Products matching the context, optionally ignoring one filter or flag."""
        bits = self.base
        for name, flag_bits in self.flag_bits.items():
            if name != exclude_flag:
                bits &= flag_bits
        for key, filter_bits in self.filter_bits.items():
            if key != exclude_filter:
                bits &= filter_bits
        return bits


# ============================================================================
# Search and Count
# ============================================================================


@dataclass(frozen=True)
class SearchHit:
    """One ranked result."""

    product: Product
    assignment: TaxonomyAssignment
    tier: int | None = None


@dataclass(frozen=True)
class SearchResult:
    """One page of ranked results."""

    hits: list[SearchHit]
    total: int
    offset: int
    limit: int | None

    @property
    def has_more(self) -> bool:
        """Whether results exist beyond this page."""
        return self.offset + len(self.hits) < self.total

    @property
    def product_ids(self) -> list[str]:
        """Ids of the products on the page, in rank order."""
        return [hit.product.id for hit in self.hits]


def _sort_key(snapshot: IndexSnapshot, plan: QueryPlan, sort: SortMode):
    if sort is SortMode.PRICE_ASC:
        prices = snapshot.prices
        return lambda p: (prices[p] is None, prices[p] or 0.0, p)
    if sort is SortMode.PRICE_DESC:
        prices = snapshot.prices
        return lambda p: (prices[p] is None, -(prices[p] or 0.0), p)
    if sort is SortMode.NAME:
        products = snapshot.products
        return lambda p: (products[p].description_short.lower(), p)
    if plan.text_query is not None:
        tiers = plan.tiers
        return lambda p: (tiers[p], p)
    return None


def search(
    snapshot: IndexSnapshot,
    context: QueryContext,
    sort: SortMode = SortMode.RELEVANCE,
    page: PageRequest | None = None,
) -> SearchResult:
    """Rank and paginate the products matching a context.

    Without a text query, relevance order is the natural id order.
    Price sorts override relevance; products without a price sort last.
    Ties always break by product id.

    Args:
        snapshot: Index snapshot.
        context: Query context.
        sort: Sort mode.
        page: Page request (default first page of 24).

    Returns:
        Page of hits with the total match count.
    """
    page = page or PageRequest()
    plan = QueryPlan(snapshot, context)
    matched = plan.candidates()
    total = bitset.count(matched)

    stop = None if page.limit is None else page.offset + page.limit
    key = _sort_key(snapshot, plan, sort)
    if key is None:
        positions = list(islice(bitset.iter_positions(matched), page.offset, stop))
    else:
        positions = sorted(bitset.iter_positions(matched), key=key)[page.offset:stop]

    hits = [
        SearchHit(
            product=snapshot.products[p],
            assignment=snapshot.assignments[p],
            tier=plan.tiers.get(p),
        )
        for p in positions
    ]
    return SearchResult(hits=hits, total=total, offset=page.offset, limit=page.limit)


def count(snapshot: IndexSnapshot, context: QueryContext) -> int:
    """Total number of products matching a context.

    Args:
        snapshot: Index snapshot.
        context: Query context.

    Returns:
        Match count, independent of sort and page.
    """
    return bitset.count(QueryPlan(snapshot, context).candidates())
