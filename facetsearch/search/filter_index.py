"""Filter index builder.

Converts raw catalog attribute values into typed filter values, one per
(product, filter key), and assembles per-key secondary structures:

- boolean / categorical keys: value -> product bitset (equality lookup)
- numeric keys: value-sorted column searched with bisect (range lookup)

A missing or unparsable attribute yields no entry for that pair; it never
fails the rebuild.
"""

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Mapping, Sequence

from facetsearch.domain.entities import FilterDefinition, FilterIndexEntry, Product
from facetsearch.domain.value_objects import AttributeValue, NumericRange, ValueKind
from facetsearch.search import bitset

FilterValue = bool | str | float


def extract_value(definition: FilterDefinition, value: AttributeValue | None) -> FilterValue | None:
    """Convert a raw attribute value to the filter's value kind.

    Args:
        definition: Filter definition owning the value.
        value: Raw attribute value (None if the attribute is absent).

    Returns:
        Typed value, or None when the attribute yields no entry.
    """
    if value is None:
        return None
    if definition.kind is ValueKind.BOOLEAN:
        return value.as_bool()
    if definition.kind is ValueKind.CATEGORICAL:
        return value.as_category()
    return value.as_number()


def build_entries(product: Product, filters: Iterable[FilterDefinition]) -> list[FilterIndexEntry]:
    """Build the filter index entries of one product.

    Args:
        product: Product to index.
        filters: Active filter definitions.

    Returns:
        At most one entry per filter definition.
    """
    entries = []
    for definition in filters:
        typed = extract_value(definition, product.attributes.get(definition.source_attribute))
        if typed is not None:
            entries.append(FilterIndexEntry(product.id, definition.key, typed))
    return entries


class FilterKeyIndex:
    """Secondary structure over all entries of one filter key.

    Example usage:
        index = FilterKeyIndex.build(definition, {0: "IP65", 3: "IP20"}, size=4)
        index.lookup("IP65")                          # bitset with position 0
        index.lookup_range(NumericRange(10, 20))      # numeric keys only
    """

    def __init__(
        self,
        definition: FilterDefinition,
        size: int,
        values: Mapping[int, FilterValue],
    ) -> None:
        """Initialize the index.

        Args:
            definition: Filter definition of the key.
            size: Number of products in the snapshot.
            values: Product position -> typed value.
        """
        self.definition = definition
        self.size = size
        self.values = dict(values)
        self.postings: dict[FilterValue, int] = {}
        self._column_values: list[float] = []
        self._column_positions: list[int] = []

        if definition.kind is ValueKind.NUMERIC_RANGE:
            column = sorted((v, p) for p, v in self.values.items())
            self._column_values = [v for v, _ in column]
            self._column_positions = [p for _, p in column]
        else:
            grouped: dict[FilterValue, list[int]] = {}
            for position, value in self.values.items():
                grouped.setdefault(value, []).append(position)
            self.postings = {
                value: bitset.from_positions(positions, size)
                for value, positions in grouped.items()
            }
        self.present = bitset.from_positions(self.values, size)

    @classmethod
    def build(
        cls,
        definition: FilterDefinition,
        values: Mapping[int, FilterValue],
        size: int,
    ) -> "FilterKeyIndex":
        """Build the index for one filter key."""
        return cls(definition, size, values)

    @property
    def key(self) -> str:
        """Filter key."""
        return self.definition.key

    @property
    def kind(self) -> ValueKind:
        """Value kind of the key."""
        return self.definition.kind

    def __len__(self) -> int:
        return len(self.values)

    def lookup(self, value: FilterValue) -> int:
        """Products whose entry equals ``value``."""
        return self.postings.get(value, bitset.EMPTY)

    def lookup_any(self, values: Sequence[FilterValue]) -> int:
        """Products whose entry equals any of ``values``."""
        return bitset.union(self.lookup(v) for v in values)

    def lookup_range(self, bounds: NumericRange) -> int:
        """Products whose numeric entry lies within inclusive bounds.

        An unbounded side is unconstrained; products without an entry
        never match.
        """
        if bounds.is_unbounded:
            return self.present
        start = 0 if bounds.minimum is None else bisect_left(self._column_values, bounds.minimum)
        stop = (
            len(self._column_values)
            if bounds.maximum is None
            else bisect_right(self._column_values, bounds.maximum)
        )
        return bitset.from_positions(self._column_positions[start:stop], self.size)

    def count_values(self, candidates: int) -> list[tuple[FilterValue, int]]:
        """Count candidates per discrete value, dropping zero counts."""
        counts = []
        for value, bits in self.postings.items():
            matched = bitset.count(bits & candidates)
            if matched:
                counts.append((value, matched))
        return counts

    def numeric_values(self, candidates: int) -> list[float]:
        """Numeric entries of the candidates that have one."""
        return [self.values[p] for p in bitset.iter_positions(candidates & self.present)]

    def entries(self, product_ids: Sequence[str]) -> list[FilterIndexEntry]:
        """All entries of the key in product order.

        Args:
            product_ids: Product ids by position.
        """
        return [
            FilterIndexEntry(product_ids[p], self.key, self.values[p])
            for p in sorted(self.values)
        ]
