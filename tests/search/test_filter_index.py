"""Tests for the filter index builder and bitsets."""

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.domain.entities import FilterDefinition, FilterIndexEntry, Product
from facetsearch.domain.value_objects import AttributeValue, NumericRange, ValueKind
from facetsearch.search import bitset
from facetsearch.search.filter_index import FilterKeyIndex, build_entries, extract_value
from facetsearch.search.snapshot import IndexSnapshot


def definition(kind: ValueKind, key: str = "f") -> FilterDefinition:
    return FilterDefinition(key=key, label=key, kind=kind, source_attribute="A")


class TestBitset:
    """Tests for integer bitsets."""

    def test_from_positions_and_iterate(self) -> None:
        """Positions round-trip in ascending order."""
        bits = bitset.from_positions([9, 0, 17, 3], size=20)
        assert list(bitset.iter_positions(bits)) == [0, 3, 9, 17]
        assert bitset.count(bits) == 4

    def test_full_and_empty(self) -> None:
        """Full set has every position; empty has none."""
        assert list(bitset.iter_positions(bitset.full(3))) == [0, 1, 2]
        assert list(bitset.iter_positions(bitset.EMPTY)) == []
        assert bitset.full(0) == bitset.EMPTY

    def test_union(self) -> None:
        """Union combines sets."""
        a = bitset.from_positions([1], 8)
        b = bitset.from_positions([5], 8)
        assert list(bitset.iter_positions(bitset.union([a, b]))) == [1, 5]
        assert bitset.union([]) == bitset.EMPTY


class TestExtractValue:
    """Tests for raw value to typed value conversion."""

    def test_boolean(self) -> None:
        """Logical encodings become bools; others yield no entry."""
        d = definition(ValueKind.BOOLEAN)
        assert extract_value(d, AttributeValue.parse("Yes")) is True
        assert extract_value(d, AttributeValue.parse({"boolean": 0})) is False
        assert extract_value(d, AttributeValue.parse("sometimes")) is None

    def test_categorical(self) -> None:
        """Labels (or codes) are kept verbatim; numbers are not categories."""
        d = definition(ValueKind.CATEGORICAL)
        assert extract_value(d, AttributeValue.parse("IP65")) == "IP65"
        assert extract_value(d, AttributeValue.parse({"code": "EV1"})) == "EV1"
        assert extract_value(d, AttributeValue.parse(12)) is None

    def test_numeric(self) -> None:
        """Scalars and ranges become numbers; text yields no entry."""
        d = definition(ValueKind.NUMERIC_RANGE)
        assert extract_value(d, AttributeValue.parse(12.5)) == 12.5
        assert extract_value(d, AttributeValue.parse([15, 20])) == 15.0
        assert extract_value(d, AttributeValue.parse("abc")) is None

    def test_missing_attribute(self) -> None:
        """An absent attribute yields no entry."""
        assert extract_value(definition(ValueKind.BOOLEAN), None) is None


class TestBuildEntries:
    """Tests for per-product entry building."""

    def test_ip_rating_entry(self, config: ConfigSnapshot, products: list[Product]) -> None:
        """An IP rating label becomes a categorical entry."""
        entries = build_entries(products[1], config.active_filters)
        assert FilterIndexEntry("P2", "ip", "IP65") in entries
        assert FilterIndexEntry("P2", "dimmable", False) in entries
        assert FilterIndexEntry("P2", "colour", "Black") in entries

    def test_at_most_one_entry_per_key(self, config: ConfigSnapshot, products: list[Product]) -> None:
        """Each filter key yields at most one entry per product."""
        for product in products:
            keys = [e.filter_key for e in build_entries(product, config.active_filters)]
            assert len(keys) == len(set(keys))

    def test_unparsable_value_is_skipped(self, config: ConfigSnapshot, products: list[Product]) -> None:
        """Unparsable values produce no entry instead of failing."""
        keys = {e.filter_key for e in build_entries(products[4], config.active_filters)}
        assert keys == {"ip"}


class TestFilterKeyIndex:
    """Tests for per-key secondary structures."""

    def test_categorical_lookup(self) -> None:
        """Equality lookups return matching positions."""
        index = FilterKeyIndex.build(
            definition(ValueKind.CATEGORICAL, "ip"), {0: "IP65", 2: "IP44", 3: "IP65"}, size=4
        )
        assert list(bitset.iter_positions(index.lookup("IP65"))) == [0, 3]
        assert list(bitset.iter_positions(index.lookup_any(["IP44", "IP20"]))) == [2]
        assert index.lookup("IP20") == bitset.EMPTY
        assert sorted(index.count_values(bitset.full(4))) == [("IP44", 1), ("IP65", 2)]

    def test_count_values_drops_zero_counts(self) -> None:
        """Values absent from the candidates are not counted."""
        index = FilterKeyIndex.build(
            definition(ValueKind.CATEGORICAL), {0: "a", 1: "b"}, size=2
        )
        assert index.count_values(bitset.from_positions([0], 2)) == [("a", 1)]

    def test_range_lookup(self) -> None:
        """Range lookups are inclusive on both sides."""
        index = FilterKeyIndex.build(
            definition(ValueKind.NUMERIC_RANGE), {0: 8.0, 1: 12.5, 2: 15.0, 4: 30.0}, size=5
        )

        def positions(bounds: NumericRange) -> list[int]:
            return list(bitset.iter_positions(index.lookup_range(bounds)))

        assert positions(NumericRange(10, 20)) == [1, 2]
        assert positions(NumericRange(12.5, 15)) == [1, 2]
        assert positions(NumericRange(13, 20)) == [2]
        assert positions(NumericRange(maximum=10)) == [0]
        assert positions(NumericRange(minimum=15)) == [2, 4]
        assert positions(NumericRange()) == [0, 1, 2, 4]
        assert positions(NumericRange(100, 200)) == []

    def test_numeric_values(self) -> None:
        """Numeric values of the candidates that have one."""
        index = FilterKeyIndex.build(
            definition(ValueKind.NUMERIC_RANGE), {0: 8.0, 2: 15.0}, size=3
        )
        assert index.numeric_values(bitset.full(3)) == [8.0, 15.0]
        assert len(index) == 2


class TestSnapshotEntries:
    """Tests for index entries on a built snapshot."""

    def test_entry_lookup(self, snapshot: IndexSnapshot) -> None:
        """Entries are addressable by product and key."""
        assert snapshot.get_entry("P2", "ip") == "IP65"
        assert snapshot.get_entry("P3", "power") == 15.0
        assert snapshot.get_entry("P5", "power") is None
        assert snapshot.get_entry("NOPE", "ip") is None

    def test_entries_are_ordered(self, snapshot: IndexSnapshot) -> None:
        """Entries are listed by product id, then filter key."""
        entries = snapshot.entries()
        assert len(entries) == snapshot.entry_count == 15
        assert entries == sorted(entries, key=lambda e: (e.product_id, e.filter_key))
