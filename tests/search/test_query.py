"""Tests for the query executor."""

from typing import Any

import pytest

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.domain.entities import Product
from facetsearch.domain.exceptions import InvalidFilterValueError
from facetsearch.domain.value_objects import FlagRequirement, PageRequest, SortMode
from facetsearch.search.query import QueryContext, count, search
from facetsearch.search.snapshot import IndexSnapshot, build_snapshot
from facetsearch.search.text import TIER_EXACT, TIER_PREFIX, TIER_SUBSTRING, TIER_TERMS


def ids(snapshot: IndexSnapshot, sort: SortMode = SortMode.RELEVANCE, **kwargs: Any) -> list[str]:
    result = search(snapshot, QueryContext.create(**kwargs), sort=sort, page=PageRequest.unbounded())
    return result.product_ids


class TestQueryContext:
    """Tests for QueryContext construction."""

    def test_create_drops_ignored_flags(self) -> None:
        """Flags set to None or "ignore" are dropped."""
        context = QueryContext.create(flags={"outdoor": True, "ceiling": None, "x": "ignore"})
        assert context.flags == {"outdoor": FlagRequirement.REQUIRE_TRUE}

    def test_create_deduplicates(self) -> None:
        """Repeated codes and suppliers are collapsed in order."""
        context = QueryContext.create(taxonomy_codes=["B", "A", "B"], suppliers=["x", "x"])
        assert context.taxonomy_codes == ("B", "A")
        assert context.suppliers == ("x",)

    def test_with_and_without_filter(self) -> None:
        """Filter helpers return modified copies."""
        context = QueryContext.create(filters={"ip": "IP65"})
        assert context.with_filter("power", {"min": 1}).filters == {"ip": "IP65", "power": {"min": 1}}
        assert context.without_filter("ip").filters == {}
        assert context.filters == {"ip": "IP65"}

    def test_with_flag(self) -> None:
        """Setting a flag to ignore removes it."""
        context = QueryContext.create(flags={"outdoor": True})
        assert context.with_flag("outdoor", None).flags == {}
        assert context.with_flag("ceiling", False).flags["ceiling"] is FlagRequirement.REQUIRE_FALSE


class TestPredicates:
    """Tests for predicate composition."""

    def test_empty_context_matches_everything(self, snapshot: IndexSnapshot) -> None:
        """No predicates means the whole catalog in id order."""
        assert ids(snapshot) == ["P1", "P2", "P3", "P4", "P5", "P6"]

    def test_taxonomy_codes_are_ored(self, snapshot: IndexSnapshot) -> None:
        """Taxonomy codes combine with OR; ancestors include descendants."""
        assert ids(snapshot, taxonomy_codes=["LUM_CEIL"]) == ["P1", "P2"]
        assert ids(snapshot, taxonomy_codes=["DRV", "LUM_CEIL_REC"]) == ["P1", "P4"]
        assert ids(snapshot, taxonomy_codes=["LUM"]) == ["P1", "P2", "P3", "P5"]

    def test_unknown_taxonomy_code_matches_nothing(self, snapshot: IndexSnapshot) -> None:
        """An unknown taxonomy code has no products."""
        assert ids(snapshot, taxonomy_codes=["NOPE"]) == []

    def test_suppliers(self, snapshot: IndexSnapshot) -> None:
        """Suppliers combine with OR."""
        assert ids(snapshot, suppliers=["Acme"]) == ["P1", "P3", "P6"]
        assert ids(snapshot, suppliers=["Acme", "Nordic"]) == ["P1", "P3", "P5", "P6"]

    def test_flags_are_tri_state(self, snapshot: IndexSnapshot) -> None:
        """Flags can be required true, required false or ignored."""
        assert ids(snapshot, flags={"outdoor": True}) == ["P2", "P3"]
        assert ids(snapshot, flags={"outdoor": False}) == ["P1", "P4", "P5", "P6"]
        assert ids(snapshot, flags={"outdoor": "ignore"}) == ["P1", "P2", "P3", "P4", "P5", "P6"]

    def test_unknown_flag_is_ignored(self, snapshot: IndexSnapshot) -> None:
        """A flag no rule can set does not restrict the result."""
        assert len(ids(snapshot, flags={"submersible": True})) == 6

    def test_categorical_values_are_ored(self, snapshot: IndexSnapshot) -> None:
        """Values within one categorical filter combine with OR."""
        assert ids(snapshot, filters={"ip": "IP65"}) == ["P1", "P2"]
        assert ids(snapshot, filters={"ip": ["IP65", "IP44"]}) == ["P1", "P2", "P3"]

    def test_filters_are_anded(self, snapshot: IndexSnapshot) -> None:
        """Different filters combine with AND."""
        assert ids(snapshot, filters={"ip": ["IP65", "IP44"], "power": {"min": 10}}) == ["P2", "P3"]

    def test_predicate_kinds_are_anded(self, snapshot: IndexSnapshot) -> None:
        """Taxonomy, flags, suppliers and filters all combine with AND."""
        assert ids(
            snapshot,
            taxonomy_codes=["LUM"],
            flags={"outdoor": True},
            suppliers=["Acme"],
            filters={"dimmable": False},
        ) == ["P3"]

    def test_boolean_filter(self, snapshot: IndexSnapshot) -> None:
        """Boolean filters accept bools and yes/no strings."""
        assert ids(snapshot, filters={"dimmable": True}) == ["P1", "P4"]
        assert ids(snapshot, filters={"dimmable": "no"}) == ["P2", "P3"]

    def test_numeric_range(self, snapshot: IndexSnapshot) -> None:
        """Numeric ranges are inclusive."""
        assert ids(snapshot, filters={"power": {"min": 10, "max": 20}}) == ["P2", "P3"]
        assert ids(snapshot, filters={"power": {"min": 13, "max": 20}}) == ["P3"]
        assert ids(snapshot, filters={"power": [8, 8]}) == ["P1"]

    def test_half_open_range(self, snapshot: IndexSnapshot) -> None:
        """An absent bound is unconstrained."""
        assert ids(snapshot, filters={"power": {"max": 10}}) == ["P1"]
        assert ids(snapshot, filters={"power": {"min": 15}}) == ["P3", "P4"]
        assert ids(snapshot, filters={"power": [None, 10]}) == ["P1"]

    def test_empty_range_is_no_constraint(self, snapshot: IndexSnapshot) -> None:
        """A range without bounds does not restrict the result."""
        assert len(ids(snapshot, filters={"power": {}})) == 6
        assert len(ids(snapshot, filters={"power": {"min": None, "max": ""}})) == 6

    def test_inverted_range_is_swapped(self, snapshot: IndexSnapshot) -> None:
        """min > max is treated as the swapped range."""
        assert ids(snapshot, filters={"power": {"min": 20, "max": 10}}) == ["P2", "P3"]

    def test_empty_categorical_list_is_no_constraint(self, snapshot: IndexSnapshot) -> None:
        """An empty selection does not restrict the result."""
        assert len(ids(snapshot, filters={"ip": []})) == 6

    def test_unknown_filter_key_is_ignored(self, snapshot: IndexSnapshot) -> None:
        """Unknown filter keys do not restrict the result."""
        assert len(ids(snapshot, filters={"nope": "x"})) == 6

    @pytest.mark.parametrize(
        "filters",
        [
            {"ip": 65},
            {"ip": ["IP65", 44]},
            {"power": "ten"},
            {"power": {"min": "abc"}},
            {"power": [1, 2, 3]},
            {"dimmable": "maybe"},
            {"dimmable": 1},
        ],
    )
    def test_invalid_filter_value(self, snapshot: IndexSnapshot, filters: dict[str, Any]) -> None:
        """A value of the wrong shape is rejected."""
        with pytest.raises(InvalidFilterValueError):
            count(snapshot, QueryContext.create(filters=filters))


class TestTextQuery:
    """Tests for free-text matching and tiers."""

    def test_substring(self, snapshot: IndexSnapshot) -> None:
        """Products containing the phrase match."""
        result = search(snapshot, QueryContext.create(query_text="downlight"))
        assert result.product_ids == ["P1", "P2"]
        assert {hit.tier for hit in result.hits} == {TIER_SUBSTRING}

    def test_exact_match_ranks_first(self, snapshot: IndexSnapshot) -> None:
        """The exact name ranks in the exact tier."""
        result = search(snapshot, QueryContext.create(query_text="WALL washer"))
        assert result.product_ids == ["P3"]
        assert result.hits[0].tier == TIER_EXACT

    def test_id_match(self, snapshot: IndexSnapshot) -> None:
        """A product id is matched exactly."""
        result = search(snapshot, QueryContext.create(query_text="p4"))
        assert result.product_ids[0] == "P4"
        assert result.hits[0].tier == TIER_EXACT

    def test_prefix(self, snapshot: IndexSnapshot) -> None:
        """Names starting with the query are in the prefix tier."""
        result = search(snapshot, QueryContext.create(query_text="led"))
        assert result.product_ids == ["P4"]
        assert result.hits[0].tier == TIER_PREFIX

    def test_all_terms_must_match(self, snapshot: IndexSnapshot) -> None:
        """Every term must occur; the phrase need not."""
        result = search(snapshot, QueryContext.create(query_text="outdoor light"))
        assert result.product_ids == ["P2", "P3"]
        assert {hit.tier for hit in result.hits} == {TIER_TERMS}
        assert search(snapshot, QueryContext.create(query_text="outdoor pendant")).total == 0

    def test_tiers_order_results(self, config: ConfigSnapshot) -> None:
        """Better tiers rank before worse ones regardless of id."""
        lamps = build_snapshot(
            [
                Product(id="A1", description_short="Spare for table lamp"),
                Product(id="A2", description_short="Lamp holder"),
                Product(id="B1", description_short="Lamp"),
            ],
            config,
        )
        result = search(lamps, QueryContext.create(query_text="lamp"))
        assert result.product_ids == ["B1", "A2", "A1"]
        assert [hit.tier for hit in result.hits] == [TIER_EXACT, TIER_PREFIX, TIER_SUBSTRING]

    def test_blank_query_matches_everything(self, snapshot: IndexSnapshot) -> None:
        """A blank query imposes no text constraint."""
        assert search(snapshot, QueryContext.create(query_text="   ")).total == 6


class TestSortingAndPaging:
    """Tests for ordering and pagination."""

    def test_price_ascending_missing_last(self, snapshot: IndexSnapshot) -> None:
        """Cheapest first; products without a price last."""
        assert ids(snapshot, SortMode.PRICE_ASC) == ["P6", "P4", "P1", "P2", "P5", "P3"]

    def test_price_descending_missing_last(self, snapshot: IndexSnapshot) -> None:
        """Most expensive first; products without a price still last."""
        assert ids(snapshot, SortMode.PRICE_DESC) == ["P5", "P2", "P1", "P4", "P6", "P3"]

    def test_name(self, snapshot: IndexSnapshot) -> None:
        """Name sort is case-insensitive on the short description."""
        assert ids(snapshot, SortMode.NAME) == ["P4", "P6", "P5", "P1", "P2", "P3"]

    def test_price_overrides_text_relevance(self, snapshot: IndexSnapshot) -> None:
        """An explicit sort replaces tier order."""
        assert ids(snapshot, SortMode.PRICE_DESC, query_text="downlight") == ["P2", "P1"]

    def test_pagination(self, snapshot: IndexSnapshot) -> None:
        """Pages slice the ranked list and report has_more."""
        first = search(snapshot, QueryContext(), page=PageRequest(offset=0, limit=2))
        last = search(snapshot, QueryContext(), page=PageRequest(offset=4, limit=2))
        beyond = search(snapshot, QueryContext(), page=PageRequest(offset=10, limit=2))

        assert first.product_ids == ["P1", "P2"]
        assert first.total == 6
        assert first.has_more
        assert last.product_ids == ["P5", "P6"]
        assert not last.has_more
        assert beyond.product_ids == []
        assert beyond.total == 6

    def test_sorted_pagination(self, snapshot: IndexSnapshot) -> None:
        """Pages of a sorted result follow the sort order."""
        page = search(snapshot, QueryContext(), sort=SortMode.PRICE_ASC, page=PageRequest(offset=1, limit=2))
        assert page.product_ids == ["P4", "P1"]

    def test_default_page_size(self, snapshot: IndexSnapshot) -> None:
        """Without a page request the first page is returned."""
        result = search(snapshot, QueryContext())
        assert result.limit == 24
        assert len(result.hits) == 6

    def test_hits_carry_assignment(self, snapshot: IndexSnapshot) -> None:
        """Each hit carries the product's taxonomy assignment."""
        hit = search(snapshot, QueryContext.create(taxonomy_codes=["DRV"])).hits[0]
        assert hit.product.id == "P4"
        assert hit.assignment.codes == frozenset({"DRV"})
