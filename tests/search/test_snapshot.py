"""Tests for the index rebuild."""

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.domain.entities import Product
from facetsearch.search.classifier import Classifier
from facetsearch.search.snapshot import IndexSnapshot, build_snapshot, process_chunk


def fingerprint(snapshot: IndexSnapshot) -> tuple:
    return (
        snapshot.product_ids,
        snapshot.assignments,
        snapshot.entries(),
        snapshot.taxonomy_postings,
        snapshot.flag_postings,
    )


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    def test_products_in_id_order(self, products: list[Product], config: ConfigSnapshot) -> None:
        """Products are stored in id order regardless of input order."""
        snapshot = build_snapshot(reversed(products), config)
        assert snapshot.product_ids == ("P1", "P2", "P3", "P4", "P5", "P6")

    def test_rebuild_is_idempotent(self, products: list[Product], config: ConfigSnapshot) -> None:
        """Two rebuilds over the same inputs produce identical snapshots."""
        first = build_snapshot(products, config, generation=1)
        second = build_snapshot(products, config, generation=2)
        assert fingerprint(first) == fingerprint(second)

    def test_parallel_matches_inline(self, products: list[Product], config: ConfigSnapshot) -> None:
        """Worker processes produce the same snapshot as inline work."""
        inline = build_snapshot(products, config, workers=1, chunk_size=2)
        parallel = build_snapshot(products, config, workers=2, chunk_size=2)
        assert fingerprint(inline) == fingerprint(parallel)
        assert parallel.report.workers == 2

    def test_duplicate_ids_keep_first(self, products: list[Product], config: ConfigSnapshot) -> None:
        """A repeated id is indexed once, keeping the first record."""
        duplicate = Product(id="P1", description_short="Impostor")
        snapshot = build_snapshot([*products, duplicate], config)
        assert snapshot.size == 6
        assert snapshot.get_product("P1").description_short == "Recessed Downlight 8W"

    def test_empty_catalog(self, config: ConfigSnapshot) -> None:
        """An empty catalog builds an empty, queryable snapshot."""
        snapshot = build_snapshot([], config)
        assert snapshot.size == 0
        assert snapshot.entry_count == 0
        assert snapshot.unclassified_count == 0
        assert snapshot.report.status == "completed"

    def test_postings(self, snapshot: IndexSnapshot) -> None:
        """Per-code and per-flag counts."""
        assert snapshot.count_in_taxonomy("LUM") == 4
        assert snapshot.count_in_taxonomy("LUM_CEIL") == 2
        assert snapshot.count_in_taxonomy("LUM_CEIL_REC") == 1
        assert snapshot.count_in_taxonomy("DRV") == 1
        assert snapshot.count_in_taxonomy("ACC") == 0
        assert snapshot.count_with_flag("luminaire") == 4
        assert snapshot.count_with_flag("unknown") == 0
        assert snapshot.unclassified_count == 1

    def test_lookups(self, snapshot: IndexSnapshot) -> None:
        """Products and assignments are addressable by id."""
        assert snapshot.get_product("P4").supplier == "Lumex"
        assert snapshot.get_assignment("P6").unclassified
        assert snapshot.get_product("NOPE") is None
        assert snapshot.get_assignment("NOPE") is None

    def test_report(self, products: list[Product], config_data: dict) -> None:
        """The report records counts and skipped rules."""
        config_data["rules"].append({"name": "broken", "taxonomy_code": "NOPE", "group_ids": ["G"]})
        snapshot = build_snapshot(products, ConfigSnapshot.from_dict(config_data, source="test"), generation=3)
        report = snapshot.report.to_dict()

        assert report["generation"] == 3
        assert report["status"] == "completed"
        assert report["config_source"] == "test"
        assert report["product_count"] == 6
        assert report["unclassified_count"] == 1
        assert report["entry_count"] == 15
        assert [r["rule_name"] for r in report["skipped_rules"]] == ["broken"]
        assert report["finished_at"] is not None
        assert report["error"] is None


class TestProcessChunk:
    """Tests for per-product work units."""

    def test_results_in_input_order(self, products: list[Product], config: ConfigSnapshot) -> None:
        """One result per product, in input order."""
        results = process_chunk(Classifier.from_config(config), config.active_filters, products[3:5])
        assert [a.codes for a, _ in results] == [frozenset({"DRV"}), frozenset({"LUM"})]
        assert results[1][1] == [("ip", "IP20")]
