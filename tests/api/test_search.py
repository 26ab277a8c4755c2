"""Tests for search API endpoints."""

from fastapi.testclient import TestClient


class TestSearchEndpoint:
    """Tests for POST /search."""

    def test_search_all(self, client: TestClient) -> None:
        """An empty request returns the first page in id order."""
        response = client.post("/search", json={})

        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data["items"]] == ["P1", "P2", "P3", "P4", "P5", "P6"]
        assert data["total"] == 6
        assert data["has_more"] is False

    def test_product_fields(self, client: TestClient) -> None:
        """Items carry product data, taxonomy codes and flags."""
        response = client.post("/search", json={"query": "recessed downlight 8w"})

        item = response.json()["items"][0]
        assert item["id"] == "P1"
        assert item["name"] == "Recessed Downlight 8W"
        assert item["price"] == 25.0
        assert item["taxonomy_codes"] == ["LUM", "LUM_CEIL", "LUM_CEIL_REC"]
        assert item["flags"] == {"ceiling": True, "luminaire": True, "outdoor": False}
        assert item["match_tier"] == 0

    def test_filters_flags_and_taxonomy(self, client: TestClient) -> None:
        """Predicates combine as in the query engine."""
        response = client.post(
            "/search",
            json={
                "taxonomy_codes": ["LUM"],
                "flags": {"outdoor": True},
                "filters": {"power": {"min": 10, "max": 20}, "ip": ["IP44"]},
            },
        )

        assert response.status_code == 200
        assert [item["id"] for item in response.json()["items"]] == ["P3"]

    def test_sort_and_paginate(self, client: TestClient) -> None:
        """Sort and page parameters are applied."""
        response = client.post("/search", json={"sort": "price_asc", "offset": 1, "limit": 2})

        data = response.json()
        assert [item["id"] for item in data["items"]] == ["P4", "P1"]
        assert data["has_more"] is True
        assert data["limit"] == 2

    def test_invalid_filter_value(self, client: TestClient) -> None:
        """A malformed structured value returns 422 with the error envelope."""
        response = client.post("/search", json={"filters": {"power": "lots"}})

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "INVALID_FILTER_VALUE"
        assert {"field": "filter_key", "message": "power"} in data["details"]
        assert data["request_id"] == response.headers["X-Request-ID"]

    def test_flag_logical_spelling(self, client: TestClient) -> None:
        """Flags accept yes/no spellings like boolean filters."""
        as_word = client.post("/search", json={"flags": {"outdoor": "yes"}})
        as_bool = client.post("/search", json={"flags": {"outdoor": True}})

        assert as_word.status_code == 200
        assert as_word.json()["items"] == as_bool.json()["items"]
        assert as_word.json()["total"] == 2

    def test_invalid_flag_value(self, client: TestClient) -> None:
        """An unrecognised flag value returns 422 instead of failing the request."""
        response = client.post("/search", json={"flags": {"outdoor": "maybe"}})

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "INVALID_FILTER_VALUE"
        assert {"field": "filter_key", "message": "outdoor"} in data["details"]

    def test_invalid_sort(self, client: TestClient) -> None:
        """An unknown sort mode fails request validation."""
        response = client.post("/search", json={"sort": "random"})
        assert response.status_code == 422

    def test_not_ready(self, empty_client: TestClient) -> None:
        """Without an index the API says so instead of returning no results."""
        response = empty_client.post("/search", json={})

        assert response.status_code == 503
        assert response.json()["error_code"] == "INDEX_NOT_READY"


class TestCountEndpoint:
    """Tests for POST /search/count."""

    def test_count(self, client: TestClient) -> None:
        """Count matches the search total."""
        body = {"suppliers": ["Acme"], "filters": {"dimmable": False}}
        count = client.post("/search/count", json=body).json()["count"]
        search = client.post("/search", json=body).json()

        assert count == search["total"] == 1

    def test_invalid_flag_value(self, client: TestClient) -> None:
        """Count rejects unrecognised flag values with 422."""
        response = client.post("/search/count", json={"flags": {"outdoor": "maybe"}})

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_FILTER_VALUE"

    def test_not_ready(self, empty_client: TestClient) -> None:
        """Count requires an index."""
        assert empty_client.post("/search/count", json={}).status_code == 503


class TestFacetsEndpoint:
    """Tests for POST /search/facets."""

    def test_facets(self, client: TestClient) -> None:
        """Facets, flag facets and flat rows are returned."""
        response = client.post("/search/facets", json={"filters": {"ip": "IP65"}})

        assert response.status_code == 200
        data = response.json()
        ip = next(f for f in data["facets"] if f["key"] == "ip")
        assert ip["values"][0] == {"value": "IP65", "count": 2, "selected": True}
        assert {"name": "outdoor", "true_count": 1, "false_count": 1, "requirement": None} in data["flags"]
        assert {"filter_key": "ip", "value": "IP20", "count": 1, "min": None, "max": None} in data["rows"]

    def test_numeric_facet(self, client: TestClient) -> None:
        """Numeric facets report range and histogram."""
        data = client.post("/search/facets", json={"taxonomy_codes": ["DRV"]}).json()

        voltage = next(f for f in data["facets"] if f["key"] == "voltage")
        assert voltage["min"] == 24.0
        assert voltage["histogram"] == [{"label": "24-24", "min": 24.0, "max": 24.0, "count": 1}]
        assert [f["key"] for f in data["facets"]] == ["power", "dimmable", "voltage"]

    def test_boolean_facet_values(self, client: TestClient) -> None:
        """Boolean facet values are serialized as booleans."""
        data = client.post("/search/facets", json={}).json()

        dimmable = next(f for f in data["facets"] if f["key"] == "dimmable")
        assert [v["value"] for v in dimmable["values"]] == [False, True]


class TestTaxonomyAndStatistics:
    """Tests for GET /taxonomy and GET /statistics."""

    def test_taxonomy(self, client: TestClient) -> None:
        """Nodes are listed with product counts."""
        response = client.get("/taxonomy")

        assert response.status_code == 200
        nodes = {n["code"]: n for n in response.json()}
        assert nodes["LUM"]["product_count"] == 4
        assert nodes["LUM_CEIL_REC"]["parent_code"] == "LUM_CEIL"
        assert nodes["ACC"]["product_count"] == 0

    def test_statistics(self, client: TestClient) -> None:
        """Counters are listed by name."""
        response = client.get("/statistics")

        assert response.status_code == 200
        stats = {s["name"]: s["value"] for s in response.json()}
        assert stats["total_products"] == 6
        assert stats["unclassified_products"] == 1
        assert stats["outdoor_products"] == 2

    def test_not_ready(self, empty_client: TestClient) -> None:
        """Both require an index."""
        assert empty_client.get("/taxonomy").status_code == 503
        assert empty_client.get("/statistics").status_code == 503
