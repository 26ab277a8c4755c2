"""Tests for admin API endpoints."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from facetsearch.application.search_service import SearchService
from facetsearch.domain.exceptions import CatalogSourceError, RebuildInProgressError


class TestRebuildEndpoint:
    """Tests for POST/GET /admin/rebuild."""

    def test_no_report_before_first_rebuild(self, empty_client: TestClient) -> None:
        """No report exists before a rebuild was attempted."""
        response = empty_client.get("/admin/rebuild")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NO_REBUILD"

    def test_rebuild_makes_service_ready(self, empty_client: TestClient) -> None:
        """A rebuild builds the first snapshot and the service becomes ready."""
        assert empty_client.get("/ready").status_code == 503

        response = empty_client.post("/admin/rebuild")

        assert response.status_code == 200
        report = response.json()
        assert report["generation"] == 1
        assert report["status"] == "completed"
        assert report["product_count"] == 6
        assert report["unclassified_count"] == 1
        assert report["entry_count"] == 15
        assert report["skipped_rules"] == []

        assert empty_client.get("/ready").status_code == 200
        assert empty_client.get("/admin/rebuild").json()["generation"] == 1

    def test_rebuild_increments_generation(self, client: TestClient) -> None:
        """Each rebuild serves a new generation."""
        response = client.post("/admin/rebuild")

        assert response.json()["generation"] == 2
        assert client.get("/ready").json()["generation"] == 2

    def test_rebuild_in_progress(self, client: TestClient, ready_service: SearchService) -> None:
        """A concurrent rebuild is rejected with 409."""
        ready_service.rebuild = AsyncMock(
            side_effect=RebuildInProgressError("2026-10-18T09:00:00+00:00")
        )

        response = client.post("/admin/rebuild")

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "REBUILD_IN_PROGRESS"
        assert data["details"] == [{"field": "started_at", "message": "2026-10-18T09:00:00+00:00"}]

    def test_failed_rebuild_keeps_serving(
        self, client: TestClient, ready_service: SearchService
    ) -> None:
        """A failed rebuild returns 500 and queries keep working."""
        ready_service.catalog_source.fetch_products = AsyncMock(
            side_effect=CatalogSourceError("Catalog database unreachable")
        )

        response = client.post("/admin/rebuild")

        assert response.status_code == 500
        assert response.json()["error_code"] == "REBUILD_FAILED"
        report = client.get("/admin/rebuild").json()
        assert report["status"] == "failed"
        assert report["error"] == "Catalog database unreachable"
        assert client.post("/search/count", json={}).json()["count"] == 6
