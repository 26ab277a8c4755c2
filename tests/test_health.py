"""Tests for health check endpoints."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from facetsearch.application.search_service import SearchService, get_search_service
from facetsearch.catalog.config_store import ConfigSnapshot, StaticConfigurationStore
from facetsearch.catalog.source import InMemoryCatalogSource
from facetsearch.domain.entities import Product
from facetsearch.main import app


@pytest.fixture
def service(config: ConfigSnapshot, products: list[Product]) -> Iterator[SearchService]:
    """Search service wired into the app."""
    service = SearchService(StaticConfigurationStore(config), InMemoryCatalogSource(products))
    app.dependency_overrides[get_search_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


@pytest.fixture
def client(service: SearchService) -> TestClient:
    """Create test client."""
    return TestClient(app)


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "facetsearch"
    assert "version" in data


def test_readiness_before_rebuild(client: TestClient) -> None:
    """Test readiness endpoint reports not ready without an index."""
    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json() == {"status": "not_ready", "generation": 0, "rebuilding": False}


def test_readiness_after_rebuild(client: TestClient) -> None:
    """Test readiness endpoint returns ready once an index is serving."""
    client.post("/admin/rebuild")
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["generation"] == 1
