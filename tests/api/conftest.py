"""Shared fixtures for API tests."""

import asyncio
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from facetsearch.application.search_service import SearchService, get_search_service
from facetsearch.catalog.config_store import ConfigSnapshot, StaticConfigurationStore
from facetsearch.catalog.source import InMemoryCatalogSource
from facetsearch.domain.entities import Product
from facetsearch.main import app


@pytest.fixture
def empty_service(config: ConfigSnapshot, products: list[Product]) -> SearchService:
    """Search service over the sample catalog before any rebuild."""
    return SearchService(StaticConfigurationStore(config), InMemoryCatalogSource(products))


@pytest.fixture
def ready_service(empty_service: SearchService) -> SearchService:
    """Search service with a serving index."""
    asyncio.run(empty_service.rebuild())
    return empty_service


def _client_for(service: SearchService) -> Iterator[TestClient]:
    app.dependency_overrides[get_search_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(ready_service: SearchService) -> Iterator[TestClient]:
    """Create test client against a ready index."""
    yield from _client_for(ready_service)


@pytest.fixture
def empty_client(empty_service: SearchService) -> Iterator[TestClient]:
    """Create test client against a service with no index yet."""
    yield from _client_for(empty_service)
