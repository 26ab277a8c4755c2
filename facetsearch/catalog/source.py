"""Catalog source boundary.

The catalog import pipeline owns the product records; the search index
only reads them once per rebuild through a CatalogSource.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

import structlog

from facetsearch.catalog.generator import CatalogGenerator, GeneratorConfig
from facetsearch.domain.entities import Product

logger = structlog.get_logger()


class CatalogSource(ABC):
    """Read-only supplier of product records."""

    @abstractmethod
    async def fetch_products(self) -> list[Product]:
        """Fetch the full catalog snapshot.

        Returns:
            Products ordered by id.

        Raises:
            CatalogSourceError: If the catalog cannot be read.
        """


class InMemoryCatalogSource(CatalogSource):
    """Catalog source over a fixed list of products (tests, fixtures)."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products = sorted(products, key=lambda p: p.id)

    async def fetch_products(self) -> list[Product]:
        return list(self._products)


class GeneratedCatalogSource(CatalogSource):
    """Catalog source producing a deterministic generated catalog."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()

    async def fetch_products(self) -> list[Product]:
        products = CatalogGenerator(self.config).generate_all()
        logger.info(
            "Generated catalog",
            seed=self.config.seed,
            product_count=len(products),
        )
        return sorted(products, key=lambda p: p.id)
