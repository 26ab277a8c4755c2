"""Repositories for catalog and configuration tables.

Provides async read access for the rebuild (catalog source and
configuration store backed by the database) and bulk write access for
the seed script.
"""

from collections.abc import Callable, Sequence

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facetsearch.catalog.config_store import ConfigSnapshot, ConfigurationStore
from facetsearch.catalog.models import (
    ClassificationRuleModel,
    FilterDefinitionModel,
    ProductModel,
    TaxonomyNodeModel,
)
from facetsearch.catalog.source import CatalogSource
from facetsearch.domain.entities import Product
from facetsearch.domain.exceptions import CatalogSourceError, ConfigurationError

logger = structlog.get_logger()


class ProductRepository:
    """Repository for catalog product rows.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find_active()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save_all(self, products: Sequence[Product]) -> int:
        """Insert or update products.

        Args:
            products: Domain products to store.

        Returns:
            Number of stored products.
        """
        for product in products:
            await self.session.merge(
                ProductModel(
                    id=product.id,
                    group_code=product.group_code,
                    class_code=product.class_code,
                    class_name=product.class_name,
                    attributes={
                        code: _attribute_to_json(value)
                        for code, value in product.attributes.items()
                    },
                    description_short=product.description_short,
                    description_long=product.description_long,
                    supplier=product.supplier,
                    price=product.price,
                    image_url=product.image_url,
                    active=True,
                )
            )
        await self.session.flush()
        return len(products)

    async def find_active(self) -> list[Product]:
        """Get all products of active catalogs ordered by id.

        Returns:
            Domain products.
        """
        query = select(ProductModel).where(ProductModel.active.is_(True)).order_by(ProductModel.id)
        result = await self.session.execute(query)
        return [row.to_domain() for row in result.scalars().all()]

    async def count(self) -> int:
        """Count active products."""
        query = select(func.count(ProductModel.id)).where(ProductModel.active.is_(True))
        result = await self.session.execute(query)
        return result.scalar_one()

    async def delete_all(self) -> int:
        """Delete every product row.

        Returns:
            Number of deleted rows.
        """
        result = await self.session.execute(delete(ProductModel))
        await self.session.flush()
        return result.rowcount or 0


class ConfigurationRepository:
    """Repository for the three configuration tables."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def load_snapshot(self) -> ConfigSnapshot:
        """Read all configuration rows into a validated snapshot.

        Returns:
            Immutable configuration snapshot.
        """
        nodes = await self.session.execute(
            select(TaxonomyNodeModel).order_by(TaxonomyNodeModel.level, TaxonomyNodeModel.code)
        )
        rules = await self.session.execute(
            select(ClassificationRuleModel).order_by(
                ClassificationRuleModel.priority, ClassificationRuleModel.name
            )
        )
        filters = await self.session.execute(
            select(FilterDefinitionModel).order_by(
                FilterDefinitionModel.display_order, FilterDefinitionModel.key
            )
        )
        try:
            return ConfigSnapshot(
                taxonomy_nodes=[row.to_domain() for row in nodes.scalars().all()],
                rules=[row.to_domain() for row in rules.scalars().all()],
                filters=[row.to_domain() for row in filters.scalars().all()],
                source="database",
            )
        except ValueError as e:
            raise ConfigurationError(f"Malformed configuration row: {e}") from e

    async def replace_all(self, snapshot: ConfigSnapshot) -> dict[str, int]:
        """Replace all configuration rows with the contents of a snapshot.

        Args:
            snapshot: Configuration to store.

        Returns:
            Row counts per table.
        """
        await self.session.execute(delete(TaxonomyNodeModel))
        await self.session.execute(delete(ClassificationRuleModel))
        await self.session.execute(delete(FilterDefinitionModel))

        self.session.add_all(
            TaxonomyNodeModel(
                code=n.code,
                parent_code=n.parent_code,
                level=n.level,
                name=n.name,
                description=n.description,
                display_order=n.display_order,
                active=n.active,
            )
            for n in snapshot.taxonomy_nodes
        )
        self.session.add_all(
            ClassificationRuleModel(
                name=r.name,
                description=r.description,
                taxonomy_code=r.taxonomy_code,
                flag_name=r.flag_name,
                group_ids=list(r.group_ids) if r.group_ids is not None else None,
                class_ids=list(r.class_ids) if r.class_ids is not None else None,
                attribute_conditions=[c.to_dict() for c in r.attribute_conditions] or None,
                text_pattern=r.text_pattern,
                priority=r.priority,
                active=r.active,
            )
            for r in snapshot.rules
        )
        self.session.add_all(
            FilterDefinitionModel(
                key=f.key,
                label=f.label,
                kind=f.kind.value,
                source_attribute=f.source_attribute,
                applicable_taxonomy_codes=(
                    list(f.applicable_taxonomy_codes)
                    if f.applicable_taxonomy_codes is not None
                    else None
                ),
                category=f.category,
                unit=f.unit,
                display_order=f.display_order,
                active=f.active,
            )
            for f in snapshot.filters
        )
        await self.session.flush()
        return {
            "taxonomy_nodes": len(snapshot.taxonomy_nodes),
            "classification_rules": len(snapshot.rules),
            "filter_definitions": len(snapshot.filters),
        }


def _attribute_to_json(value) -> dict:
    return {
        k: v
        for k, v in {
            "numeric": value.numeric,
            "range": (
                [value.range_min, value.range_max]
                if value.range_min is not None or value.range_max is not None
                else None
            ),
            "boolean": value.boolean,
            "code": value.code,
            "label": value.label,
            "unit": value.unit,
        }.items()
        if v is not None
    }


# ============================================================================
# Database-backed collaborators
# ============================================================================


SessionFactory = Callable[[], AsyncSession]


class DatabaseCatalogSource(CatalogSource):
    """Catalog source reading the products table."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def fetch_products(self) -> list[Product]:
        try:
            async with self._session_factory() as session:
                return await ProductRepository(session).find_active()
        except SQLAlchemyError as e:
            logger.error("Catalog source unreachable", error=str(e))
            raise CatalogSourceError(f"Cannot read catalog: {e}") from e


class DatabaseConfigurationStore(ConfigurationStore):
    """Configuration store reading the configuration tables."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    async def load_snapshot(self) -> ConfigSnapshot:
        try:
            async with self._session_factory() as session:
                snapshot = await ConfigurationRepository(session).load_snapshot()
        except SQLAlchemyError as e:
            logger.error("Configuration store unreachable", error=str(e))
            raise ConfigurationError(f"Cannot read configuration: {e}") from e
        logger.info("Configuration loaded", **snapshot.to_dict())
        return snapshot
