"""SQLAlchemy models for the catalog and the search configuration.

Defines the products table read by the catalog source and the three
configuration tables read by the configuration store. The search index
itself is never persisted; it is rebuilt from these tables.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from facetsearch.domain.entities import (
    ClassificationRule,
    FilterDefinition,
    Product,
    TaxonomyNode,
)
from facetsearch.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductModel(Base):
    """Product row supplied by the catalog import pipeline.

    Attributes:
        id: Product identifier.
        group_code: ETIM group of the product class.
        class_code: ETIM class of the product.
        class_name: Class display name.
        attributes: Technical attribute code -> raw value (JSON).
        description_short: Short description.
        description_long: Long description.
        supplier: Supplier name.
        price: Price in major currency units.
        image_url: Product image URL.
        active: Whether the product belongs to an active catalog.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    group_code: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    class_code: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    class_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    attributes: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    description_short: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    description_long: Mapped[str | None] = mapped_column(Text, nullable=True)
    supplier: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, class={self.class_code})>"

    def to_domain(self) -> Product:
        """Convert to a domain product."""
        return Product(
            id=self.id,
            group_code=self.group_code,
            class_code=self.class_code,
            class_name=self.class_name,
            attributes=self.attributes or {},
            description_short=self.description_short or "",
            description_long=self.description_long or "",
            supplier=self.supplier,
            price=self.price,
            image_url=self.image_url,
        )


class TaxonomyNodeModel(Base):
    """Taxonomy configuration row."""

    __tablename__ = "search_taxonomy"

    code: Mapped[str] = mapped_column(String(100), primary_key=True)
    parent_code: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> TaxonomyNode:
        """Convert to a domain taxonomy node."""
        return TaxonomyNode(
            code=self.code,
            parent_code=self.parent_code,
            level=self.level,
            name=self.name,
            description=self.description,
            display_order=self.display_order,
            active=self.active,
        )


class ClassificationRuleModel(Base):
    """Classification rule configuration row.

    Group and class ids and attribute conditions are stored as JSON so
    the table works on any SQLAlchemy backend.
    """

    __tablename__ = "search_classification_rules"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    taxonomy_code: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    flag_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    group_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    class_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    attribute_conditions: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    text_pattern: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=100, index=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> ClassificationRule:
        """Convert to a domain classification rule."""
        return ClassificationRule.from_dict(
            {
                "name": self.name,
                "description": self.description,
                "taxonomy_code": self.taxonomy_code,
                "flag_name": self.flag_name,
                "group_ids": self.group_ids,
                "class_ids": self.class_ids,
                "attribute_conditions": self.attribute_conditions,
                "text_pattern": self.text_pattern,
                "priority": self.priority,
                "active": self.active,
            }
        )


class FilterDefinitionModel(Base):
    """Filter definition configuration row."""

    __tablename__ = "search_filter_definitions"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    source_attribute: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    applicable_taxonomy_codes: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="other")
    unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> FilterDefinition:
        """Convert to a domain filter definition."""
        return FilterDefinition.from_dict(
            {
                "key": self.key,
                "label": self.label,
                "kind": self.kind,
                "source_attribute": self.source_attribute,
                "applicable_taxonomy_codes": self.applicable_taxonomy_codes,
                "category": self.category,
                "unit": self.unit,
                "display_order": self.display_order,
                "active": self.active,
            }
        )
