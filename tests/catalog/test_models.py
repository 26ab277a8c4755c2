"""Tests for catalog table mappings and database-backed sources."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from facetsearch.catalog.models import (
    ClassificationRuleModel,
    FilterDefinitionModel,
    ProductModel,
    TaxonomyNodeModel,
)
from facetsearch.catalog.repository import (
    DatabaseCatalogSource,
    DatabaseConfigurationStore,
    _attribute_to_json,
)
from facetsearch.domain.exceptions import CatalogSourceError, ConfigurationError
from facetsearch.domain.value_objects import AttributeValue, ValueKind


class UnreachableSession:
    """Session factory result whose connection always fails."""

    async def __aenter__(self) -> "UnreachableSession":
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def __aexit__(self, *args) -> None:
        return None


class TestModelConversion:
    """Tests for row to domain conversion."""

    def test_product_row(self) -> None:
        """Product rows become domain products with parsed attributes."""
        row = ProductModel(
            id="P1",
            class_code="EC001744",
            attributes={"EF003118": {"label": "IP65"}, "EF009347": {"range": [10, 20]}},
            description_short="Downlight",
            description_long=None,
            supplier="Acme",
            price=Decimal("12.50"),
        )

        product = row.to_domain()

        assert product.id == "P1"
        assert product.attributes["EF003118"].label == "IP65"
        assert product.attributes["EF009347"].has_range
        assert product.description_long == ""
        assert product.price == Decimal("12.50")

    def test_taxonomy_row(self) -> None:
        """Taxonomy rows keep their tree fields."""
        node = TaxonomyNodeModel(
            code="LUM_CEIL", parent_code="LUM", level=2, name="Ceiling", display_order=10, active=True
        ).to_domain()
        assert (node.code, node.parent_code, node.level) == ("LUM_CEIL", "LUM", 2)

    def test_rule_row(self) -> None:
        """Rule rows parse their JSON columns."""
        rule = ClassificationRuleModel(
            name="ceiling",
            taxonomy_code="LUM_CEIL",
            class_ids=["EC001744"],
            attribute_conditions=[{"attribute": "EF021180", "operator": "equals", "value": True}],
            priority=30,
            active=True,
        ).to_domain()
        assert rule.class_ids == ("EC001744",)
        assert rule.attribute_conditions[0].operator == "equals"

    def test_filter_row(self) -> None:
        """Filter rows resolve their kind."""
        definition = FilterDefinitionModel(
            key="power",
            label="Power",
            kind="numeric_range",
            source_attribute="EF009347",
            category="electricals",
            display_order=20,
            active=True,
        ).to_domain()
        assert definition.kind is ValueKind.NUMERIC_RANGE
        assert definition.applicable_taxonomy_codes is None


class TestAttributeJson:
    """Tests for attribute serialization."""

    @pytest.mark.parametrize(
        "raw",
        [True, 12.5, "IP65", [15, 20], {"code": "EV000001", "label": "Black"}],
    )
    def test_serialized_value_parses_back(self, raw) -> None:
        """Stored JSON parses to the same attribute value."""
        value = AttributeValue.parse(raw)
        assert AttributeValue.parse(_attribute_to_json(value)) == value

    def test_empty_parts_are_omitted(self) -> None:
        """Only present representations are stored."""
        assert _attribute_to_json(AttributeValue.parse("IP65")) == {"label": "IP65"}


class TestDatabaseSources:
    """Tests for error mapping of database-backed collaborators."""

    @pytest.mark.asyncio
    async def test_catalog_unreachable(self) -> None:
        """A database failure becomes a catalog source error."""
        with pytest.raises(CatalogSourceError):
            await DatabaseCatalogSource(UnreachableSession).fetch_products()

    @pytest.mark.asyncio
    async def test_configuration_unreachable(self) -> None:
        """A database failure becomes a configuration error."""
        with pytest.raises(ConfigurationError):
            await DatabaseConfigurationStore(UnreachableSession).load_snapshot()
