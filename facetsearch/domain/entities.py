"""Domain entities and configuration records.

Products come from the catalog source; taxonomy nodes, classification
rules and filter definitions come from the configuration store. All of
them are immutable for the duration of one rebuild cycle.

Derived records (TaxonomyAssignment, FilterIndexEntry) are produced in
bulk by a rebuild and never mutated afterwards.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from facetsearch.domain.base import Entity, ValueObject
from facetsearch.domain.value_objects import AttributeValue, ConditionOperator, ValueKind


def _parse_attributes(raw: Mapping[str, Any] | None) -> dict[str, AttributeValue]:
    return {str(code): AttributeValue.parse(value) for code, value in (raw or {}).items()}


def _tuple_or_none(values: Any) -> tuple[str, ...] | None:
    if values is None:
        return None
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


# ============================================================================
# Catalog
# ============================================================================


@dataclass(frozen=True, eq=False)
class Product(Entity[str]):
    """Product record supplied by the catalog source.

    Attributes:
        id: Product identifier (also the natural sort key).
        group_code: Attribute group the product's class belongs to.
        class_code: Classification code of the product.
        class_name: Human-readable class name.
        attributes: Technical attribute code -> parsed raw value.
        description_short: Short description (used as display name).
        description_long: Long description.
        supplier: Supplier name.
        price: Price in major currency units, if known.
        image_url: Product image reference.
    """

    group_code: str | None = None
    class_code: str | None = None
    class_name: str | None = None
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    description_short: str = ""
    description_long: str = ""
    supplier: str | None = None
    price: Decimal | None = None
    image_url: str | None = None

    def __post_init__(self) -> None:
        """Parse raw attribute values and normalize the price."""
        object.__setattr__(self, "attributes", _parse_attributes(self.attributes))
        if self.price is not None and not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a product from a catalog record.

        Args:
            data: Mapping with the product fields.

        Returns:
            Product instance.
        """
        return cls(
            id=str(data["id"]),
            group_code=data.get("group_code"),
            class_code=data.get("class_code"),
            class_name=data.get("class_name"),
            attributes=data.get("attributes") or {},
            description_short=data.get("description_short") or "",
            description_long=data.get("description_long") or "",
            supplier=data.get("supplier"),
            price=data.get("price"),
            image_url=data.get("image_url"),
        )

    @property
    def descriptive_texts(self) -> tuple[str, str]:
        """Descriptive fields used by text-pattern rules."""
        return (self.description_short, self.description_long)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "group_code": self.group_code,
            "class_code": self.class_code,
            "class_name": self.class_name,
            "description_short": self.description_short,
            "description_long": self.description_long,
            "supplier": self.supplier,
            "price": float(self.price) if self.price is not None else None,
            "image_url": self.image_url,
        }


# ============================================================================
# Configuration
# ============================================================================


@dataclass(frozen=True)
class TaxonomyNode(ValueObject):
    """Node of the human-facing category hierarchy.

    Attributes:
        code: Unique taxonomy code (e.g., "LUM_CEIL").
        parent_code: Code of the parent node (None for a root).
        level: Depth in the tree as configured.
        name: Display name.
        description: Optional description.
        display_order: Sort order among siblings.
        active: Inactive nodes are ignored by rebuilds.
    """

    code: str
    parent_code: str | None = None
    level: int = 0
    name: str = ""
    description: str | None = None
    display_order: int = 0
    active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a node from a configuration record."""
        return cls(
            code=str(data["code"]),
            parent_code=data.get("parent_code"),
            level=int(data.get("level", 0)),
            name=data.get("name") or str(data["code"]),
            description=data.get("description"),
            display_order=int(data.get("display_order", 0)),
            active=bool(data.get("active", True)),
        )


@dataclass(frozen=True)
class AttributeCondition(ValueObject):
    """Condition on one technical attribute of a product.

    The operator is kept as a raw string so that a misconfigured rule can
    be reported by the classifier instead of failing to load.

    Attributes:
        attribute: Technical attribute code.
        operator: One of ConditionOperator values.
        value: Expected value for equals/contains/greater_than/less_than.
        minimum: Lower bound for in_range.
        maximum: Upper bound for in_range.
    """

    attribute: str
    operator: str = ConditionOperator.EXISTS.value
    value: Any = None
    minimum: Any = None
    maximum: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a condition from a configuration record."""
        return cls(
            attribute=str(data["attribute"]),
            operator=str(data.get("operator", ConditionOperator.EXISTS.value)),
            value=data.get("value"),
            minimum=data.get("min", data.get("minimum")),
            maximum=data.get("max", data.get("maximum")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "attribute": self.attribute,
            "operator": self.operator,
            "value": self.value,
            "min": self.minimum,
            "max": self.maximum,
        }


@dataclass(frozen=True)
class ClassificationRule(ValueObject):
    """Data-driven classification rule.

    Every predicate the rule specifies must hold for the rule to match.
    A matching rule contributes its taxonomy code and/or sets its flag.

    Attributes:
        name: Unique rule name.
        taxonomy_code: Code added to matching products (optional).
        flag_name: Flag set true on matching products (optional).
        group_ids: Product group code must be one of these.
        class_ids: Product class code must be one of these.
        attribute_conditions: Conditions on technical attributes.
        text_pattern: Case-insensitive regex over descriptive fields.
        priority: Evaluation order, lower first.
        active: Inactive rules are not evaluated.
        description: Free-text description for operators.
    """

    name: str
    taxonomy_code: str | None = None
    flag_name: str | None = None
    group_ids: tuple[str, ...] | None = None
    class_ids: tuple[str, ...] | None = None
    attribute_conditions: tuple[AttributeCondition, ...] = ()
    text_pattern: str | None = None
    priority: int = 100
    active: bool = True
    description: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a rule from a configuration record."""
        return cls(
            name=str(data["name"]),
            taxonomy_code=data.get("taxonomy_code"),
            flag_name=data.get("flag_name"),
            group_ids=_tuple_or_none(data.get("group_ids")),
            class_ids=_tuple_or_none(data.get("class_ids")),
            attribute_conditions=tuple(
                AttributeCondition.from_dict(c) for c in data.get("attribute_conditions") or ()
            ),
            text_pattern=data.get("text_pattern"),
            priority=int(data.get("priority", 100)),
            active=bool(data.get("active", True)),
            description=data.get("description"),
        )

    @property
    def has_predicate(self) -> bool:
        """Whether the rule specifies at least one match predicate."""
        return bool(
            self.group_ids
            or self.class_ids
            or self.attribute_conditions
            or self.text_pattern
        )


@dataclass(frozen=True)
class FilterDefinition(ValueObject):
    """Definition of one filterable attribute.

    Attributes:
        key: Unique filter key used in queries (e.g., "ip").
        label: Display label.
        kind: Value kind (boolean, categorical, numeric_range).
        source_attribute: Technical attribute code the values come from.
        applicable_taxonomy_codes: Restrict facet visibility to these
            subtrees (None = universal).
        active: Inactive definitions are neither indexed nor queried.
        category: UI grouping (e.g., "electricals").
        unit: Unit for numeric filters.
        display_order: Order in the filter panel.
    """

    key: str
    label: str
    kind: ValueKind
    source_attribute: str
    applicable_taxonomy_codes: tuple[str, ...] | None = None
    active: bool = True
    category: str = "other"
    unit: str | None = None
    display_order: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        """Build a filter definition from a configuration record."""
        return cls(
            key=str(data["key"]),
            label=data.get("label") or str(data["key"]),
            kind=ValueKind(data["kind"]),
            source_attribute=str(data["source_attribute"]),
            applicable_taxonomy_codes=_tuple_or_none(data.get("applicable_taxonomy_codes")),
            active=bool(data.get("active", True)),
            category=data.get("category") or "other",
            unit=data.get("unit"),
            display_order=int(data.get("display_order", 0)),
        )


# ============================================================================
# Derived Records
# ============================================================================


@dataclass(frozen=True)
class TaxonomyAssignment(ValueObject):
    """Classification result for one product.

    Attributes:
        product_id: Classified product.
        codes: Taxonomy codes the product belongs to.
        flags: Flag name -> value for every flag the rule set can set.
    """

    product_id: str
    codes: frozenset[str] = frozenset()
    flags: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Copy the flag map in key order."""
        object.__setattr__(self, "flags", dict(sorted(self.flags.items())))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaxonomyAssignment):
            return NotImplemented
        return (
            self.product_id == other.product_id
            and self.codes == other.codes
            and dict(self.flags) == dict(other.flags)
        )

    def __hash__(self) -> int:
        return hash((self.product_id, self.codes, tuple(self.flags.items())))

    @property
    def unclassified(self) -> bool:
        """Whether no rule contributed a taxonomy code."""
        return not self.codes


@dataclass(frozen=True)
class FilterIndexEntry(ValueObject):
    """One typed filter value for a (product, filter key) pair."""

    product_id: str
    filter_key: str
    value: bool | str | float
