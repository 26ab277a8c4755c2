"""Domain layer - Entities, configuration records, value objects, exceptions.

This module exports the core domain building blocks:

- **Entities**: Catalog products (identity by product id)
- **Configuration records**: Taxonomy nodes, classification rules, filter definitions
- **Derived records**: Taxonomy assignments and filter index entries
- **Value Objects**: Immutable attribute values, numeric ranges, page requests
- **Exceptions**: Domain-specific errors

Example usage:
    from facetsearch.domain import FilterDefinition, Product, ValueKind

    product = Product(id="P2", attributes={"IP_RATING": "IP65"})
    ip = FilterDefinition(
        key="ip",
        label="IP Rating",
        kind=ValueKind.CATEGORICAL,
        source_attribute="IP_RATING",
    )
"""

# Base classes
from facetsearch.domain.base import Entity, ValueObject

# Entities and configuration records
from facetsearch.domain.entities import (
    AttributeCondition,
    ClassificationRule,
    FilterDefinition,
    FilterIndexEntry,
    Product,
    TaxonomyAssignment,
    TaxonomyNode,
)

# Exceptions
from facetsearch.domain.exceptions import (
    CatalogSourceError,
    ConfigurationError,
    DomainError,
    DuplicateKeyError,
    IndexNotReadyError,
    InvalidFilterValueError,
    InvalidTaxonomyError,
    MalformedRuleError,
    RebuildInProgressError,
)

# Value Objects
from facetsearch.domain.value_objects import (
    AttributeValue,
    ConditionOperator,
    FlagRequirement,
    NumericRange,
    PageRequest,
    SortMode,
    ValueKind,
)

__all__ = [
    # Base
    "Entity",
    "ValueObject",
    # Entities
    "AttributeCondition",
    "ClassificationRule",
    "FilterDefinition",
    "FilterIndexEntry",
    "Product",
    "TaxonomyAssignment",
    "TaxonomyNode",
    # Exceptions
    "CatalogSourceError",
    "ConfigurationError",
    "DomainError",
    "DuplicateKeyError",
    "IndexNotReadyError",
    "InvalidFilterValueError",
    "InvalidTaxonomyError",
    "MalformedRuleError",
    "RebuildInProgressError",
    # Value Objects
    "AttributeValue",
    "ConditionOperator",
    "FlagRequirement",
    "NumericRange",
    "PageRequest",
    "SortMode",
    "ValueKind",
]
