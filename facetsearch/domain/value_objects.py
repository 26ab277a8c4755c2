"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Self

from facetsearch.domain.base import ValueObject
from facetsearch.domain.exceptions import InvalidFilterValueError


# ============================================================================
# Enumerations
# ============================================================================


class ValueKind(str, Enum):
    """Value kind of a filter definition."""

    BOOLEAN = "boolean"
    CATEGORICAL = "categorical"
    NUMERIC_RANGE = "numeric_range"


class ConditionOperator(str, Enum):
    """Operators usable in attribute conditions of classification rules."""

    EXISTS = "exists"
    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IN_RANGE = "in_range"


class FlagRequirement(str, Enum):
    """Tri-state requirement on a classifier flag."""

    REQUIRE_TRUE = "true"
    REQUIRE_FALSE = "false"
    IGNORE = "ignore"

    @classmethod
    def from_value(
        cls, value: "bool | str | FlagRequirement | None", name: str = "flag"
    ) -> "FlagRequirement":
        """Coerce a request value into a flag requirement.

        Args:
            value: None, "ignore", or any logical value accepted by parse_bool.
            name: Flag name reported when the value is rejected.

        Returns:
            Matching FlagRequirement.

        Raises:
            InvalidFilterValueError: If the value is not a logical value.
        """
        if isinstance(value, FlagRequirement):
            return value
        if value is None:
            return cls.IGNORE
        if isinstance(value, str) and value.strip().lower() == cls.IGNORE.value:
            return cls.IGNORE
        parsed = parse_bool(value)
        if parsed is None:
            raise InvalidFilterValueError(name, "flag", value)
        return cls.REQUIRE_TRUE if parsed else cls.REQUIRE_FALSE


class SortMode(str, Enum):
    """Result ordering for search."""

    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"


# ============================================================================
# Raw Attribute Values
# ============================================================================


_TRUE_STRINGS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "0", "off"})


def parse_bool(raw: Any) -> bool | None:
    """Parse a logical value from its catalog representation.

    Args:
        raw: Bool, 0/1 number or a yes/no style string.

    Returns:
        Parsed bool, or None when the value is not a logical value.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def parse_number(raw: Any) -> float | None:
    """Parse a finite number.

    Args:
        raw: int, float, Decimal or numeric string.

    Returns:
        Float value, or None when not a finite number.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float, Decimal)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(Decimal(raw.strip()))
        except (InvalidOperation, ValueError):
            return None
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


@dataclass(frozen=True)
class AttributeValue(ValueObject):
    """One technical attribute value of a product, as supplied by the catalog.

    A catalog attribute may carry any combination of a scalar, a range,
    a logical value and a discrete code/label. Conversion to a typed
    filter value happens in the filter index builder.

    Attributes:
        numeric: Scalar numeric value.
        range_min: Lower bound of a range value.
        range_max: Upper bound of a range value.
        boolean: Logical value (raw, unparsed).
        code: Discrete value code (e.g., "EV000123").
        label: Discrete value label (e.g., "IP65").
        unit: Unit abbreviation for numeric values.
    """

    numeric: Any = None
    range_min: Any = None
    range_max: Any = None
    boolean: Any = None
    code: str | None = None
    label: str | None = None
    unit: str | None = None

    @classmethod
    def parse(cls, raw: Any) -> Self:
        """Parse a semi-structured catalog value.

        Accepted shapes:
            True / False               -> boolean
            12.5                       -> numeric scalar
            "IP65"                     -> categorical label
            [10, 20] / (None, 20)      -> range
            {"numeric": .., "range": .., "boolean": .., "code": .., "label": ..}

        Args:
            raw: Raw value from the catalog attribute map.

        Returns:
            AttributeValue instance.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, bool):
            return cls(boolean=raw)
        if isinstance(raw, (int, float, Decimal)):
            return cls(numeric=raw)
        if isinstance(raw, str):
            return cls(label=raw)
        if isinstance(raw, (list, tuple)) and len(raw) == 2:
            return cls(range_min=raw[0], range_max=raw[1])
        if isinstance(raw, Mapping):
            range_min, range_max = cls._parse_range(raw.get("range"))
            boolean = raw.get("boolean")
            numeric = raw.get("numeric")
            value = raw.get("value")
            if isinstance(value, bool) and boolean is None:
                boolean = value
            elif value is not None and numeric is None:
                numeric = value
            return cls(
                numeric=numeric,
                range_min=range_min,
                range_max=range_max,
                boolean=boolean,
                code=raw.get("code"),
                label=raw.get("label"),
                unit=raw.get("unit"),
            )
        return cls()

    @staticmethod
    def _parse_range(raw: Any) -> tuple[Any, Any]:
        if raw is None:
            return None, None
        if isinstance(raw, Mapping):
            return raw.get("min"), raw.get("max")
        if isinstance(raw, (list, tuple)) and len(raw) == 2:
            return raw[0], raw[1]
        return None, None

    @property
    def has_range(self) -> bool:
        """Whether a range representation with at least one bound is present."""
        return parse_number(self.range_min) is not None or parse_number(self.range_max) is not None

    @property
    def is_empty(self) -> bool:
        """Whether no representation at all is present."""
        return (
            self.numeric is None
            and self.range_min is None
            and self.range_max is None
            and self.boolean is None
            and not self.code
            and not self.label
        )

    def as_bool(self) -> bool | None:
        """Logical interpretation of the value, if any."""
        if self.boolean is not None:
            return parse_bool(self.boolean)
        if self.label is not None and self.numeric is None and not self.has_range:
            return parse_bool(self.label)
        return None

    def as_number(self) -> float | None:
        """Canonical numeric value.

        The range lower bound wins over the scalar when both are present.
        A half-bounded "up to" range falls back to its upper bound.
        """
        lower = parse_number(self.range_min)
        if lower is not None:
            return lower
        upper = parse_number(self.range_max)
        if upper is not None:
            return upper
        return parse_number(self.numeric)

    def as_category(self) -> str | None:
        """Discrete label (preferred) or code, verbatim."""
        for candidate in (self.label, self.code):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None

    def texts(self) -> list[str]:
        """All textual representations, for equality/contains conditions."""
        texts = [t for t in (self.code, self.label) if isinstance(t, str)]
        flag = self.as_bool()
        if flag is not None:
            texts.append("true" if flag else "false")
        return texts


# ============================================================================
# Query Value Objects
# ============================================================================


@dataclass(frozen=True)
class NumericRange(ValueObject):
    """Inclusive numeric range where either bound may be omitted.

    An omitted bound is unconstrained on that side. A range with no
    bounds constrains nothing. Inverted bounds are swapped on creation.
    """

    minimum: float | None = None
    maximum: float | None = None

    def __post_init__(self) -> None:
        """Normalize inverted bounds."""
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            lower, upper = self.maximum, self.minimum
            object.__setattr__(self, "minimum", lower)
            object.__setattr__(self, "maximum", upper)

    @property
    def is_unbounded(self) -> bool:
        """Whether neither bound is set."""
        return self.minimum is None and self.maximum is None

    def contains(self, value: float) -> bool:
        """Check inclusive membership."""
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class PageRequest(ValueObject):
    """Offset/limit page request. A limit of None means unbounded."""

    offset: int = 0
    limit: int | None = 24

    def __post_init__(self) -> None:
        """Clamp negative values."""
        if self.offset < 0:
            object.__setattr__(self, "offset", 0)
        if self.limit is not None and self.limit < 0:
            object.__setattr__(self, "limit", 0)

    @classmethod
    def unbounded(cls) -> Self:
        """Page request covering the whole result set."""
        return cls(offset=0, limit=None)
