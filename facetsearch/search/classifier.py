"""Taxonomy classifier.

Evaluates classification rules against products to produce taxonomy
membership and boolean flags.

Rules form a multi-label tagging system: every active rule is an
independent predicate, evaluated in ascending priority order, and every
matching rule contributes its taxonomy code and/or flag. Nothing is ever
removed by a later rule, so the result does not depend on rule order.

Example:
    classifier = Classifier.from_config(config)
    assignment = classifier.classify(product)
    assignment.codes    # frozenset({"LUM", "LUM_CEIL"})
    assignment.flags    # {"ceiling": True, "outdoor": False, ...}
"""

import re
from dataclasses import dataclass
from typing import Any

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.catalog.taxonomy import TaxonomyTree
from facetsearch.domain.entities import (
    AttributeCondition,
    ClassificationRule,
    Product,
    TaxonomyAssignment,
)
from facetsearch.domain.exceptions import MalformedRuleError
from facetsearch.domain.value_objects import (
    AttributeValue,
    ConditionOperator,
    parse_bool,
    parse_number,
)


@dataclass(frozen=True)
class RuleIssue:
    """A rule skipped by the classifier, for the rebuild report."""

    rule_name: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"rule_name": self.rule_name, "reason": self.reason}


# ============================================================================
# Compiled Predicates
# ============================================================================


@dataclass(frozen=True)
class CompiledCondition:
    """Attribute condition with its operator and thresholds resolved.

    Attributes:
        attribute: Technical attribute code.
        operator: Resolved operator.
        expected: Expected value for equals/contains.
        threshold: Numeric threshold for greater_than/less_than.
        minimum: Lower bound for in_range (None = unconstrained).
        maximum: Upper bound for in_range (None = unconstrained).
    """

    attribute: str
    operator: ConditionOperator
    expected: Any = None
    threshold: float | None = None
    minimum: float | None = None
    maximum: float | None = None

    def matches(self, value: AttributeValue | None) -> bool:
        """Evaluate the condition against one attribute value.

        Args:
            value: The product's value for the attribute (None if absent).

        Returns:
            True if the condition holds.
        """
        if value is None or value.is_empty:
            return False

        operator = self.operator
        if operator is ConditionOperator.EXISTS:
            return True
        if operator is ConditionOperator.EQUALS:
            return self._equals(value)
        if operator is ConditionOperator.CONTAINS:
            needle = str(self.expected).lower()
            return any(needle in text.lower() for text in (value.code, value.label) if text)

        number = value.as_number()
        if number is None:
            return False
        if operator is ConditionOperator.GREATER_THAN:
            return number > self.threshold
        if operator is ConditionOperator.LESS_THAN:
            return number < self.threshold
        if self.minimum is not None and number < self.minimum:
            return False
        return self.maximum is None or number <= self.maximum

    def _equals(self, value: AttributeValue) -> bool:
        if isinstance(self.expected, bool):
            return value.as_bool() is self.expected
        if isinstance(self.expected, (int, float)):
            number = value.as_number()
            return number is not None and number == float(self.expected)
        expected = str(self.expected).strip().lower()
        return any(text.strip().lower() == expected for text in value.texts())


@dataclass(frozen=True)
class CompiledRule:
    """Classification rule ready for evaluation.

    ``codes`` holds the target taxonomy code together with its ancestors,
    so a matching product is reachable from every level of its path.
    """

    name: str
    priority: int
    codes: tuple[str, ...]
    flag_name: str | None
    group_ids: frozenset[str] | None
    class_ids: frozenset[str] | None
    conditions: tuple[CompiledCondition, ...]
    pattern: re.Pattern[str] | None

    def matches(self, product: Product) -> bool:
        """Check whether every predicate of the rule holds for the product."""
        if self.group_ids is not None and product.group_code not in self.group_ids:
            return False
        if self.class_ids is not None and product.class_code not in self.class_ids:
            return False
        for condition in self.conditions:
            if not condition.matches(product.attributes.get(condition.attribute)):
                return False
        if self.pattern is not None:
            if not any(self.pattern.search(text) for text in product.descriptive_texts if text):
                return False
        return True


def _compile_condition(rule_name: str, condition: AttributeCondition) -> CompiledCondition:
    try:
        operator = ConditionOperator(condition.operator)
    except ValueError:
        raise MalformedRuleError(
            rule_name, f"unknown operator '{condition.operator}'"
        ) from None

    if operator in (ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN):
        threshold = parse_number(condition.value)
        if threshold is None:
            raise MalformedRuleError(
                rule_name, f"{operator.value} needs a numeric value, got {condition.value!r}"
            )
        return CompiledCondition(condition.attribute, operator, threshold=threshold)

    if operator is ConditionOperator.IN_RANGE:
        minimum = parse_number(condition.minimum)
        maximum = parse_number(condition.maximum)
        if (condition.minimum is not None and minimum is None) or (
            condition.maximum is not None and maximum is None
        ):
            raise MalformedRuleError(rule_name, "in_range bounds must be numeric")
        if minimum is None and maximum is None:
            raise MalformedRuleError(rule_name, "in_range needs at least one bound")
        if minimum is not None and maximum is not None and minimum > maximum:
            minimum, maximum = maximum, minimum
        return CompiledCondition(condition.attribute, operator, minimum=minimum, maximum=maximum)

    if operator is ConditionOperator.EQUALS:
        if condition.value is None:
            raise MalformedRuleError(rule_name, "equals needs a value")
        expected = condition.value
        if isinstance(expected, str) and expected.strip().lower() in ("true", "false"):
            expected = parse_bool(expected)
        return CompiledCondition(condition.attribute, operator, expected=expected)

    if operator is ConditionOperator.CONTAINS:
        if not isinstance(condition.value, str) or not condition.value:
            raise MalformedRuleError(rule_name, "contains needs a non-empty text value")
        return CompiledCondition(condition.attribute, operator, expected=condition.value)

    return CompiledCondition(condition.attribute, operator)


def compile_rule(rule: ClassificationRule, tree: TaxonomyTree) -> CompiledRule:
    """Validate and compile one rule.

    Args:
        rule: Configured rule.
        tree: Active taxonomy of the same configuration snapshot.

    Returns:
        Compiled rule.

    Raises:
        MalformedRuleError: If the rule cannot be evaluated.
    """
    if rule.taxonomy_code is None and not rule.flag_name:
        raise MalformedRuleError(rule.name, "rule sets neither a taxonomy code nor a flag")
    if rule.taxonomy_code is not None and rule.taxonomy_code not in tree:
        raise MalformedRuleError(
            rule.name, f"taxonomy code '{rule.taxonomy_code}' does not exist or is inactive"
        )
    if not rule.has_predicate:
        raise MalformedRuleError(rule.name, "rule has no match predicate")

    pattern = None
    if rule.text_pattern:
        try:
            pattern = re.compile(rule.text_pattern, re.IGNORECASE)
        except re.error as e:
            raise MalformedRuleError(rule.name, f"invalid text pattern: {e}") from e

    codes: tuple[str, ...] = ()
    if rule.taxonomy_code is not None:
        codes = tree.ancestors(rule.taxonomy_code) + (rule.taxonomy_code,)

    return CompiledRule(
        name=rule.name,
        priority=rule.priority,
        codes=codes,
        flag_name=rule.flag_name or None,
        group_ids=frozenset(rule.group_ids) if rule.group_ids else None,
        class_ids=frozenset(rule.class_ids) if rule.class_ids else None,
        conditions=tuple(_compile_condition(rule.name, c) for c in rule.attribute_conditions),
        pattern=pattern,
    )


# ============================================================================
# Classifier
# ============================================================================


class Classifier:
    """Evaluates compiled rules against products.

    Holds no mutable state after construction and can be shipped to
    worker processes.
    """

    def __init__(self, rules: list[CompiledRule], issues: list[RuleIssue] | None = None) -> None:
        """Initialize classifier.

        Args:
            rules: Compiled rules in evaluation order.
            issues: Rules skipped during compilation.
        """
        self.rules = tuple(rules)
        self.issues = tuple(issues or ())
        self.flag_names = tuple(sorted({r.flag_name for r in self.rules if r.flag_name}))

    @classmethod
    def from_config(cls, config: ConfigSnapshot) -> "Classifier":
        """Compile the active rules of a configuration snapshot.

        Malformed rules are skipped and recorded in ``issues``.

        Args:
            config: Configuration snapshot.

        Returns:
            Classifier over the valid active rules.
        """
        rules: list[CompiledRule] = []
        issues: list[RuleIssue] = []
        for rule in config.active_rules:
            try:
                rules.append(compile_rule(rule, config.tree))
            except MalformedRuleError as e:
                issues.append(RuleIssue(e.rule_name, e.reason))
        return cls(rules, issues)

    def classify(self, product: Product) -> TaxonomyAssignment:
        """Classify one product.

        Args:
            product: Product to classify.

        Returns:
            Taxonomy codes and the full flag map of the product.
        """
        codes: set[str] = set()
        flags = dict.fromkeys(self.flag_names, False)
        for rule in self.rules:
            if not rule.matches(product):
                continue
            codes.update(rule.codes)
            if rule.flag_name:
                flags[rule.flag_name] = True
        return TaxonomyAssignment(product_id=product.id, codes=frozenset(codes), flags=flags)
