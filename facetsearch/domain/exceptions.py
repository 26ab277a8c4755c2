"""Domain exceptions.

All domain-level errors raised by the configuration store, the rebuild
pipeline and the query layer. The API layer maps them to HTTP responses.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(DomainError):
    """Raised when the configuration snapshot cannot be loaded or is invalid.

    A configuration error aborts the rebuild attempt. The previously
    serving index snapshot stays active.
    """

    pass


class InvalidTaxonomyError(ConfigurationError):
    """Raised when taxonomy nodes do not form a valid tree."""

    def __init__(self, code: str, reason: str) -> None:
        """Initialize invalid taxonomy error.

        Args:
            code: Taxonomy code that violates the tree invariant.
            reason: Explanation of the violation.
        """
        super().__init__(
            f"Invalid taxonomy node '{code}': {reason}",
            details={"code": code, "reason": reason},
        )


class DuplicateKeyError(ConfigurationError):
    """Raised when a configuration set contains the same key twice."""

    def __init__(self, kind: str, key: str) -> None:
        """Initialize duplicate key error.

        Args:
            kind: Configuration set (e.g., "taxonomy", "filter").
            key: The duplicated key.
        """
        super().__init__(
            f"Duplicate {kind} key '{key}'",
            details={"kind": kind, "key": key},
        )


class MalformedRuleError(DomainError):
    """Raised when a classification rule cannot be compiled.

    The classifier catches this per rule, skips the rule and reports it.
    It never aborts a rebuild.
    """

    def __init__(self, rule_name: str, reason: str) -> None:
        """Initialize malformed rule error.

        Args:
            rule_name: Name of the offending rule.
            reason: Why the rule cannot be evaluated.
        """
        super().__init__(
            f"Rule '{rule_name}' skipped: {reason}",
            details={"rule_name": rule_name, "reason": reason},
        )
        self.rule_name = rule_name
        self.reason = reason


# ============================================================================
# Catalog Errors
# ============================================================================


class CatalogSourceError(DomainError):
    """Raised when the catalog source cannot supply products."""

    pass


# ============================================================================
# Query Errors
# ============================================================================


class InvalidFilterValueError(DomainError):
    """Raised when a structured filter value has the wrong shape for its kind."""

    def __init__(self, filter_key: str, kind: str, value: Any) -> None:
        """Initialize invalid filter value error.

        Args:
            filter_key: Filter key the value was given for.
            kind: Value kind of the filter definition.
            value: The rejected value.
        """
        super().__init__(
            f"Invalid value for {kind} filter '{filter_key}': {value!r}",
            details={"filter_key": filter_key, "kind": kind, "value": repr(value)},
        )


class IndexNotReadyError(DomainError):
    """Raised when a query arrives before any index snapshot exists.

    Distinct from an empty result: callers can tell "no index" from
    "no matches".
    """

    def __init__(self) -> None:
        """Initialize index not ready error."""
        super().__init__("Search index is not available yet")


class RebuildInProgressError(DomainError):
    """Raised when a rebuild is triggered while another one is running."""

    def __init__(self, started_at: str | None = None) -> None:
        """Initialize rebuild in progress error.

        Args:
            started_at: ISO timestamp of the running rebuild.
        """
        super().__init__(
            "An index rebuild is already running",
            details={"started_at": started_at},
        )
