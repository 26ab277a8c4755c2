"""Configuration store.

Holds the three operator-editable configuration sets (taxonomy nodes,
classification rules, filter definitions) as one immutable snapshot.
A snapshot is loaded once per rebuild and passed explicitly to the
classifier, the filter index builder and the facet engine; edits only
take effect at the next rebuild.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Self

import structlog

from facetsearch.catalog.taxonomy import TaxonomyTree
from facetsearch.domain.entities import ClassificationRule, FilterDefinition, TaxonomyNode
from facetsearch.domain.exceptions import ConfigurationError, DuplicateKeyError

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable configuration snapshot.

    Validation happens on creation: the taxonomy must form a tree and
    rule names and filter keys must be unique. Individual rules are not
    validated here; malformed rules are skipped by the classifier.

    Attributes:
        taxonomy_nodes: All configured taxonomy nodes.
        rules: All configured classification rules.
        filters: All configured filter definitions.
        source: Where the snapshot was loaded from.
        loaded_at: Load timestamp.
        tree: Validated tree over the active taxonomy nodes.
    """

    taxonomy_nodes: tuple[TaxonomyNode, ...] = ()
    rules: tuple[ClassificationRule, ...] = ()
    filters: tuple[FilterDefinition, ...] = ()
    source: str = "memory"
    loaded_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
        compare=False,
    )
    tree: TaxonomyTree = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the configuration sets."""
        object.__setattr__(self, "taxonomy_nodes", tuple(self.taxonomy_nodes))
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "filters", tuple(self.filters))
        object.__setattr__(self, "tree", TaxonomyTree(self.taxonomy_nodes))
        self._check_unique("rule", [r.name for r in self.rules])
        self._check_unique("filter", [f.key for f in self.filters])

    @staticmethod
    def _check_unique(kind: str, keys: list[str]) -> None:
        seen: set[str] = set()
        for key in keys:
            if key in seen:
                raise DuplicateKeyError(kind, key)
            seen.add(key)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "memory") -> Self:
        """Build a snapshot from plain configuration records.

        Args:
            data: Mapping with "taxonomy", "rules" and "filters" lists.
            source: Label recorded on the snapshot.

        Returns:
            Validated snapshot.

        Raises:
            ConfigurationError: If a record is incomplete or the sets are invalid.
        """
        try:
            nodes = [TaxonomyNode.from_dict(n) for n in data.get("taxonomy", [])]
            rules = [ClassificationRule.from_dict(r) for r in data.get("rules", [])]
            filters = [FilterDefinition.from_dict(f) for f in data.get("filters", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Malformed configuration record: {e}",
                details={"source": source},
            ) from e
        return cls(taxonomy_nodes=nodes, rules=rules, filters=filters, source=source)

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Load a snapshot from a JSON file.

        Args:
            path: Path to the configuration file.

        Returns:
            Validated snapshot.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Cannot read configuration file {path}: {e}",
                details={"path": str(path)},
            ) from e
        return cls.from_dict(data, source=f"file:{path}")

    @classmethod
    def default(cls) -> Self:
        """Embedded default lighting configuration."""
        from facetsearch.catalog.defaults import DEFAULT_CONFIG

        return cls.from_dict(DEFAULT_CONFIG, source="embedded")

    @property
    def active_rules(self) -> list[ClassificationRule]:
        """Active rules in evaluation order (priority, then name)."""
        return sorted(
            (r for r in self.rules if r.active),
            key=lambda r: (r.priority, r.name),
        )

    @property
    def active_filters(self) -> list[FilterDefinition]:
        """Active filter definitions in display order."""
        return sorted(
            (f for f in self.filters if f.active),
            key=lambda f: (f.display_order, f.key),
        )

    def get_filter(self, key: str) -> FilterDefinition | None:
        """Get an active filter definition by key."""
        for definition in self.filters:
            if definition.key == key and definition.active:
                return definition
        return None

    def to_dict(self) -> dict[str, Any]:
        """Counts of the configuration sets, for logging and statistics."""
        return {
            "source": self.source,
            "taxonomy_nodes": len(self.tree),
            "classification_rules": len(self.active_rules),
            "filter_definitions": len(self.active_filters),
        }


# ============================================================================
# Stores
# ============================================================================


class ConfigurationStore(ABC):
    """Source of configuration snapshots."""

    @abstractmethod
    async def load_snapshot(self) -> ConfigSnapshot:
        """Load the current configuration as an immutable snapshot.

        Raises:
            ConfigurationError: If the configuration is unreachable or invalid.
        """


class StaticConfigurationStore(ConfigurationStore):
    """Store serving a fixed snapshot (embedded default, tests)."""

    def __init__(self, snapshot: ConfigSnapshot | None = None) -> None:
        self._snapshot = snapshot

    async def load_snapshot(self) -> ConfigSnapshot:
        if self._snapshot is None:
            self._snapshot = ConfigSnapshot.default()
        return self._snapshot


class FileConfigurationStore(ConfigurationStore):
    """Store re-reading a JSON configuration file on every load."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def load_snapshot(self) -> ConfigSnapshot:
        snapshot = ConfigSnapshot.from_file(self.path)
        logger.info("Configuration loaded", **snapshot.to_dict())
        return snapshot
