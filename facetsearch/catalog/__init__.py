"""Product catalog and search configuration.

Provides the configuration store, the taxonomy tree, catalog sources
(database, generated, in-memory) and the deterministic catalog generator.
"""

from facetsearch.catalog.config_store import (
    ConfigSnapshot,
    ConfigurationStore,
    FileConfigurationStore,
    StaticConfigurationStore,
)
from facetsearch.catalog.generator import CatalogGenerator, GeneratorConfig, generate_catalog
from facetsearch.catalog.source import CatalogSource, GeneratedCatalogSource, InMemoryCatalogSource
from facetsearch.catalog.taxonomy import TaxonomyBranch, TaxonomyTree

__all__ = [
    # Configuration
    "ConfigSnapshot",
    "ConfigurationStore",
    "FileConfigurationStore",
    "StaticConfigurationStore",
    # Taxonomy
    "TaxonomyBranch",
    "TaxonomyTree",
    # Catalog sources
    "CatalogSource",
    "GeneratedCatalogSource",
    "InMemoryCatalogSource",
    # Generator
    "CatalogGenerator",
    "GeneratorConfig",
    "generate_catalog",
]
