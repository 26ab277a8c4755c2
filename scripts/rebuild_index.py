#!/usr/bin/env python3
"""Offline index rebuild script.

Runs one full rebuild with the configured catalog source and
configuration store and prints the rebuild report and statistics.
Useful to validate a configuration file before deploying it.

Usage:
    python scripts/rebuild_index.py
    python scripts/rebuild_index.py --config config/search.json --workers 4
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facetsearch.application.search_service import SearchService
from facetsearch.catalog.config_store import FileConfigurationStore, StaticConfigurationStore
from facetsearch.catalog.generator import GeneratorConfig
from facetsearch.catalog.source import GeneratedCatalogSource
from facetsearch.domain.exceptions import DomainError
from facetsearch.infrastructure.logging import configure_logging


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Rebuild the search index once and print the report",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: embedded lighting configuration)",
    )
    parser.add_argument(
        "--products",
        type=int,
        default=2000,
        help="Number of generated products (default: 2000)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Generator seed (default: 42)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for classification and extraction",
    )

    args = parser.parse_args()
    configure_logging("WARNING")

    config_store = (
        FileConfigurationStore(args.config) if args.config else StaticConfigurationStore()
    )
    service = SearchService(
        config_store=config_store,
        catalog_source=GeneratedCatalogSource(
            GeneratorConfig(seed=args.seed, product_count=args.products)
        ),
        workers=args.workers,
    )

    try:
        report = await service.rebuild()
    except DomainError as e:
        print(f"✗ Rebuild failed: {e.message}")
        return 1

    print("=" * 60)
    print("Rebuild report")
    print("=" * 60)
    print(json.dumps(report.to_dict(), indent=2, default=str))
    print()
    print("Statistics")
    print("-" * 60)
    for stat in await service.statistics():
        print(f"  {stat.name:<32} {stat.value}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
