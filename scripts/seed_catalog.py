#!/usr/bin/env python3
"""Seed catalog and search configuration script.

Generates a deterministic lighting catalog and stores it together with
the embedded default search configuration (taxonomy, classification
rules, filter definitions) in the database.

Usage:
    python scripts/seed_catalog.py --mode small
    python scripts/seed_catalog.py --mode full --seed 7
    python scripts/seed_catalog.py --config config/search.json --products 0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facetsearch.catalog.config_store import ConfigSnapshot
from facetsearch.catalog.generator import CatalogGenerator, GeneratorConfig
from facetsearch.catalog.repository import ConfigurationRepository, ProductRepository
from facetsearch.infrastructure.database import create_tables, session_scope


async def seed_configuration(snapshot: ConfigSnapshot) -> dict[str, int]:
    """Replace the configuration tables with a snapshot.

    Args:
        snapshot: Configuration to store.

    Returns:
        Row counts per table.
    """
    async with session_scope() as session:
        return await ConfigurationRepository(session).replace_all(snapshot)


async def seed_products(config: GeneratorConfig, clear: bool = True) -> dict[str, int]:
    """Generate and store the catalog.

    Args:
        config: Generator configuration.
        clear: Whether to delete existing products first.

    Returns:
        Seeding result.
    """
    products = CatalogGenerator(config).generate_all()
    async with session_scope() as session:
        repo = ProductRepository(session)
        deleted = await repo.delete_all() if clear else 0
        created = await repo.save_all(products)
    return {
        "deleted": deleted,
        "products_created": created,
        "classes_used": len({p.class_code for p in products}),
        "suppliers_used": len({p.supplier for p in products}),
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed product catalog and search configuration",
    )
    parser.add_argument(
        "--mode",
        choices=["small", "full"],
        default="small",
        help="Catalog size: small (~100 products) or full (~10000 products)",
    )
    parser.add_argument(
        "--products",
        type=int,
        default=None,
        help="Exact number of products to generate (overrides --mode)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Generator seed (default: 42)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (default: embedded lighting configuration)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear existing products before seeding",
    )

    args = parser.parse_args()

    config = GeneratorConfig.full() if args.mode == "full" else GeneratorConfig.small()
    config.seed = args.seed
    if args.products is not None:
        config.product_count = args.products

    snapshot = (
        ConfigSnapshot.from_file(args.config) if args.config else ConfigSnapshot.default()
    )

    print("=" * 60)
    print("facetsearch Catalog Seeder")
    print("=" * 60)
    print(f"Products: {config.product_count} (seed {config.seed})")
    print(f"Configuration: {snapshot.source}")
    print(f"Clear existing: {not args.no_clear}")
    print()

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    print("Seeding search configuration...")
    counts = await seed_configuration(snapshot)
    for table, count in counts.items():
        print(f"  ✓ {table}: {count}")
    print()

    if config.product_count > 0:
        print("Seeding catalog...")
        result = await seed_products(config, clear=not args.no_clear)
        print(f"  ✓ Deleted: {result['deleted']} existing products")
        print(f"  ✓ Created: {result['products_created']} products")
        print(f"  ✓ Classes: {result['classes_used']}")
        print(f"  ✓ Suppliers: {result['suppliers_used']}")
        print()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
