#!/usr/bin/env python3
"""Scrape Foodora grocery vendors.

Scrapes every enabled Foodora store by default, or a single store, or
prints the simplified details of one product.

Usage:
    python scripts/scrape_foodora.py
    python scripts/scrape_foodora.py --store FOODORA_DMART
    python scripts/scrape_foodora.py --store FOODORA_DMART --category 971c4780-14f9-4df1-87c5-6386e0e0bc02
    python scripts/scrape_foodora.py --product-details <product-id> --vendor o7b0
"""

import argparse
import asyncio
import sys
from dataclasses import asdict
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopscraper.catalog.definitions import CategoryDefinitionLoader
from shopscraper.infrastructure.database import create_tables
from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.scrapers.foodora.queries import DEFAULT_VENDOR_CODE
from shopscraper.scrapers.foodora.scraper import FoodoraScraper
from shopscraper.search.sync import SearchIndexSyncer


async def show_product_details(scraper: FoodoraScraper, product_id: str, vendor_code: str) -> None:
    """Print the simplified details of one product."""
    product = await scraper.get_product_details(product_id, vendor_code)
    for name, value in asdict(product).items():
        print(f"  {name}: {value}")


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Scrape Foodora grocery vendors")
    parser.add_argument("--store", help="Store code to scrape (default: all enabled)")
    parser.add_argument(
        "--category",
        action="append",
        help="Top-level category id within --store (repeatable)",
    )
    parser.add_argument("--product-details", metavar="PRODUCT_ID", help="Print details of one product")
    parser.add_argument("--vendor", default=DEFAULT_VENDOR_CODE, help="Vendor code for --product-details")
    parser.add_argument(
        "--sync-search",
        action="store_true",
        help="Push scraped products to the search index afterwards",
    )
    args = parser.parse_args()

    configure_logging(json_output=False)
    loader = CategoryDefinitionLoader()
    scraper = FoodoraScraper(loader=loader)

    print("=" * 60)
    print("Foodora Scraper")
    print("=" * 60)

    try:
        if args.product_details:
            await show_product_details(scraper, args.product_details, args.vendor)
            return

        await create_tables()

        if args.store:
            store = loader.get_store(args.store)
            if store is None or store.source != "foodora":
                print(f"Unknown Foodora store: {args.store}")
                sys.exit(1)

            categories = loader.load_store_tree(store)
            if args.category:
                categories = [c for c in categories if c.id in set(args.category)]

            count = await scraper.scrape_store(store, categories)
            print(f"{store.name}: {count} products")
        else:
            results = await scraper.scrape_all_stores()
            for result in results:
                mark = "✓" if result.success else "✗"
                detail = f"{result.products} products" if result.success else result.error
                print(f"  {mark} {result.name}: {detail}")
    finally:
        await scraper.close()

    if args.sync_search:
        syncer = SearchIndexSyncer()
        try:
            summary = await syncer.sync_pending()
        finally:
            await syncer.close()
        print(f"Search documents pushed: {summary.pushed} (failed: {summary.failed})")

    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
