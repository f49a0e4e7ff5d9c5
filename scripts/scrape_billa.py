#!/usr/bin/env python3
"""Scrape the Billa catalog.

Pages through the configured Billa categories, stores products with
their category paths and optionally pushes them to the search index.

Usage:
    python scripts/scrape_billa.py
    python scripts/scrape_billa.py --category ovoce-a-zelenina-1165
    python scripts/scrape_billa.py --sync-search
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopscraper.catalog.definitions import BillaCategory, CategoryDefinitionLoader
from shopscraper.infrastructure.database import create_tables
from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.scrapers.billa.scraper import BillaScraper
from shopscraper.search.sync import SearchIndexSyncer


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Scrape the Billa product catalog")
    parser.add_argument(
        "--category",
        action="append",
        help="Category slug to scrape (repeatable, default: all configured)",
    )
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=None,
        help="Pause between page requests in milliseconds",
    )
    parser.add_argument(
        "--sync-search",
        action="store_true",
        help="Push scraped products to the search index afterwards",
    )
    args = parser.parse_args()

    configure_logging(json_output=False)

    if args.category:
        categories = [BillaCategory.from_slug(slug) for slug in args.category]
    else:
        categories = CategoryDefinitionLoader().load_billa_categories()

    print("=" * 60)
    print("Billa Scraper")
    print("=" * 60)
    print(f"Categories: {len(categories)}")
    print()

    await create_tables()

    scraper = BillaScraper(delay_ms=args.delay_ms)
    try:
        summary = await scraper.scrape_all_categories(categories)
    finally:
        await scraper.close()

    for slug, count in summary.per_category.items():
        print(f"  {slug}: {count} products")
    print()
    print(f"Products scraped: {summary.products_scraped}")
    print(f"Products in database: {summary.total_products}")
    print(f"Categories in database: {summary.total_categories}")

    if args.sync_search:
        syncer = SearchIndexSyncer()
        try:
            result = await syncer.sync_pending()
        finally:
            await syncer.close()
        print(f"Search documents pushed: {result.pushed} (failed: {result.failed})")

    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
