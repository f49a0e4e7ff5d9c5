#!/usr/bin/env python3
"""Delete every stored product.

Category links and pending search pushes go with the products. The
search index documents are cleared as well unless --keep-index is set.

Usage:
    python scripts/delete_all_products.py --yes
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopscraper.catalog.repository import ProductRepository
from shopscraper.infrastructure.database import async_session_factory
from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.search.client import MeilisearchClient


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Delete all products")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    parser.add_argument("--keep-index", action="store_true", help="Leave search documents in place")
    args = parser.parse_args()

    configure_logging(json_output=False)

    if not args.yes:
        answer = input("Delete ALL products? Type 'yes' to continue: ")
        if answer.strip().lower() != "yes":
            print("Aborted.")
            return

    async with async_session_factory() as session:
        deleted = await ProductRepository(session).delete_all()
        await session.commit()
    print(f"Deleted {deleted} products")

    if not args.keep_index:
        client = MeilisearchClient()
        try:
            await client.delete_all_documents()
        finally:
            await client.close()
        print("Cleared search index documents")


if __name__ == "__main__":
    asyncio.run(main())
