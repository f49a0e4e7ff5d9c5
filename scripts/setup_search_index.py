#!/usr/bin/env python3
"""Create and configure the Meilisearch product index.

Usage:
    python scripts/setup_search_index.py
    python scripts/setup_search_index.py --reindex
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.search.client import PRODUCT_INDEX_SETTINGS, MeilisearchClient
from shopscraper.search.sync import SearchIndexSyncer


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Configure the product search index")
    parser.add_argument(
        "--reindex",
        action="store_true",
        help="Queue every stored product and push all documents",
    )
    args = parser.parse_args()

    configure_logging(json_output=False)

    print("=" * 60)
    print("Search Index Setup")
    print("=" * 60)

    client = MeilisearchClient()
    try:
        task = await client.initialize_product_index()
        if "taskUid" in task:
            await client.wait_for_task(task["taskUid"])
        print(f"Index '{client.index_uid}' configured:")
        for name, value in PRODUCT_INDEX_SETTINGS.items():
            print(f"  {name}: {', '.join(value)}")

        if args.reindex:
            syncer = SearchIndexSyncer(client=client)
            summary = await syncer.reindex_all()
            print(f"Documents pushed: {summary.pushed} (failed: {summary.failed})")
    finally:
        await client.close()

    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
