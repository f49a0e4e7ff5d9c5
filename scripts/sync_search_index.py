#!/usr/bin/env python3
"""Push pending product documents to the search index.

Usage:
    python scripts/sync_search_index.py
    python scripts/sync_search_index.py --batch-size 500
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.search.sync import SearchIndexSyncer


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Drain the search index outbox")
    parser.add_argument("--batch-size", type=int, default=None, help="Documents per push")
    args = parser.parse_args()

    configure_logging(json_output=False)

    syncer = SearchIndexSyncer(batch_size=args.batch_size)
    try:
        summary = await syncer.sync_pending()
    finally:
        await syncer.close()

    print(f"Pushed: {summary.pushed}  Failed: {summary.failed}  Batches: {summary.batches}")
    if summary.failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
