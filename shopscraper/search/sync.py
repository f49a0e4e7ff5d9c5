"""Draining the search index outbox into Meilisearch."""

import asyncio
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopscraper.catalog.repository import ProductRepository
from shopscraper.domain.exceptions import SearchIndexError
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.database import async_session_factory
from shopscraper.search.client import MeilisearchClient
from shopscraper.search.documents import product_to_document
from shopscraper.search.outbox import SearchOutboxRepository

logger = structlog.get_logger()


@dataclass
class SyncSummary:
    """Outcome of one outbox drain."""

    pushed: int = 0
    failed: int = 0
    batches: int = 0


class SearchIndexSyncer:
    """Pushes pending product documents to the search index.

    Outbox entries are removed only after Meilisearch accepted the batch,
    so every queued product reaches the index at least once. A rejected
    batch keeps its entries, bumps their attempt counter and ends the run.

    Example usage:
        syncer = SearchIndexSyncer()
        summary = await syncer.sync_pending()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        client: MeilisearchClient | None = None,
        batch_size: int | None = None,
    ) -> None:
        self.session_factory = session_factory or async_session_factory
        self.client = client or MeilisearchClient()
        self.batch_size = batch_size or settings.search_sync_batch_size

    async def sync_batch(self, batch_size: int) -> tuple[int, bool]:
        """Push one batch of pending entries.

        Returns:
            Number of entries handled and whether the push succeeded.
        """
        async with self.session_factory() as session:
            outbox = SearchOutboxRepository(session)
            entries = await outbox.pending(batch_size)
            if not entries:
                return 0, True

            product_ids = [entry.product_id for entry in entries]
            newest = max(entry.enqueued_at for entry in entries)
            products = await ProductRepository(session).get_many(product_ids)
            documents = [product_to_document(product) for product in products]

            try:
                await self.client.add_documents(documents)
            except SearchIndexError as e:
                logger.error(
                    "Search index push failed",
                    products=len(product_ids),
                    error=str(e),
                )
                await outbox.mark_failed(product_ids, str(e))
                await session.commit()
                return len(product_ids), False

            await outbox.remove(product_ids, enqueued_before=newest)
            await session.commit()

        logger.debug("Pushed search documents", documents=len(documents))
        return len(product_ids), True

    async def sync_pending(self, batch_size: int | None = None) -> SyncSummary:
        """Drain the outbox in batches until empty or a push fails.

        Args:
            batch_size: Documents per push, defaults to settings.

        Returns:
            Pushed and failed entry counts.
        """
        batch_size = batch_size or self.batch_size
        summary = SyncSummary()

        while True:
            handled, ok = await self.sync_batch(batch_size)
            if handled == 0:
                break
            summary.batches += 1
            if not ok:
                summary.failed += handled
                break
            summary.pushed += handled

        if summary.batches:
            logger.info(
                "Search index sync complete",
                pushed=summary.pushed,
                failed=summary.failed,
                batches=summary.batches,
            )
        return summary

    async def reindex_all(self) -> SyncSummary:
        """Queue every product and drain the outbox."""
        async with self.session_factory() as session:
            queued = await ProductRepository(session).enqueue_all_for_indexing()
            await session.commit()
        logger.info("Queued products for reindex", products=queued)
        return await self.sync_pending()

    async def close(self) -> None:
        await self.client.close()


async def run_periodic_sync(syncer: SearchIndexSyncer, interval_seconds: float) -> None:
    """Drain the outbox forever at a fixed interval.

    Meant to run as a background task; cancel it to stop.
    """
    logger.info("Starting periodic search sync", interval_seconds=interval_seconds)
    while True:
        try:
            await syncer.sync_pending()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Periodic search sync failed", error=str(e))
        await asyncio.sleep(interval_seconds)
