"""Repository for the search index outbox."""

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.infrastructure.database import upsert_insert
from shopscraper.search.models import SearchIndexOutbox

ENQUEUE_CHUNK_SIZE = 1000


class SearchOutboxRepository:
    """Queue of products whose search documents need a push."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def enqueue(self, product_ids: Sequence[int]) -> None:
        """Queue products for indexing.

        Re-enqueueing a pending product refreshes enqueued_at and keeps
        its attempt counter.

        Args:
            product_ids: Product database ids.
        """
        unique_ids = list(dict.fromkeys(product_ids))
        if not unique_ids:
            return

        table = SearchIndexOutbox.__table__
        now = datetime.now(timezone.utc)
        for start in range(0, len(unique_ids), ENQUEUE_CHUNK_SIZE):
            chunk = unique_ids[start:start + ENQUEUE_CHUNK_SIZE]
            stmt = upsert_insert(self.session, table).values(
                [{"product_id": product_id, "enqueued_at": now, "attempts": 0} for product_id in chunk]
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["product_id"],
                set_={"enqueued_at": now},
            )
            await self.session.execute(stmt)

    async def pending(self, limit: int = 100) -> list[SearchIndexOutbox]:
        """Oldest pending entries first."""
        result = await self.session.execute(
            select(SearchIndexOutbox)
            .order_by(SearchIndexOutbox.enqueued_at, SearchIndexOutbox.product_id)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def remove(
        self,
        product_ids: Sequence[int],
        enqueued_before: datetime | None = None,
    ) -> None:
        """Drop entries after a successful push.

        Args:
            product_ids: Entries that were pushed.
            enqueued_before: Keep entries re-enqueued after this instant.
        """
        if not product_ids:
            return
        stmt = delete(SearchIndexOutbox).where(SearchIndexOutbox.product_id.in_(product_ids))
        if enqueued_before is not None:
            stmt = stmt.where(SearchIndexOutbox.enqueued_at <= enqueued_before)
        await self.session.execute(stmt.execution_options(synchronize_session=False))

    async def mark_failed(self, product_ids: Sequence[int], error: str) -> None:
        """Record a failed push attempt.

        Args:
            product_ids: Entries that were part of the failed push.
            error: Failure message.
        """
        if not product_ids:
            return
        await self.session.execute(
            update(SearchIndexOutbox)
            .where(SearchIndexOutbox.product_id.in_(product_ids))
            .values(
                attempts=SearchIndexOutbox.attempts + 1,
                last_error=error[:2000],
            )
            .execution_options(synchronize_session=False)
        )

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(SearchIndexOutbox.product_id)))
        return result.scalar_one()
