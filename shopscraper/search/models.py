"""Outbox table feeding the search index mirror."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from shopscraper.infrastructure.database import Base


class SearchIndexOutbox(Base):
    """Pending search document push for one product.

    A row is written in the same transaction as the product upsert and
    removed only once the search index accepted the document.

    Attributes:
        product_id: Product whose document must be (re)pushed.
        enqueued_at: Time of the most recent enqueue.
        attempts: Failed push attempts so far.
        last_error: Message of the most recent failure.
    """

    __tablename__ = "search_index_outbox"

    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    )
    enqueued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<SearchIndexOutbox(product_id={self.product_id}, attempts={self.attempts})>"
