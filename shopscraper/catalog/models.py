"""SQLAlchemy models for the grocery catalog.

Defines the category forest, scraped products and the junction table
recording which categories a product was discovered under.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopscraper.infrastructure.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# JSONB on PostgreSQL, plain JSON elsewhere
JsonList = JSON().with_variant(JSONB(), "postgresql")


product_categories = Table(
    "product_categories",
    Base.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Category(Base):
    """Category node in the catalog forest.

    Attributes:
        id: Surrogate identifier.
        key: Natural key, unique across stores (Foodora keys carry the
            store code prefix).
        name: Display name.
        slug: URL slug, unique.
        order_hint: Upstream ordering hint, if any.
        parent_id: Parent category, None for roots.
        created_at: Creation timestamp.
        updated_at: Last upsert timestamp.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    order_hint: Mapped[str | None] = mapped_column(String(100), nullable=True)
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    parent: Mapped["Category"] = relationship(
        "Category",
        remote_side="Category.id",
        back_populates="children",
    )
    children: Mapped[list["Category"]] = relationship(
        "Category",
        back_populates="parent",
        order_by="Category.name",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, key={self.key}, slug={self.slug})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "key": self.key,
            "name": self.name,
            "slug": self.slug,
            "order_hint": self.order_hint,
            "parent_id": self.parent_id,
        }


class Product(Base):
    """Scraped product in the unified catalog schema.

    Prices are integer minor units (hellers) except ``unit_price`` which
    keeps the upstream per-unit figure as a float.

    Attributes:
        store: Store code (e.g., "BILLA", "FOODORA_DMART").
        product_id: Upstream product identifier, the upsert key.
        category: Denormalized category label from the scrape.
        category_slug: Denormalized category slug from the scrape.
        images: Image URLs.
        scraped_at: First time the product was stored.
        updated_at: Last upsert timestamp.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    sku: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description_short: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_long: Mapped[str | None] = mapped_column(Text, nullable=True)
    regulated_product_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_slug: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    brand: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    brand_slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    price_per_unit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    unit_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    regular_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    discount_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lowest_price: Mapped[int | None] = mapped_column(Integer, nullable=True)
    in_promotion: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    amount: Mapped[str | None] = mapped_column(String(100), nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    package_label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    package_label_key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    volume_label_key: Mapped[str | None] = mapped_column(String(100), nullable=True)
    volume_label_short: Mapped[str | None] = mapped_column(String(100), nullable=True)
    base_unit_long: Mapped[str | None] = mapped_column(String(50), nullable=True)
    base_unit_short: Mapped[str | None] = mapped_column(String(50), nullable=True)
    images: Mapped[list[str]] = mapped_column(JsonList, nullable=False, default=list)
    product_marketing: Mapped[str | None] = mapped_column(Text, nullable=True)
    brand_marketing: Mapped[str | None] = mapped_column(Text, nullable=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    medical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    weight_article: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    scraped_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    categories: Mapped[list[Category]] = relationship(
        Category,
        secondary=product_categories,
        passive_deletes=True,
        order_by=Category.id,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, product_id={self.product_id}, name={self.name[:30]}...)>"

    @property
    def price_decimal(self) -> Decimal | None:
        """Get price in major currency units."""
        if self.price is None:
            return None
        return Decimal(self.price) / 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation without relationships.
        """
        return {
            "id": self.id,
            "store": self.store,
            "product_id": self.product_id,
            "sku": self.sku,
            "slug": self.slug,
            "name": self.name,
            "description_short": self.description_short,
            "description_long": self.description_long,
            "category": self.category,
            "category_slug": self.category_slug,
            "brand": self.brand,
            "price": self.price,
            "regular_price": self.regular_price,
            "discount_price": self.discount_price,
            "in_promotion": self.in_promotion,
            "images": list(self.images or []),
            "published": self.published,
        }
