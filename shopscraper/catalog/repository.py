"""Repositories for catalog database operations.

Natural-key upserts for categories and products, the product/category
junction, and the read queries used by the API services.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shopscraper.catalog.models import Category, Product, product_categories, utcnow
from shopscraper.catalog.records import ProductRecord
from shopscraper.infrastructure.database import upsert_insert
from shopscraper.search.outbox import SearchOutboxRepository


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            category = await repo.upsert(
                key="foodora-dmart-971c4780",
                name="Ovoce a zelenina",
                slug="foodora-dmart-ovoce-a-zelenina-971c4780",
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def upsert(
        self,
        key: str,
        name: str,
        slug: str,
        order_hint: str | None = None,
        parent_id: int | None = None,
    ) -> Category:
        """Insert a category or update the row with the same key.

        Runs as a single INSERT .. ON CONFLICT (key) DO UPDATE. On conflict
        name, slug and order_hint are overwritten and updated_at touched.
        A None parent_id keeps the existing parent link.

        Args:
            key: Natural key.
            name: Display name.
            slug: Unique slug.
            order_hint: Upstream ordering hint.
            parent_id: Parent category id.

        Returns:
            The stored category.
        """
        table = Category.__table__
        now = utcnow()
        stmt = upsert_insert(self.session, table).values(
            key=key,
            name=name,
            slug=slug,
            order_hint=order_hint,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["key"],
            set_={
                "name": stmt.excluded.name,
                "slug": stmt.excluded.slug,
                "order_hint": stmt.excluded.order_hint,
                "parent_id": func.coalesce(stmt.excluded.parent_id, table.c.parent_id),
                "updated_at": now,
            },
        ).returning(table.c.id)

        result = await self.session.execute(stmt)
        category_id = result.scalar_one()

        reloaded = await self.session.execute(
            select(Category)
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        return reloaded.scalar_one()

    async def get_by_id(self, category_id: int) -> Category | None:
        return await self.session.get(Category, category_id)

    async def get_by_key(self, key: str) -> Category | None:
        result = await self.session.execute(select(Category).where(Category.key == key))
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Category | None:
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def get_children(self, parent_ids: Sequence[int]) -> Sequence[Category]:
        """Get direct children of the given categories.

        Args:
            parent_ids: Parent category ids.

        Returns:
            Child categories ordered by name.
        """
        if not parent_ids:
            return []
        result = await self.session.execute(
            select(Category)
            .where(Category.parent_id.in_(parent_ids))
            .order_by(Category.name)
        )
        return result.scalars().all()

    async def find_all(self) -> Sequence[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return result.scalars().all()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(Category.id)))
        return result.scalar_one()

    async def get_product_counts(self, store: str | None = None) -> dict[int, int]:
        """Count linked products per category.

        Args:
            store: Only count products of this store.

        Returns:
            Mapping of category id to number of directly linked products.
        """
        query = select(
            product_categories.c.category_id,
            func.count(product_categories.c.product_id).label("product_count"),
        ).group_by(product_categories.c.category_id)
        if store is not None:
            query = query.join(Product, Product.id == product_categories.c.product_id).where(
                Product.store == store
            )

        result = await self.session.execute(query)
        return {row.category_id: row.product_count for row in result.all()}


class ProductCategoryRepository:
    """Repository for the product/category junction table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def link(self, product_id: int, category_ids: Sequence[int]) -> int:
        """Link a product to categories, skipping existing links.

        Args:
            product_id: Product database id.
            category_ids: Category database ids, duplicates allowed.

        Returns:
            Number of links created.
        """
        wanted = list(dict.fromkeys(category_ids))
        if not wanted:
            return 0

        result = await self.session.execute(
            select(product_categories.c.category_id).where(
                product_categories.c.product_id == product_id,
                product_categories.c.category_id.in_(wanted),
            )
        )
        existing = set(result.scalars().all())

        missing = [category_id for category_id in wanted if category_id not in existing]
        if missing:
            await self.session.execute(
                product_categories.insert(),
                [{"product_id": product_id, "category_id": category_id} for category_id in missing],
            )
        return len(missing)

    async def get_category_ids(self, product_id: int) -> list[int]:
        result = await self.session.execute(
            select(product_categories.c.category_id)
            .where(product_categories.c.product_id == product_id)
            .order_by(product_categories.c.category_id)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(product_categories)
        )
        return result.scalar_one()


class ProductRepository:
    """Repository for Product database operations.

    Handles natural-key upserts from the scrapers and the lookups used
    by the read API.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            product = await repo.upsert(record)
            await session.commit()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.outbox = SearchOutboxRepository(session)

    async def upsert(self, record: ProductRecord) -> Product:
        """Insert a product or update the row with the same product_id.

        scraped_at is kept from the first insert, updated_at is touched.
        The product is queued for the search index in the same transaction.

        Args:
            record: Normalized product.

        Returns:
            The stored product.
        """
        table = Product.__table__
        now = utcnow()
        values = record.to_row()

        stmt = upsert_insert(self.session, table).values(
            **values,
            scraped_at=now,
            updated_at=now,
        )
        update_columns = {
            name: getattr(stmt.excluded, name)
            for name in values
            if name != "product_id"
        }
        update_columns["updated_at"] = now
        stmt = stmt.on_conflict_do_update(
            index_elements=["product_id"],
            set_=update_columns,
        ).returning(table.c.id)

        result = await self.session.execute(stmt)
        product_pk = result.scalar_one()

        await self.outbox.enqueue([product_pk])

        reloaded = await self.session.execute(
            select(Product)
            .where(Product.id == product_pk)
            .execution_options(populate_existing=True)
        )
        return reloaded.scalar_one()

    async def get_by_id(self, product_pk: int) -> Product | None:
        """Get product by database id with its categories.

        Args:
            product_pk: Product database id.

        Returns:
            Product if found, None otherwise.
        """
        result = await self.session.execute(
            select(Product)
            .where(Product.id == product_pk)
            .options(selectinload(Product.categories))
        )
        return result.scalar_one_or_none()

    async def get_by_product_id(self, product_id: str) -> Product | None:
        result = await self.session.execute(
            select(Product).where(Product.product_id == product_id)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Product | None:
        """Get the first product with the given slug.

        Slugs are not unique across stores, the lowest id wins.
        """
        result = await self.session.execute(
            select(Product)
            .where(Product.slug == slug)
            .order_by(Product.id)
            .limit(1)
            .options(selectinload(Product.categories))
        )
        return result.scalar_one_or_none()

    async def get_many(self, product_pks: Sequence[int]) -> list[Product]:
        """Bulk-load products with categories.

        Args:
            product_pks: Product database ids.

        Returns:
            Products found, in no particular order.
        """
        if not product_pks:
            return []
        result = await self.session.execute(
            select(Product)
            .where(Product.id.in_(product_pks))
            .options(selectinload(Product.categories))
        )
        return list(result.scalars().all())

    async def find_by_category_ids(
        self,
        category_ids: Sequence[int],
        limit: int = 30,
        offset: int = 0,
        store: str | None = None,
    ) -> list[Product]:
        """Find products linked to any of the given categories.

        Args:
            category_ids: Category database ids.
            limit: Maximum results.
            offset: Result offset for pagination.
            store: Optional store filter.

        Returns:
            Distinct products ordered by name.
        """
        if not category_ids:
            return []

        linked = (
            select(product_categories.c.product_id)
            .where(product_categories.c.category_id.in_(category_ids))
        )
        conditions = [Product.id.in_(linked)]
        if store is not None:
            conditions.append(Product.store == store)

        result = await self.session.execute(
            select(Product)
            .where(*conditions)
            .order_by(Product.name, Product.id)
            .limit(limit)
            .offset(offset)
            .options(selectinload(Product.categories))
        )
        return list(result.scalars().all())

    async def count_by_category_ids(
        self,
        category_ids: Sequence[int],
        store: str | None = None,
    ) -> int:
        if not category_ids:
            return 0
        query = select(func.count(distinct(product_categories.c.product_id))).where(
            product_categories.c.category_id.in_(category_ids)
        )
        if store is not None:
            query = query.join(Product, Product.id == product_categories.c.product_id).where(
                Product.store == store
            )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def find_promotions(self, limit: int = 30, store: str | None = None) -> list[Product]:
        """Find published products currently in promotion.

        Args:
            limit: Maximum results.
            store: Optional store filter.

        Returns:
            Products ordered by most recently updated.
        """
        conditions = [Product.in_promotion.is_(True), Product.published.is_(True)]
        if store is not None:
            conditions.append(Product.store == store)

        result = await self.session.execute(
            select(Product)
            .where(*conditions)
            .order_by(Product.updated_at.desc(), Product.id)
            .limit(limit)
            .options(selectinload(Product.categories))
        )
        return list(result.scalars().all())

    async def count(self, store: str | None = None) -> int:
        query = select(func.count(Product.id))
        if store is not None:
            query = query.where(Product.store == store)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_stores(self) -> list[dict[str, Any]]:
        """Get stores with product counts.

        Returns:
            List of store info dicts.
        """
        query = (
            select(Product.store, func.count(Product.id).label("product_count"))
            .group_by(Product.store)
            .order_by(Product.store)
        )
        result = await self.session.execute(query)
        return [
            {"store": row.store, "product_count": row.product_count}
            for row in result.all()
        ]

    async def enqueue_all_for_indexing(self) -> int:
        """Queue every stored product for the search index.

        Returns:
            Number of queued products.
        """
        result = await self.session.execute(select(Product.id).order_by(Product.id))
        product_pks = list(result.scalars().all())
        await self.outbox.enqueue(product_pks)
        return len(product_pks)

    async def delete_all(self) -> int:
        """Delete every product.

        Junction and outbox rows go with them through ON DELETE CASCADE.

        Returns:
            Number of deleted products.
        """
        count = await self.count()
        await self.session.execute(
            delete(Product).execution_options(synchronize_session=False)
        )
        return count
