"""Persistence helpers shared by the scrapers."""

from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.catalog.models import Product
from shopscraper.catalog.reconciler import CategoryReconciler
from shopscraper.catalog.records import ProductRecord
from shopscraper.catalog.repository import CategoryRepository, ProductCategoryRepository, ProductRepository


class CatalogWriter:
    """Writes scraped products and their category links through one session.

    The caller owns the transaction boundary; scrapers commit once per
    product so a failing product never takes its batch down with it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.products = ProductRepository(session)
        self.categories = CategoryRepository(session)
        self.links = ProductCategoryRepository(session)
        self.reconciler = CategoryReconciler(session)

    async def save_product(self, record: ProductRecord, category_ids: Sequence[int]) -> Product:
        """Upsert a product and link it to categories.

        Args:
            record: Normalized product.
            category_ids: Categories the product was discovered under.

        Returns:
            The stored product.
        """
        product = await self.products.upsert(record)
        await self.links.link(product.id, category_ids)
        return product

    async def totals(self) -> dict[str, int]:
        """Current product and category counts."""
        return {
            "products": await self.products.count(),
            "categories": await self.categories.count(),
        }
