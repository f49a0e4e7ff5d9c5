"""Foodora category-tree scraper.

For every top-level category of a store the predefined tree is saved,
the live product list is fetched and each returned subcategory grouping
is stored as a category together with its products. Categories and
stores are processed strictly one after another with fixed pauses.
"""

import asyncio
from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopscraper.catalog.definitions import CategoryDefinition, CategoryDefinitionLoader, StoreConfig
from shopscraper.catalog.models import Category, Product
from shopscraper.catalog.reconciler import foodora_category_key, foodora_category_slug
from shopscraper.domain.exceptions import UpstreamError, UpstreamSchemaError
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.database import async_session_factory
from shopscraper.scrapers.foodora.client import FoodoraClient
from shopscraper.scrapers.foodora.mapper import map_foodora_product
from shopscraper.scrapers.foodora.schemas import CategoryProductGroup, FoodoraProduct
from shopscraper.scrapers.foodora.transformer import SimplifiedProduct, simplify_product
from shopscraper.scrapers.persistence import CatalogWriter

logger = structlog.get_logger()


@dataclass
class StoreScrapeResult:
    """Outcome of scraping one store."""

    store: str
    name: str
    success: bool
    products: int = 0
    error: str | None = None


class FoodoraScraper:
    """Scraper for Foodora grocery vendors.

    Example usage:
        scraper = FoodoraScraper()
        results = await scraper.scrape_all_stores()
        await scraper.close()
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        client: FoodoraClient | None = None,
        loader: CategoryDefinitionLoader | None = None,
        delay_ms: int | None = None,
        store_delay_seconds: float | None = None,
    ) -> None:
        """Initialize scraper.

        Args:
            session_factory: Session factory, defaults to the application one.
            client: Foodora API client.
            loader: Category and store definitions loader.
            delay_ms: Pause between top-level categories in milliseconds.
            store_delay_seconds: Pause between stores in seconds.
        """
        self.session_factory = session_factory or async_session_factory
        self.client = client or FoodoraClient()
        self.loader = loader or CategoryDefinitionLoader()
        self.delay_ms = settings.request_delay_ms if delay_ms is None else delay_ms
        self.store_delay_seconds = (
            settings.store_delay_seconds if store_delay_seconds is None else store_delay_seconds
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save_category_tree(self, definition: CategoryDefinition, store: StoreConfig) -> int:
        """Save a predefined tree and return the root's database id."""
        async with self.session_factory() as session:
            writer = CatalogWriter(session)
            root_id = await writer.reconciler.save_category_tree(definition, store.store_code)
            await session.commit()
        return root_id

    async def save_group_category(
        self,
        group: CategoryProductGroup,
        definition: CategoryDefinition,
        store: StoreConfig,
        root_id: int,
    ) -> Category:
        """Save or refresh the category of a live subcategory grouping.

        A grouping already known with a parent keeps that parent. A new
        one is attached to the top-level category being scraped. A
        grouping that is the top-level category itself stays where the
        predefined tree put it.

        Args:
            group: Grouping returned by the API.
            definition: Top-level category being scraped.
            store: Store configuration.
            root_id: Database id of the top-level category.

        Returns:
            The stored category.
        """
        key = foodora_category_key(store.store_code, group.id)
        async with self.session_factory() as session:
            writer = CatalogWriter(session)
            existing = await writer.categories.get_by_key(key)

            parent_id: int | None = root_id
            if group.id == definition.id:
                parent_id = None
            elif existing is not None and existing.parent_id is not None:
                parent_id = None

            category = await writer.reconciler.upsert_category(
                key=key,
                name=group.name,
                slug=foodora_category_slug(store.store_code, group.name, group.id),
                parent_id=parent_id,
            )
            await session.commit()
        return category

    async def save_product(
        self,
        writer: CatalogWriter,
        product: FoodoraProduct,
        category_id: str,
        category_name: str,
        store: StoreConfig,
    ) -> Product:
        """Save a product and link it to its grouping's category.

        If the category is missing it is created without a parent and a
        warning is logged.

        Args:
            writer: Writer bound to the current session.
            product: Product from the grouping.
            category_id: Upstream id of the grouping.
            category_name: Name of the grouping.
            store: Store configuration.

        Returns:
            The stored product.
        """
        key = foodora_category_key(store.store_code, category_id)
        category = await writer.categories.get_by_key(key)

        if category is None:
            logger.warning(
                "Category not found, creating without parent",
                key=key,
                name=category_name,
                store=store.store,
            )
            category = await writer.reconciler.upsert_category(
                key=key,
                name=category_name,
                slug=foodora_category_slug(store.store_code, category_name, category_id),
            )

        record = map_foodora_product(product, category_name, category.slug, store.store)
        return await writer.save_product(record, [category.id])

    async def save_group_products(self, group: CategoryProductGroup, store: StoreConfig) -> int:
        """Persist the products of a grouping, committing per product.

        Returns:
            Number of products saved.
        """
        saved = 0
        async with self.session_factory() as session:
            writer = CatalogWriter(session)
            for item in group.items:
                try:
                    await self.save_product(writer, item, group.id, group.name, store)
                    await session.commit()
                    saved += 1
                except Exception as e:
                    await session.rollback()
                    logger.error(
                        "Failed to save product",
                        store=store.store,
                        product_id=item.product_id,
                        name=item.name,
                        error=str(e),
                    )
        return saved

    # ------------------------------------------------------------------
    # Fetch loops
    # ------------------------------------------------------------------

    async def scrape_category(self, definition: CategoryDefinition, store: StoreConfig) -> int:
        """Scrape one top-level category.

        Any failure ends this category and counts it as zero; products
        already committed stay.

        Args:
            definition: Top-level category.
            store: Store configuration.

        Returns:
            Number of products saved.
        """
        logger.info(
            "Scraping category",
            store=store.store,
            category=definition.name,
            category_id=definition.id,
        )

        try:
            root_id = await self.save_category_tree(definition, store)
            response = await self.client.fetch_category_products(definition.id, store.vendor_code)

            groups = response.groups
            if not groups:
                logger.warning("No products found", store=store.store, category=definition.name)
                return 0

            total_saved = 0
            for group in groups:
                await self.save_group_category(group, definition, store, root_id)
                saved = await self.save_group_products(group, store)
                total_saved += saved
                logger.info(
                    "Saved subcategory",
                    subcategory=group.name,
                    saved=saved,
                    items=len(group.items),
                )

        except (UpstreamError, UpstreamSchemaError) as e:
            logger.error(
                "Failed to scrape category",
                store=store.store,
                category=definition.name,
                error=str(e),
            )
            return 0
        except Exception as e:
            logger.exception(
                "Unexpected error scraping category",
                store=store.store,
                category=definition.name,
                error=str(e),
            )
            return 0

        logger.info("Scraped category", category=definition.name, products=total_saved)
        return total_saved

    async def scrape_store(
        self,
        store: StoreConfig,
        categories: list[CategoryDefinition] | None = None,
    ) -> int:
        """Scrape the top-level categories of a store sequentially.

        Args:
            store: Store configuration.
            categories: Top-level definitions, defaults to the store's tree.

        Returns:
            Number of products saved.
        """
        if categories is None:
            categories = self.loader.load_store_tree(store)

        logger.info(
            "Starting Foodora store",
            store=store.store,
            vendor_code=store.vendor_code,
            categories=len(categories),
            delay_ms=self.delay_ms,
        )

        total_products = 0
        for index, definition in enumerate(categories):
            total_products += await self.scrape_category(definition, store)

            if index < len(categories) - 1:
                await asyncio.sleep(self.delay_ms / 1000)

        async with self.session_factory() as session:
            totals = await CatalogWriter(session).totals()

        logger.info(
            "Foodora store complete",
            store=store.store,
            products_saved=total_products,
            total_products=totals["products"],
            total_categories=totals["categories"],
        )
        return total_products

    async def scrape_all_stores(self, stores: list[StoreConfig] | None = None) -> list[StoreScrapeResult]:
        """Scrape stores one after another with a pause between them.

        Args:
            stores: Stores to scrape, defaults to all enabled Foodora stores.

        Returns:
            Per-store results.
        """
        if stores is None:
            stores = self.loader.get_foodora_stores()

        results: list[StoreScrapeResult] = []
        for index, store in enumerate(stores):
            try:
                products = await self.scrape_store(store)
                results.append(
                    StoreScrapeResult(store=store.store, name=store.name, success=True, products=products)
                )
            except Exception as e:
                logger.exception("Store scrape failed", store=store.store, error=str(e))
                results.append(
                    StoreScrapeResult(store=store.store, name=store.name, success=False, error=str(e))
                )

            if index < len(stores) - 1:
                logger.info("Waiting before next store", seconds=self.store_delay_seconds)
                await asyncio.sleep(self.store_delay_seconds)

        return results

    async def get_product_details(self, product_id: str, vendor_code: str) -> SimplifiedProduct:
        """Fetch a product's details and simplify them."""
        response = await self.client.fetch_product_details(product_id, vendor_code)
        return simplify_product(response.data.product_details.product)

    async def close(self) -> None:
        await self.client.close()
