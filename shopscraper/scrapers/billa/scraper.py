"""Billa category scraper.

Pages through each category listing, persisting products and their
category paths page by page.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopscraper.catalog.definitions import BillaCategory
from shopscraper.domain.exceptions import UpstreamError, UpstreamSchemaError
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.database import async_session_factory
from shopscraper.scrapers.billa.client import BillaClient
from shopscraper.scrapers.billa.mapper import map_billa_product
from shopscraper.scrapers.persistence import CatalogWriter

logger = structlog.get_logger()


@dataclass
class BillaScrapeSummary:
    """Outcome of a full Billa run."""

    products_scraped: int = 0
    per_category: dict[str, int] = field(default_factory=dict)
    total_products: int = 0
    total_categories: int = 0


class BillaScraper:
    """Scraper for the Billa REST catalog.

    Example usage:
        scraper = BillaScraper()
        summary = await scraper.scrape_all_categories(
            CategoryDefinitionLoader().load_billa_categories()
        )
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        client: BillaClient | None = None,
        delay_ms: int | None = None,
    ) -> None:
        """Initialize scraper.

        Args:
            session_factory: Session factory, defaults to the application one.
            client: Billa API client.
            delay_ms: Pause between page requests in milliseconds.
        """
        self.session_factory = session_factory or async_session_factory
        self.client = client or BillaClient()
        self.delay_ms = settings.request_delay_ms if delay_ms is None else delay_ms

    async def save_products(self, results: list[dict[str, Any]], category_slug: str) -> int:
        """Persist one page of products, committing per product.

        A product that fails to map or save is rolled back, logged and
        skipped.

        Args:
            results: Raw product objects.
            category_slug: Slug of the category being scraped.

        Returns:
            Number of products saved.
        """
        saved = 0
        async with self.session_factory() as session:
            writer = CatalogWriter(session)
            for data in results:
                try:
                    mapped = map_billa_product(data, category_slug)
                    category_ids = await writer.reconciler.save_category_paths(mapped.category_paths)
                    await writer.save_product(mapped.record, category_ids)
                    await session.commit()
                    saved += 1
                except Exception as e:
                    await session.rollback()
                    logger.error(
                        "Failed to save product",
                        store="BILLA",
                        product_id=data.get("productId"),
                        name=data.get("name"),
                        error=str(e),
                    )
        return saved

    async def scrape_category(self, category: BillaCategory) -> int:
        """Scrape all pages of one category.

        Starts at page 0 and stops on an empty page, when the reported
        offset reaches the total, or on the first failing page. Products
        saved before a failure stay saved.

        Args:
            category: Category to scrape.

        Returns:
            Number of products saved.
        """
        logger.info("Scraping category", store="BILLA", category=category.name, slug=category.slug)

        page = 0
        total_saved = 0

        while True:
            try:
                result = await self.client.fetch_products(category.slug, page)
            except (UpstreamError, UpstreamSchemaError) as e:
                logger.error(
                    "Failed to fetch page",
                    store="BILLA",
                    category=category.slug,
                    page=page,
                    error=str(e),
                )
                break

            logger.info(
                "Fetched page",
                category=category.slug,
                page=page,
                count=result.count,
                total=result.total,
            )

            if not result.results:
                break

            total_saved += await self.save_products(result.results, category.slug)

            if result.is_last:
                break

            page += 1
            await asyncio.sleep(self.delay_ms / 1000)

        logger.info("Scraped category", category=category.slug, products=total_saved)
        return total_saved

    async def scrape_all_categories(self, categories: list[BillaCategory]) -> BillaScrapeSummary:
        """Scrape categories one after another.

        Args:
            categories: Categories to scrape.

        Returns:
            Per-category counts and database totals.
        """
        logger.info("Starting Billa scraper", categories=len(categories))
        summary = BillaScrapeSummary()

        for category in categories:
            count = await self.scrape_category(category)
            summary.per_category[category.slug] = count
            summary.products_scraped += count

        async with self.session_factory() as session:
            totals = await CatalogWriter(session).totals()
        summary.total_products = totals["products"]
        summary.total_categories = totals["categories"]

        logger.info(
            "Billa scraping complete",
            products_scraped=summary.products_scraped,
            total_products=summary.total_products,
            total_categories=summary.total_categories,
        )
        return summary

    async def close(self) -> None:
        await self.client.close()
