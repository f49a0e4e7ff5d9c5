"""Catalog services for the read API.

Product listing goes through the search index for ranking and
filtering, then enriches the hits from the relational store. Category
browsing is answered from the relational store alone.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.catalog.definitions import CategoryDefinitionLoader
from shopscraper.catalog.models import Category, Product
from shopscraper.catalog.reconciler import CategoryReconciler
from shopscraper.catalog.repository import CategoryRepository, ProductRepository
from shopscraper.domain.exceptions import SearchIndexError
from shopscraper.search.client import MeilisearchClient, SearchQuery

T = TypeVar("T")

logger = structlog.get_logger()

DEFAULT_PAGE_SIZE = 30


@dataclass
class ProductFilter:
    """Filter parameters for product listing.

    Attributes:
        store: Filter by store code.
        category: Category key or slug, expanded to its descendants.
        search: Free-text query, empty matches everything.
        in_promotion: Only products in promotion when True.
    """

    store: str | None = None
    category: str | None = None
    search: str | None = None
    in_promotion: bool | None = None


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        page_size: Items per page.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        """Get limit (alias for page_size)."""
        return self.page_size


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page.
        page_size: Items per page.
        total_pages: Total number of pages.
    """

    items: list[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.page_size - 1) // self.page_size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 1

    @classmethod
    def empty(cls, pagination: PaginationParams) -> "PaginatedResult[T]":
        return cls(items=[], total=0, page=pagination.page, page_size=pagination.page_size)


def quote_filter_value(value: str) -> str:
    """Quote a value for a Meilisearch filter expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_search_filters(
    store: str | None = None,
    category_keys: list[str] | None = None,
    in_promotion: bool | None = None,
) -> list[str]:
    """Build filter expressions, joined with AND by the search query.

    Args:
        store: Store code.
        category_keys: Keys matched with OR against ``categoryKeys``.
        in_promotion: Adds ``inPromotion = true`` when True.

    Returns:
        Filter expressions.
    """
    filters: list[str] = []
    if category_keys:
        alternatives = " OR ".join(f"categoryKeys = {quote_filter_value(key)}" for key in category_keys)
        filters.append(f"({alternatives})")
    if store:
        filters.append(f"store = {quote_filter_value(store)}")
    if in_promotion:
        filters.append("inPromotion = true")
    return filters


class ProductService:
    """Service for product reads.

    Example usage:
        async with async_session_factory() as session:
            service = ProductService(session, MeilisearchClient())
            result = await service.get_products(
                ProductFilter(category="ovoce-a-zelenina-1165"),
                PaginationParams(page=2),
            )
    """

    def __init__(self, session: AsyncSession, search_client: MeilisearchClient) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            search_client: Product index client.
        """
        self.session = session
        self.search_client = search_client
        self.repository = ProductRepository(session)
        self.reconciler = CategoryReconciler(session)

    async def get_products(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
    ) -> PaginatedResult[Product]:
        """List products ranked by the search index.

        A category filter covers the category and all its descendants;
        one that resolves to nothing yields an empty page. A failing
        search index also yields an empty page.

        Args:
            filters: Filter parameters.
            pagination: Pagination parameters.

        Returns:
            Products in search ranking order with categories loaded.
        """
        category_keys: list[str] | None = None
        if filters.category:
            category_keys = await self.reconciler.get_all_descendant_category_keys(filters.category)
            if not category_keys:
                logger.info("Category filter resolved to nothing", category=filters.category)
                return PaginatedResult.empty(pagination)

        query = SearchQuery(
            q=filters.search or "",
            limit=pagination.limit,
            offset=pagination.offset,
            filters=build_search_filters(filters.store, category_keys, filters.in_promotion),
        )

        try:
            result = await self.search_client.search(query)
        except SearchIndexError as e:
            logger.error("Product search failed", query=query.q, filters=query.filters, error=str(e))
            return PaginatedResult.empty(pagination)

        products = await self.repository.get_many(result.ids)
        by_id = {product.id: product for product in products}
        ordered = [by_id[product_id] for product_id in result.ids if product_id in by_id]

        return PaginatedResult(
            items=ordered,
            total=result.estimated_total_hits,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def get_product(self, product_pk: int) -> Product | None:
        return await self.repository.get_by_id(product_pk)

    async def get_product_by_slug(self, slug: str) -> Product | None:
        return await self.repository.get_by_slug(slug)

    async def get_promotions(self, limit: int = DEFAULT_PAGE_SIZE, store: str | None = None) -> list[Product]:
        """Get published products currently in promotion."""
        return await self.repository.find_promotions(limit=limit, store=store)

    async def get_stores(self) -> list[dict[str, Any]]:
        """Get stores that have products, with their counts."""
        return await self.repository.get_stores()


@dataclass
class CategorySummary:
    """Category with its direct product count and direct subcategories."""

    category: Category
    store: str
    product_count: int
    subcategories: list["CategorySummary"] = field(default_factory=list)


@dataclass
class CategoryProducts:
    """Products of a category and its descendants."""

    category: Category | None
    products: PaginatedResult[Product]


class CategoryService:
    """Service for category browsing.

    Example usage:
        async with async_session_factory() as session:
            service = CategoryService(session)
            by_store = await service.get_categories()
    """

    def __init__(self, session: AsyncSession, loader: CategoryDefinitionLoader | None = None) -> None:
        """Initialize service.

        Args:
            session: Async SQLAlchemy session.
            loader: Store definitions used to attribute categories to stores.
        """
        self.session = session
        self.loader = loader or CategoryDefinitionLoader()
        self.categories = CategoryRepository(session)
        self.products = ProductRepository(session)
        self.reconciler = CategoryReconciler(session)

    async def get_categories(self, store: str | None = None) -> dict[str, list[CategorySummary]]:
        """Get root categories grouped by store.

        The store of a category follows from its slug prefix. Counts are
        of directly linked products, restricted to ``store`` if given.

        Args:
            store: Only return this store's categories.

        Returns:
            Mapping of store code to root categories with subcategories.
        """
        all_categories = await self.categories.find_all()
        counts = await self.categories.get_product_counts(store)

        children_by_parent: dict[int, list[Category]] = {}
        roots: list[Category] = []
        for category in all_categories:
            if category.parent_id is None:
                roots.append(category)
            else:
                children_by_parent.setdefault(category.parent_id, []).append(category)

        by_store: dict[str, list[CategorySummary]] = {}
        for root in roots:
            root_store = self.loader.get_store_for_slug(root.slug)
            if store and root_store != store:
                continue

            subcategories = [
                CategorySummary(
                    category=child,
                    store=root_store,
                    product_count=counts.get(child.id, 0),
                )
                for child in children_by_parent.get(root.id, [])
            ]
            by_store.setdefault(root_store, []).append(
                CategorySummary(
                    category=root,
                    store=root_store,
                    product_count=counts.get(root.id, 0),
                    subcategories=subcategories,
                )
            )

        return by_store

    async def get_category(self, slug: str) -> Category | None:
        return await self.categories.get_by_slug(slug)

    async def get_category_products(
        self,
        slug: str,
        pagination: PaginationParams,
        store: str | None = None,
    ) -> CategoryProducts:
        """Get products of a category and all its descendants.

        Args:
            slug: Category slug.
            pagination: Pagination parameters.
            store: Optional store filter.

        Returns:
            The category (None if unknown) and a page of products.
        """
        category = await self.categories.get_by_slug(slug)
        if category is None:
            return CategoryProducts(category=None, products=PaginatedResult.empty(pagination))

        category_ids = await self.reconciler.get_all_descendant_category_ids(category.key)
        products = await self.products.find_by_category_ids(
            category_ids,
            limit=pagination.limit,
            offset=pagination.offset,
            store=store,
        )
        total = await self.products.count_by_category_ids(category_ids, store=store)

        return CategoryProducts(
            category=category,
            products=PaginatedResult(
                items=products,
                total=total,
                page=pagination.page,
                page_size=pagination.page_size,
            ),
        )
