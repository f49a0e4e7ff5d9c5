"""Tests for the catalog read services."""

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.catalog.records import ProductRecord
from shopscraper.catalog.repository import (
    CategoryRepository,
    ProductCategoryRepository,
    ProductRepository,
)
from shopscraper.catalog.service import (
    CategoryService,
    PaginatedResult,
    PaginationParams,
    ProductFilter,
    ProductService,
    build_search_filters,
    quote_filter_value,
)
from shopscraper.domain.exceptions import SearchIndexError
from shopscraper.search.client import SearchQuery, SearchResult


def search_result(ids: list[int], total: int | None = None) -> SearchResult:
    return SearchResult(
        hits=[{"id": pk} for pk in ids],
        estimated_total_hits=len(ids) if total is None else total,
        limit=30,
        offset=0,
    )


@pytest.fixture
def search_client() -> MagicMock:
    client = MagicMock()
    client.search = AsyncMock(return_value=search_result([]))
    return client


class TestPagination:
    def test_offset(self) -> None:
        assert PaginationParams(page=3, page_size=20).offset == 40
        assert PaginationParams().limit == 30

    def test_page_flags(self) -> None:
        result = PaginatedResult(items=[], total=61, page=2, page_size=30)
        assert result.total_pages == 3
        assert result.has_next
        assert result.has_prev

    def test_empty(self) -> None:
        result = PaginatedResult.empty(PaginationParams(page=4, page_size=10))
        assert result.items == []
        assert result.total == 0
        assert result.page == 4
        assert result.total_pages == 0
        assert not result.has_next


class TestSearchFilters:
    def test_no_filters(self) -> None:
        assert build_search_filters() == []

    def test_all_filters_in_order(self) -> None:
        filters = build_search_filters(
            store="BILLA",
            category_keys=["1165", "1166"],
            in_promotion=True,
        )
        assert filters == [
            '(categoryKeys = "1165" OR categoryKeys = "1166")',
            'store = "BILLA"',
            "inPromotion = true",
        ]

    def test_false_promotion_adds_nothing(self) -> None:
        assert build_search_filters(in_promotion=False) == []

    def test_quotes_are_escaped(self) -> None:
        assert quote_filter_value('a "b"') == '"a \\"b\\""'

    def test_query_joins_filters_with_and(self) -> None:
        body = SearchQuery(q="mleko", filters=['store = "BILLA"', "inPromotion = true"]).to_body()
        assert body["filter"] == 'store = "BILLA" AND inPromotion = true'
        assert body["q"] == "mleko"


class TestProductService:
    """Tests for search-backed product listing."""

    @pytest.mark.asyncio
    async def test_hits_keep_search_order(
        self,
        session: AsyncSession,
        search_client: MagicMock,
        make_record: Callable[..., ProductRecord],
    ) -> None:
        """Products come back in ranking order, unknown hits are dropped."""
        repo = ProductRepository(session)
        p1 = await repo.upsert(make_record("P1"))
        p2 = await repo.upsert(make_record("P2"))
        p3 = await repo.upsert(make_record("P3"))
        search_client.search.return_value = search_result([p3.id, 9999, p1.id, p2.id], total=42)
        service = ProductService(session, search_client)

        result = await service.get_products(ProductFilter(search="mleko"), PaginationParams(page=2, page_size=4))

        assert [p.product_id for p in result.items] == ["P3", "P1", "P2"]
        assert result.total == 42
        assert result.page == 2
        query = search_client.search.call_args.args[0]
        assert query.q == "mleko"
        assert query.offset == 4
        assert query.limit == 4

    @pytest.mark.asyncio
    async def test_category_expands_to_descendants(
        self,
        session: AsyncSession,
        search_client: MagicMock,
    ) -> None:
        categories = CategoryRepository(session)
        root = await categories.upsert(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165")
        await categories.upsert(key="1166", name="Ovoce", slug="ovoce-1166", parent_id=root.id)
        service = ProductService(session, search_client)

        await service.get_products(
            ProductFilter(category="ovoce-a-zelenina-1165", store="BILLA", in_promotion=True),
            PaginationParams(),
        )

        query = search_client.search.call_args.args[0]
        assert query.filters == [
            '(categoryKeys = "1165" OR categoryKeys = "1166")',
            'store = "BILLA"',
            "inPromotion = true",
        ]

    @pytest.mark.asyncio
    async def test_unknown_category_skips_search(
        self,
        session: AsyncSession,
        search_client: MagicMock,
    ) -> None:
        service = ProductService(session, search_client)

        result = await service.get_products(ProductFilter(category="nope"), PaginationParams())

        assert result.items == []
        assert result.total == 0
        search_client.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_failure_returns_empty_page(
        self,
        session: AsyncSession,
        search_client: MagicMock,
    ) -> None:
        search_client.search.side_effect = SearchIndexError("down", status_code=503)
        service = ProductService(session, search_client)

        result = await service.get_products(ProductFilter(), PaginationParams(page=2))

        assert result.items == []
        assert result.total == 0
        assert result.page == 2

    @pytest.mark.asyncio
    async def test_lookups(
        self,
        session: AsyncSession,
        search_client: MagicMock,
        make_record: Callable[..., ProductRecord],
    ) -> None:
        product = await ProductRepository(session).upsert(make_record("P1", slug="rohlik"))
        service = ProductService(session, search_client)

        assert (await service.get_product(product.id)).product_id == "P1"
        assert (await service.get_product_by_slug("rohlik")).product_id == "P1"
        assert await service.get_product(9999) is None
        assert await service.get_product_by_slug("nope") is None


class TestCategoryService:
    """Tests for relational category browsing."""

    @pytest.mark.asyncio
    async def test_categories_grouped_by_store(
        self,
        session: AsyncSession,
        make_record: Callable[..., ProductRecord],
    ) -> None:
        """Roots are attributed to stores by slug prefix and carry direct counts."""
        categories = CategoryRepository(session)
        billa_root = await categories.upsert(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165")
        billa_child = await categories.upsert(key="1166", name="Ovoce", slug="ovoce-1166", parent_id=billa_root.id)
        dmart_root = await categories.upsert(
            key="foodora-dmart-971c4780", name="Ovoce a zelenina", slug="foodora-dmart-ovoce-a-zelenina-971c4780"
        )
        product = await ProductRepository(session).upsert(make_record("P1"))
        await ProductCategoryRepository(session).link(product.id, [billa_root.id, billa_child.id])
        service = CategoryService(session)

        by_store = await service.get_categories()

        assert set(by_store) == {"BILLA", "FOODORA_DMART"}
        (billa,) = by_store["BILLA"]
        assert billa.category.id == billa_root.id
        assert billa.product_count == 1
        assert [sub.category.id for sub in billa.subcategories] == [billa_child.id]
        assert billa.subcategories[0].product_count == 1
        assert billa.subcategories[0].store == "BILLA"
        (dmart,) = by_store["FOODORA_DMART"]
        assert dmart.category.id == dmart_root.id
        assert dmart.product_count == 0

    @pytest.mark.asyncio
    async def test_store_filter(
        self,
        session: AsyncSession,
        make_record: Callable[..., ProductRecord],
    ) -> None:
        categories = CategoryRepository(session)
        billa_root = await categories.upsert(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165")
        await categories.upsert(
            key="foodora-dmart-971c4780", name="Ovoce a zelenina", slug="foodora-dmart-ovoce-a-zelenina-971c4780"
        )
        product = await ProductRepository(session).upsert(make_record("P1", store="FOODORA_DMART"))
        await ProductCategoryRepository(session).link(product.id, [billa_root.id])
        service = CategoryService(session)

        by_store = await service.get_categories(store="BILLA")

        assert list(by_store) == ["BILLA"]
        assert by_store["BILLA"][0].product_count == 0

    @pytest.mark.asyncio
    async def test_category_products_include_descendants(
        self,
        session: AsyncSession,
        make_record: Callable[..., ProductRecord],
    ) -> None:
        categories = CategoryRepository(session)
        root = await categories.upsert(key="1165", name="Ovoce a zelenina", slug="ovoce-a-zelenina-1165")
        child = await categories.upsert(key="1166", name="Ovoce", slug="ovoce-1166", parent_id=root.id)
        products = ProductRepository(session)
        links = ProductCategoryRepository(session)
        on_root = await products.upsert(make_record("P1", name="Brambory"))
        on_child = await products.upsert(make_record("P2", name="Avokádo"))
        await links.link(on_root.id, [root.id])
        await links.link(on_child.id, [child.id])
        service = CategoryService(session)

        result = await service.get_category_products("ovoce-a-zelenina-1165", PaginationParams())

        assert result.category.id == root.id
        assert [p.product_id for p in result.products.items] == ["P2", "P1"]
        assert result.products.total == 2

        only_child = await service.get_category_products("ovoce-1166", PaginationParams())
        assert [p.product_id for p in only_child.products.items] == ["P2"]

    @pytest.mark.asyncio
    async def test_unknown_category_products(self, session: AsyncSession) -> None:
        service = CategoryService(session)

        result = await service.get_category_products("nope", PaginationParams())

        assert result.category is None
        assert result.products.items == []
