"""Shared fixtures: in-memory database and upstream payload factories."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shopscraper.catalog.records import ProductRecord
from shopscraper.infrastructure.database import create_tables


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the test engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session on the test database."""
    async with session_factory() as session:
        yield session


# ============================================================================
# Payload Factories
# ============================================================================


@pytest.fixture
def make_record() -> Callable[..., ProductRecord]:
    """Build product records with sensible defaults."""

    def factory(product_id: str = "P1", **overrides: Any) -> ProductRecord:
        values: dict[str, Any] = {
            "store": "BILLA",
            "product_id": product_id,
            "sku": f"SKU-{product_id}",
            "slug": f"product-{product_id.lower()}",
            "name": f"Product {product_id}",
            "price": 1990,
            "regular_price": 1990,
        }
        values.update(overrides)
        return ProductRecord(**values)

    return factory


@pytest.fixture
def billa_product() -> Callable[..., dict[str, Any]]:
    """Build raw Billa product objects as returned by the listing."""

    def factory(product_id: str = "84001234", **overrides: Any) -> dict[str, Any]:
        data: dict[str, Any] = {
            "productId": product_id,
            "sku": f"{product_id}-sku",
            "slug": f"jablka-cervena-{product_id}",
            "name": "Jablka červená",
            "descriptionShort": "Červená jablka",
            "descriptionLong": "Sladká červená jablka z Čech",
            "category": "Ovoce",
            "brand": {"name": "Clever", "slug": "clever"},
            "price": {
                "regular": {"value": 3990, "perStandardizedQuantity": 3990},
                "crossed": None,
                "lowestPrice": 3590,
                "baseUnitLong": "kilogram",
                "baseUnitShort": "kg",
            },
            "inPromotion": False,
            "amount": 1,
            "weight": 1.0,
            "volumeLabelShort": "1 kg",
            "images": ["https://cdn.billa.cz/jablka.jpg"],
            "published": True,
            "medical": False,
            "weightArticle": True,
            "parentCategories": [
                [
                    {"key": "1165", "name": "Ovoce a zelenina", "slug": "ovoce-a-zelenina-1165", "orderHint": "0.1"},
                    {"key": "1166", "name": "Ovoce", "slug": "ovoce-1166", "orderHint": "0.2"},
                ]
            ],
        }
        data.update(overrides)
        return data

    return factory


@pytest.fixture
def foodora_product() -> Callable[..., dict[str, Any]]:
    """Build raw Foodora product objects as returned by the GraphQL API."""

    def factory(
        product_id: str = "f1",
        name: str = "Banány",
        price: float = 12.5,
        original_price: float | None = None,
        **overrides: Any,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {
            "attributes": [
                {"key": "sku", "value": f"sku-{product_id}"},
                {"key": "baseUnit", "value": "kg"},
                {"key": "pricePerBaseUnit", "value": "49.90"},
            ],
            "activeCampaigns": None,
            "badges": [],
            "description": f"{name} popis",
            "favourite": False,
            "globalCatalogID": f"gc-{product_id}",
            "isAvailable": True,
            "name": name,
            "nmrAdID": "",
            "originalPrice": price if original_price is None else original_price,
            "packagingCharge": 0.0,
            "parentID": "",
            "price": price,
            "productBadges": None,
            "productID": product_id,
            "stockAmount": 10,
            "stockPrediction": "",
            "tags": [],
            "type": "Product",
            "urls": [f"https://images.foodora.cz/{product_id}.jpg"],
            "vendorID": "o7b0",
            "weightableAttributes": None,
        }
        data.update(overrides)
        return data

    return factory


@pytest.fixture
def category_response() -> Callable[[list[dict[str, Any]]], dict[str, Any]]:
    """Wrap subcategory groupings in a category product list response."""

    def factory(groups: list[dict[str, Any]]) -> dict[str, Any]:
        return {"data": {"categoryProductList": {"categoryProducts": groups}}}

    return factory
