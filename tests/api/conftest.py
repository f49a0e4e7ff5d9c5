"""Fixtures for the read API tests."""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shopscraper.infrastructure.database import get_session
from shopscraper.main import app
from shopscraper.search.client import SearchResult, get_search_client


@pytest.fixture
def search_client() -> MagicMock:
    """Search client returning no hits unless told otherwise."""
    client = MagicMock()
    client.search = AsyncMock(
        return_value=SearchResult(hits=[], estimated_total_hits=0, limit=30, offset=0)
    )
    return client


@pytest_asyncio.fixture
async def api_client(
    session_factory: async_sessionmaker[AsyncSession],
    search_client: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with database and search replaced."""

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_search_client] = lambda: search_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
