"""Tests for health check endpoints."""

from collections.abc import AsyncGenerator, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from shopscraper.infrastructure.database import get_session
from shopscraper.main import app


@pytest.fixture
def fake_session() -> MagicMock:
    """Session whose execute succeeds."""
    session = MagicMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def client(fake_session: MagicMock) -> Generator[TestClient, None, None]:
    """Create test client with the database session replaced."""

    async def override_session() -> AsyncGenerator[MagicMock, None]:
        yield fake_session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "shop-scraper"
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness endpoint returns ready status."""
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["status"] == "ready"


def test_readiness_check_database_down(client: TestClient, fake_session: MagicMock) -> None:
    """Readiness reports 503 when the database does not answer."""
    fake_session.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"


def test_request_id_header(client: TestClient) -> None:
    """Request ID is echoed back in the response headers."""
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
