"""Tests for the Foodora GraphQL client."""

import base64
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from shopscraper.domain.exceptions import UpstreamError, UpstreamSchemaError
from shopscraper.scrapers.foodora.client import FoodoraClient
from shopscraper.scrapers.foodora.sessions import build_headers, generate_dps_session_id, generate_perseus_id


@pytest.fixture
def client() -> FoodoraClient:
    return FoodoraClient(api_url="https://cz.fd-api.com/api/v5/graphql")


def mock_http(response: httpx.Response | Exception) -> MagicMock:
    http = MagicMock()
    if isinstance(response, Exception):
        http.post = AsyncMock(side_effect=response)
    else:
        http.post = AsyncMock(return_value=response)
    return http


class TestSessionHeaders:
    def test_perseus_id_format(self) -> None:
        timestamp, digits, suffix = generate_perseus_id().split(".")
        assert timestamp.isdigit()
        assert len(digits) == 16 and digits.isdigit()
        assert len(suffix) == 10

    def test_dps_session_payload(self) -> None:
        payload = json.loads(base64.b64decode(generate_dps_session_id("123.456.abc")))
        assert payload["perseus_id"] == "123.456.abc"
        assert len(payload["session_id"]) == 32

    def test_dps_header_is_optional(self) -> None:
        assert "dps-session-id" in build_headers()
        assert "dps-session-id" not in build_headers(include_dps_session=False)

    def test_ids_are_fresh_per_call(self) -> None:
        assert build_headers()["perseus-client-id"] != build_headers()["perseus-client-id"]


class TestFetchCategoryProducts:
    """Tests for FoodoraClient.fetch_category_products."""

    @pytest.mark.asyncio
    async def test_parses_groups(
        self,
        client: FoodoraClient,
        foodora_product: Callable[..., dict[str, Any]],
        category_response: Callable[[list[dict[str, Any]]], dict[str, Any]],
    ) -> None:
        body = category_response([
            {"id": "g1", "name": "Ovoce", "items": [foodora_product("f1"), foodora_product("f2")]},
            {"id": "g2", "name": "Zelenina", "items": []},
        ])
        http = mock_http(httpx.Response(200, json=body))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            response = await client.fetch_category_products("cat-1", vendor_code="o7b0")

        assert [group.name for group in response.groups] == ["Ovoce", "Zelenina"]
        assert [item.product_id for item in response.groups[0].items] == ["f1", "f2"]

        args, kwargs = http.post.call_args
        assert args[0] == "https://cz.fd-api.com/api/v5/graphql"
        variables = kwargs["json"]["variables"]
        assert variables["categoryId"] == "cat-1"
        assert variables["vendorID"] == "o7b0"
        assert "dps-session-id" not in kwargs["headers"]

    @pytest.mark.asyncio
    async def test_null_groups(self, client: FoodoraClient) -> None:
        body = {"data": {"categoryProductList": {"categoryProducts": None}}}
        http = mock_http(httpx.Response(200, json=body))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            response = await client.fetch_category_products("cat-1")

        assert response.groups == []

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises_schema_error(self, client: FoodoraClient) -> None:
        body = {"errors": [{"message": "Unauthorized"}], "data": None}
        http = mock_http(httpx.Response(200, json=body))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            with pytest.raises(UpstreamSchemaError) as exc_info:
                await client.fetch_category_products("cat-1")

        assert exc_info.value.errors

    @pytest.mark.asyncio
    async def test_non_200_raises_upstream_error(self, client: FoodoraClient) -> None:
        http = mock_http(httpx.Response(403, text="Forbidden"))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            with pytest.raises(UpstreamError) as exc_info:
                await client.fetch_category_products("cat-1")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_network_error(self, client: FoodoraClient) -> None:
        http = mock_http(httpx.ReadTimeout("timed out"))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            with pytest.raises(UpstreamError):
                await client.fetch_category_products("cat-1")


class TestFetchProductDetails:
    @pytest.mark.asyncio
    async def test_sends_dps_session(
        self,
        client: FoodoraClient,
        foodora_product: Callable[..., dict[str, Any]],
    ) -> None:
        body = {"data": {"productDetails": {"product": foodora_product("f9")}}}
        http = mock_http(httpx.Response(200, json=body))

        with patch.object(client, "_get_client", new_callable=AsyncMock, return_value=http):
            response = await client.fetch_product_details("f9", vendor_code="obc6")

        assert response.data.product_details.product.product_id == "f9"
        kwargs = http.post.call_args.kwargs
        assert "dps-session-id" in kwargs["headers"]
        assert kwargs["json"]["variables"]["productIdentifier"] == {"type": "ID", "value": "f9"}
        assert kwargs["json"]["variables"]["vendorCode"] == "obc6"
