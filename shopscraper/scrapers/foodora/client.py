"""HTTP client for the Foodora GraphQL API."""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from shopscraper.domain.exceptions import UpstreamError, UpstreamSchemaError
from shopscraper.infrastructure.config import settings
from shopscraper.scrapers.foodora.queries import (
    CATEGORY_ATTRIBUTES,
    CATEGORY_PRODUCTS_QUERY,
    CROSS_SELL_COMPLIANCE_LEVEL,
    CROSS_SELL_IS_DARKSTORE,
    DEFAULT_FEATURE_FLAGS,
    DEFAULT_VENDOR_CODE,
    INCLUDE_CROSS_SELL,
    PRODUCT_DETAILS_QUERY,
)
from shopscraper.scrapers.foodora.schemas import CategoryProductListResponse, ProductDetailsResponse
from shopscraper.scrapers.foodora.sessions import build_headers
from shopscraper.infrastructure.http import BaseHttpClient

logger = structlog.get_logger()


class FoodoraClient(BaseHttpClient):
    """Client for the Foodora category listing and product details.

    Every request carries freshly generated session headers.

    Example usage:
        client = FoodoraClient()
        response = await client.fetch_category_products(
            "971c4780-14f9-4df1-87c5-6386e0e0bc02", vendor_code="o7b0"
        )
        for group in response.groups:
            ...
    """

    source = "foodora"

    def __init__(
        self,
        api_url: str | None = None,
        user_code: str | None = None,
        global_entity_id: str | None = None,
        locale: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_url: GraphQL endpoint, defaults to settings.
            user_code: Customer code sent as userCode.
            global_entity_id: Foodora entity, e.g. "DJ_CZ".
            locale: Request locale, e.g. "cs_CZ".
            timeout: Request timeout in seconds.
        """
        super().__init__(timeout=timeout or settings.http_timeout)
        self.api_url = api_url or settings.foodora_api_url
        self.user_code = user_code or settings.foodora_user_code
        self.global_entity_id = global_entity_id or settings.foodora_global_entity_id
        self.locale = locale or settings.foodora_locale

    def category_variables(self, category_id: str, vendor_code: str) -> dict[str, Any]:
        return {
            "attributes": CATEGORY_ATTRIBUTES,
            "categoryId": category_id,
            "featureFlags": DEFAULT_FEATURE_FLAGS,
            "filterOnSale": False,
            "globalEntityId": self.global_entity_id,
            "isDarkstore": False,
            "locale": self.locale,
            "sort": "Recommended",
            "userCode": self.user_code,
            "vendorID": vendor_code,
        }

    def product_details_variables(self, product_id: str, vendor_code: str) -> dict[str, Any]:
        return {
            "featureFlags": DEFAULT_FEATURE_FLAGS,
            "globalEntityId": self.global_entity_id,
            "locale": self.locale,
            "userCode": self.user_code,
            "vendorCode": vendor_code,
            "productIdentifier": {"type": "ID", "value": product_id},
            "crossSellProductsComplianceLevel": CROSS_SELL_COMPLIANCE_LEVEL,
            "crossSellProductsIsDarkstore": CROSS_SELL_IS_DARKSTORE,
            "includeCrossSell": INCLUDE_CROSS_SELL,
        }

    async def execute(
        self,
        query: str,
        variables: dict[str, Any],
        include_dps_session: bool = True,
    ) -> dict[str, Any]:
        """POST a GraphQL operation.

        Args:
            query: GraphQL document.
            variables: Operation variables.
            include_dps_session: Send the dps-session-id header.

        Returns:
            Decoded JSON body.

        Raises:
            UpstreamError: On non-200 responses or network failures.
            UpstreamSchemaError: If the body is not JSON.
        """
        try:
            client = await self._get_client()
            response = await client.post(
                self.api_url,
                json={"query": query, "variables": variables},
                headers=build_headers(include_dps_session=include_dps_session),
            )

            if response.status_code != 200:
                raise UpstreamError(
                    self.source,
                    f"GraphQL request failed: HTTP {response.status_code}",
                    response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamSchemaError(self.source, "GraphQL response is not JSON") from e

        except httpx.RequestError as e:
            logger.error(
                "Foodora API request failed",
                url=self.api_url,
                error=str(e),
            )
            raise UpstreamError(self.source, f"Request failed: {str(e)}") from e

    async def fetch_category_products(
        self,
        category_id: str,
        vendor_code: str = DEFAULT_VENDOR_CODE,
    ) -> CategoryProductListResponse:
        """Fetch all products of a top-level category.

        The API answers with the category's subcategory groupings, each
        holding its products.

        Args:
            category_id: Upstream category id.
            vendor_code: Vendor to query.

        Returns:
            Validated category product list.

        Raises:
            UpstreamError: On transport failures.
            UpstreamSchemaError: If the response shape does not match.
        """
        data = await self.execute(
            CATEGORY_PRODUCTS_QUERY,
            self.category_variables(category_id, vendor_code),
            include_dps_session=False,
        )
        try:
            return CategoryProductListResponse.model_validate(data)
        except ValidationError as e:
            logger.error(
                "Unexpected category response shape",
                category_id=category_id,
                vendor_code=vendor_code,
                errors=e.error_count(),
                graphql_errors=data.get("errors") if isinstance(data, dict) else None,
            )
            raise UpstreamSchemaError(
                self.source,
                f"Invalid category product list for {category_id}",
                errors=e.errors(include_url=False),
            ) from e

    async def fetch_product_details(
        self,
        product_id: str,
        vendor_code: str = DEFAULT_VENDOR_CODE,
    ) -> ProductDetailsResponse:
        """Fetch the details of one product including food labelling.

        Args:
            product_id: Upstream product id.
            vendor_code: Vendor to query.

        Returns:
            Validated product details.

        Raises:
            UpstreamError: On transport failures.
            UpstreamSchemaError: If the response shape does not match.
        """
        data = await self.execute(
            PRODUCT_DETAILS_QUERY,
            self.product_details_variables(product_id, vendor_code),
        )
        try:
            return ProductDetailsResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamSchemaError(
                self.source,
                f"Invalid product details for {product_id}",
                errors=e.errors(include_url=False),
            ) from e
