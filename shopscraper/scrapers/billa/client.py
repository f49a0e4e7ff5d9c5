"""HTTP client for the Billa product-discovery API."""

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from shopscraper.domain.exceptions import UpstreamError, UpstreamSchemaError
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.http import BaseHttpClient

logger = structlog.get_logger()


class BillaProductPage(BaseModel):
    """One page of a category product listing.

    Missing ``results`` or a null value means an empty page; a missing
    ``count`` falls back to the number of results. Any other shape,
    including a body that is not an object or a null ``total``, fails
    validation.
    """

    results: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    offset: int = 0
    total: int = 0

    @field_validator("results", mode="before")
    @classmethod
    def null_results_are_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def default_count(self) -> "BillaProductPage":
        if "count" not in self.model_fields_set:
            self.count = len(self.results)
        return self

    @classmethod
    def from_api_response(cls, data: Any) -> "BillaProductPage":
        """Validate a decoded response body.

        Raises:
            pydantic.ValidationError: If the body does not match.
        """
        return cls.model_validate(data)

    @property
    def is_last(self) -> bool:
        return self.offset >= self.total


class BillaClient(BaseHttpClient):
    """Client for category product listings.

    Example usage:
        client = BillaClient()
        page = await client.fetch_products("ovoce-a-zelenina-1165", page=0)
        await client.close()
    """

    source = "billa"

    def __init__(
        self,
        base_url: str | None = None,
        store_id: str | None = None,
        page_size: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Categories endpoint base, defaults to settings.
            store_id: Billa store id, defaults to settings.
            page_size: Products per page, defaults to settings.
            timeout: Request timeout in seconds.
        """
        super().__init__(
            base_url=base_url or settings.billa_api_base_url,
            timeout=timeout or settings.http_timeout,
            headers={"Accept": "application/json"},
        )
        self.store_id = store_id or settings.billa_store_id
        self.page_size = page_size or settings.billa_page_size

    async def fetch_products(self, category_slug: str, page: int = 0) -> BillaProductPage:
        """Fetch one page of products for a category.

        Args:
            category_slug: Upstream category slug.
            page: Zero-based page number.

        Returns:
            The page.

        Raises:
            UpstreamError: On non-200 responses or network failures.
            UpstreamSchemaError: If the body is not JSON or not a product page.
        """
        params: dict[str, Any] = {
            "sortBy": "relevance",
            "storeId": self.store_id,
            "enableStatistics": "true",
            "enablePersonalization": "true",
            "page": page,
            "pageSize": self.page_size,
        }

        try:
            client = await self._get_client()
            logger.debug("Fetching Billa products", category=category_slug, page=page)
            response = await client.get(f"/{category_slug}/products", params=params)

            if response.status_code != 200:
                raise UpstreamError(
                    self.source,
                    f"Failed to fetch products for {category_slug} page {page}: HTTP {response.status_code}",
                    response.status_code,
                )

            try:
                data = response.json()
            except ValueError as e:
                raise UpstreamSchemaError(
                    self.source, f"Invalid JSON for {category_slug} page {page}"
                ) from e

            try:
                return BillaProductPage.from_api_response(data)
            except ValidationError as e:
                logger.error(
                    "Unexpected Billa page shape",
                    category=category_slug,
                    page=page,
                    errors=e.error_count(),
                )
                raise UpstreamSchemaError(
                    self.source,
                    f"Invalid product page for {category_slug} page {page}",
                    errors=e.errors(include_url=False),
                ) from e

        except httpx.RequestError as e:
            logger.error(
                "Billa API request failed",
                category=category_slug,
                page=page,
                error=str(e),
            )
            raise UpstreamError(self.source, f"Request failed: {str(e)}") from e
