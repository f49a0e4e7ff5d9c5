"""HTTP client for the Meilisearch product index."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from shopscraper.domain.exceptions import SearchIndexError
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.http import BaseHttpClient

logger = structlog.get_logger()


# ============================================================================
# Index Settings
# ============================================================================

SEARCHABLE_ATTRIBUTES = ["name", "brand", "descriptionShort", "descriptionLong", "category"]
FILTERABLE_ATTRIBUTES = [
    "store",
    "categorySlug",
    "categoryKeys",
    "brand",
    "inPromotion",
    "published",
    "price",
]
SORTABLE_ATTRIBUTES = ["price", "name", "scrapedAt"]
RANKING_RULES = ["words", "typo", "proximity", "attribute", "sort", "exactness"]

PRODUCT_INDEX_SETTINGS: dict[str, Any] = {
    "searchableAttributes": SEARCHABLE_ATTRIBUTES,
    "filterableAttributes": FILTERABLE_ATTRIBUTES,
    "sortableAttributes": SORTABLE_ATTRIBUTES,
    "rankingRules": RANKING_RULES,
}

PRIMARY_KEY = "id"


@dataclass
class SearchResult:
    """One page of search hits."""

    hits: list[dict[str, Any]]
    estimated_total_hits: int
    limit: int
    offset: int
    processing_time_ms: int = 0
    query: str = ""

    @property
    def ids(self) -> list[int]:
        return [int(hit[PRIMARY_KEY]) for hit in self.hits if PRIMARY_KEY in hit]

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SearchResult":
        return cls(
            hits=data.get("hits", []),
            estimated_total_hits=data.get("estimatedTotalHits", 0),
            limit=data.get("limit", 0),
            offset=data.get("offset", 0),
            processing_time_ms=data.get("processingTimeMs", 0),
            query=data.get("query", ""),
        )


@dataclass
class SearchQuery:
    """Search request against the product index."""

    q: str = ""
    limit: int = 30
    offset: int = 0
    filters: list[str] = field(default_factory=list)
    sort: list[str] = field(default_factory=list)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"q": self.q, "limit": self.limit, "offset": self.offset}
        if self.filters:
            body["filter"] = " AND ".join(self.filters)
        if self.sort:
            body["sort"] = self.sort
        return body


# ============================================================================
# Client
# ============================================================================


class MeilisearchClient(BaseHttpClient):
    """Client for the Meilisearch REST API.

    Write operations are asynchronous on the Meilisearch side: an accepted
    request (HTTP 202) returns a task summary, which is enough to consider
    a document handed over.

    Example usage:
        client = MeilisearchClient()
        await client.initialize_product_index()
        result = await client.search(SearchQuery(q="mleko", limit=10))
    """

    source = "meilisearch"

    def __init__(
        self,
        host: str | None = None,
        api_key: str | None = None,
        index_uid: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize client.

        Args:
            host: Meilisearch base URL, defaults to settings.
            api_key: Master or admin key, sent as a bearer token.
            index_uid: Product index name.
            timeout: Request timeout in seconds.
        """
        api_key = settings.meilisearch_api_key if api_key is None else api_key
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        super().__init__(
            base_url=(host or settings.meilisearch_host).rstrip("/"),
            timeout=timeout or settings.http_timeout,
            headers=headers,
        )
        self.index_uid = index_uid or settings.meilisearch_index

    async def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and decode the JSON body.

        Raises:
            SearchIndexError: On non-2xx responses or network failures.
        """
        try:
            client = await self._get_client()
            response = await client.request(method, path, json=json, params=params)
        except httpx.RequestError as e:
            logger.error("Meilisearch request failed", method=method, path=path, error=str(e))
            raise SearchIndexError(f"Request failed: {str(e)}") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            logger.error(
                "Meilisearch returned an error",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            raise SearchIndexError(
                f"Meilisearch {method} {path} failed: {message}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        return response.json()

    # ------------------------------------------------------------------
    # Index management
    # ------------------------------------------------------------------

    async def create_index(self) -> dict[str, Any]:
        """Create the product index; an existing index is left as is."""
        try:
            return await self._request(
                "POST",
                "/indexes",
                json={"uid": self.index_uid, "primaryKey": PRIMARY_KEY},
            )
        except SearchIndexError as e:
            if e.status_code == 409:
                return {}
            raise

    async def update_settings(self, index_settings: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"/indexes/{self.index_uid}/settings", json=index_settings)

    async def get_settings(self) -> dict[str, Any]:
        return await self._request("GET", f"/indexes/{self.index_uid}/settings")

    async def initialize_product_index(self) -> dict[str, Any]:
        """Create the product index and apply its settings.

        Returns:
            Task summary of the settings update.
        """
        await self.create_index()
        task = await self.update_settings(PRODUCT_INDEX_SETTINGS)
        logger.info("Configured product index", index=self.index_uid, task_uid=task.get("taskUid"))
        return task

    async def get_task(self, task_uid: int) -> dict[str, Any]:
        return await self._request("GET", f"/tasks/{task_uid}")

    async def wait_for_task(
        self,
        task_uid: int,
        timeout_seconds: float = 30.0,
        interval_seconds: float = 0.5,
    ) -> dict[str, Any]:
        """Poll a task until it succeeds or fails.

        Raises:
            SearchIndexError: If the task failed or did not finish in time.
        """
        elapsed = 0.0
        while True:
            task = await self.get_task(task_uid)
            status = task.get("status")
            if status == "succeeded":
                return task
            if status in ("failed", "canceled"):
                error = task.get("error") or {}
                raise SearchIndexError(f"Task {task_uid} {status}: {error.get('message', '')}")
            if elapsed >= timeout_seconds:
                raise SearchIndexError(f"Task {task_uid} did not finish in {timeout_seconds}s")
            await asyncio.sleep(interval_seconds)
            elapsed += interval_seconds

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def add_documents(self, documents: list[dict[str, Any]]) -> dict[str, Any]:
        """Add or replace documents.

        Args:
            documents: Documents keyed by ``id``.

        Returns:
            Task summary, empty if there was nothing to send.
        """
        if not documents:
            return {}
        return await self._request(
            "POST",
            f"/indexes/{self.index_uid}/documents",
            json=documents,
            params={"primaryKey": PRIMARY_KEY},
        )

    async def delete_document(self, document_id: int | str) -> dict[str, Any]:
        return await self._request("DELETE", f"/indexes/{self.index_uid}/documents/{document_id}")

    async def delete_all_documents(self) -> dict[str, Any]:
        return await self._request("DELETE", f"/indexes/{self.index_uid}/documents")

    async def search(self, query: SearchQuery) -> SearchResult:
        """Run a search against the product index.

        Args:
            query: Query text, paging, filter expressions and sort.

        Returns:
            Hits in ranking order with the estimated total.

        Raises:
            SearchIndexError: If the request fails.
        """
        data = await self._request("POST", f"/indexes/{self.index_uid}/search", json=query.to_body())
        return SearchResult.from_api_response(data)

    async def health(self) -> bool:
        try:
            data = await self._request("GET", "/health")
        except SearchIndexError:
            return False
        return data.get("status") == "available"


# Global client instance
_search_client: MeilisearchClient | None = None


def get_search_client() -> MeilisearchClient:
    """Get the search client singleton.

    Returns:
        MeilisearchClient instance.
    """
    global _search_client
    if _search_client is None:
        _search_client = MeilisearchClient()
    return _search_client


async def close_search_client() -> None:
    global _search_client
    if _search_client is not None:
        await _search_client.close()
        _search_client = None
