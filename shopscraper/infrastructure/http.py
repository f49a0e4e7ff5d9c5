"""Shared httpx plumbing for the upstream and search index clients."""

import httpx


class BaseHttpClient:
    """Base class for the async HTTP clients.

    Owns a lazily created ``httpx.AsyncClient``. Subclasses set
    ``source`` for error reporting and build requests on top of
    ``_get_client``.
    """

    source = "upstream"

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Base URL for relative request paths.
            timeout: Request timeout in seconds.
            headers: Headers sent with every request.
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
