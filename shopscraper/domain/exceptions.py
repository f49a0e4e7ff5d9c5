"""Domain exceptions.

Errors raised by the upstream catalog clients, the search index client
and the read services. The API layer maps them to HTTP responses, the
scraper loops decide per unit of work whether to stop or continue.
"""

from typing import Any


class ShopScraperError(Exception):
    """Base class for all application exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Upstream Errors
# ============================================================================


class UpstreamError(ShopScraperError):
    """Raised when an upstream catalog request fails.

    Covers non-2xx responses and network level failures. Scrapers treat
    it as the end of the current page or category loop.
    """

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize upstream error.

        Args:
            source: Upstream name (e.g., "billa", "foodora").
            message: Error message.
            status_code: HTTP status code if a response was received.
        """
        self.source = source
        self.status_code = status_code
        super().__init__(
            f"[{source}] {message}",
            details={"source": source, "status_code": status_code},
        )


class UpstreamSchemaError(ShopScraperError):
    """Raised when an upstream response does not match the expected shape."""

    def __init__(
        self,
        source: str,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize schema error.

        Args:
            source: Upstream name.
            message: Error message.
            errors: Validation errors as reported by pydantic.
        """
        self.source = source
        self.errors = errors or []
        super().__init__(
            f"[{source}] {message}",
            details={"source": source, "errors": self.errors},
        )


# ============================================================================
# Search Index Errors
# ============================================================================


class SearchIndexError(ShopScraperError):
    """Raised when the search index rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message, details={"status_code": status_code})


# ============================================================================
# Lookup Errors
# ============================================================================


class ProductNotFoundError(ShopScraperError):
    """Raised when a product lookup by id or slug finds nothing."""

    def __init__(self, identifier: str) -> None:
        super().__init__(
            f"Product not found: {identifier}",
            details={"identifier": identifier},
        )


class CategoryNotFoundError(ShopScraperError):
    """Raised when a category lookup by slug finds nothing."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"Category not found: {slug}",
            details={"slug": slug},
        )
