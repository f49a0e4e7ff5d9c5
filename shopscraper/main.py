"""FastAPI application for the scraped catalog."""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from shopscraper.api.categories import router as categories_router
from shopscraper.api.health import router as health_router
from shopscraper.api.middleware import error_response, setup_middleware
from shopscraper.api.products import router as products_router
from shopscraper.domain.exceptions import (
    CategoryNotFoundError,
    ProductNotFoundError,
    SearchIndexError,
    ShopScraperError,
)
from shopscraper.infrastructure.config import settings
from shopscraper.infrastructure.logging_config import configure_logging
from shopscraper.search.client import close_search_client
from shopscraper.search.sync import SearchIndexSyncer, run_periodic_sync

logger = structlog.get_logger()

ERROR_CODES: dict[type[ShopScraperError], tuple[int, str]] = {
    ProductNotFoundError: (status.HTTP_404_NOT_FOUND, "PRODUCT_NOT_FOUND"),
    CategoryNotFoundError: (status.HTTP_404_NOT_FOUND, "CATEGORY_NOT_FOUND"),
    SearchIndexError: (status.HTTP_503_SERVICE_UNAVAILABLE, "SEARCH_UNAVAILABLE"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and run the outbox sync loop when enabled.

    The loop is off unless ``SEARCH_SYNC_INTERVAL_SECONDS`` is positive;
    deployments can drain the outbox with ``scripts/sync_search_index.py``
    instead.
    """
    configure_logging()
    logger.info("api_starting", version=settings.api_version, debug=settings.debug)

    syncer: SearchIndexSyncer | None = None
    sync_task: asyncio.Task[None] | None = None
    if settings.search_sync_interval_seconds > 0:
        syncer = SearchIndexSyncer()
        sync_task = asyncio.create_task(
            run_periodic_sync(syncer, settings.search_sync_interval_seconds)
        )

    yield

    logger.info("api_stopping")
    if sync_task is not None:
        sync_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sync_task
    if syncer is not None:
        await syncer.close()
    await close_search_client()


async def domain_error_handler(request: Request, exc: ShopScraperError) -> JSONResponse:
    status_code, error_code = ERROR_CODES.get(
        type(exc), (status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")
    )
    if status_code >= 500:
        logger.error("domain_error", path=request.url.path, error=exc.message)
    return error_response(request, status_code, error_code, exc.message, exc.details)


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        return error_response(
            request,
            exc.status_code,
            detail.get("error_code", "ERROR"),
            detail.get("message", str(detail)),
            detail.get("details"),
        )
    return error_response(request, exc.status_code, "ERROR", str(detail))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid query or path parameters in the common envelope."""
    details = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Invalid request parameters",
        details,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )


def create_app() -> FastAPI:
    """Build the read API with its middleware, routers and error handlers."""
    application = FastAPI(
        title="Shop Scraper API",
        description="Read API over scraped grocery products and categories",
        version=settings.api_version,
        lifespan=lifespan,
    )
    setup_middleware(application)

    application.include_router(health_router, tags=["Health"])
    application.include_router(products_router)
    application.include_router(categories_router)

    application.add_exception_handler(ShopScraperError, domain_error_handler)
    application.add_exception_handler(HTTPException, http_error_handler)
    application.add_exception_handler(RequestValidationError, validation_error_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)
    return application


app = create_app()
