"""Category API endpoints.

Provides endpoints for browsing the category forest and the products
of a category including its subcategories.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.api.products import product_to_response
from shopscraper.api.schemas import (
    CategoriesByStoreResponse,
    CategoryProductsResponse,
    CategoryResponse,
    CategorySummarySchema,
    ErrorResponse,
)
from shopscraper.catalog.models import Category
from shopscraper.catalog.service import (
    DEFAULT_PAGE_SIZE,
    CategoryService,
    CategorySummary,
    PaginationParams,
)
from shopscraper.domain.exceptions import CategoryNotFoundError
from shopscraper.infrastructure.database import get_session

router = APIRouter(prefix="/api/categories", tags=["Categories"])


# ============================================================================
# Dependencies
# ============================================================================


def get_category_service(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CategoryService:
    return CategoryService(session)


# ============================================================================
# Converters
# ============================================================================


def category_to_response(category: Category) -> CategoryResponse:
    """Convert Category model to response schema."""
    return CategoryResponse(
        id=category.id,
        key=category.key,
        name=category.name,
        slug=category.slug,
        order_hint=category.order_hint,
        parent_id=category.parent_id,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


def summary_to_schema(summary: CategorySummary) -> CategorySummarySchema:
    category = summary.category
    return CategorySummarySchema(
        id=category.id,
        key=category.key,
        name=category.name,
        slug=category.slug,
        parent_id=category.parent_id,
        store=summary.store,
        product_count=summary.product_count,
        subcategories=[summary_to_schema(child) for child in summary.subcategories],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=CategoriesByStoreResponse,
    summary="List categories by store",
)
async def list_categories(
    service: Annotated[CategoryService, Depends(get_category_service)],
    store: str | None = Query(default=None, description="Store code"),
) -> CategoriesByStoreResponse:
    """List root categories grouped by store.

    Each root carries its product count and its direct subcategories.
    """
    by_store = await service.get_categories(store=store)
    return CategoriesByStoreResponse(
        stores={
            store_code: [summary_to_schema(summary) for summary in summaries]
            for store_code, summaries in by_store.items()
        }
    )


@router.get(
    "/{slug}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(
    slug: str,
    service: Annotated[CategoryService, Depends(get_category_service)],
) -> CategoryResponse:
    category = await service.get_category(slug)
    if category is None:
        raise CategoryNotFoundError(slug)
    return category_to_response(category)


@router.get(
    "/{slug}/products",
    response_model=CategoryProductsResponse,
    responses={404: {"model": ErrorResponse}},
    summary="List category products",
    description="Products linked to the category or any of its descendants.",
)
async def list_category_products(
    slug: str,
    service: Annotated[CategoryService, Depends(get_category_service)],
    store: str | None = Query(default=None, description="Store code"),
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
) -> CategoryProductsResponse:
    """List products of a category and its subcategories.

    Raises:
        CategoryNotFoundError: If the slug is unknown.
    """
    result = await service.get_category_products(
        slug,
        PaginationParams(page=page, page_size=limit),
        store=store,
    )
    if result.category is None:
        raise CategoryNotFoundError(slug)

    page_result = result.products
    return CategoryProductsResponse(
        category=category_to_response(result.category),
        items=[product_to_response(p) for p in page_result.items],
        total=page_result.total,
        page=page_result.page,
        limit=page_result.page_size,
        total_pages=page_result.total_pages,
        has_more=page_result.has_next,
    )
