"""Product API endpoints.

Provides endpoints for listing, searching and retrieving products.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shopscraper.api.schemas import (
    CategoryRefSchema,
    ErrorResponse,
    ProductResponse,
    ProductsListResponse,
    PromotionsResponse,
    StoreSchema,
    StoresListResponse,
)
from shopscraper.catalog.models import Product
from shopscraper.catalog.service import (
    DEFAULT_PAGE_SIZE,
    PaginatedResult,
    PaginationParams,
    ProductFilter,
    ProductService,
)
from shopscraper.domain.exceptions import ProductNotFoundError
from shopscraper.infrastructure.database import get_session
from shopscraper.search.client import MeilisearchClient, get_search_client

router = APIRouter(prefix="/api/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_product_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    search_client: Annotated[MeilisearchClient, Depends(get_search_client)],
) -> ProductService:
    return ProductService(session, search_client)


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product model to response schema."""
    return ProductResponse(
        id=product.id,
        store=product.store,
        product_id=product.product_id,
        sku=product.sku,
        slug=product.slug,
        name=product.name,
        brand=product.brand,
        description_short=product.description_short,
        description_long=product.description_long,
        category=product.category,
        category_slug=product.category_slug,
        price=product.price,
        price_per_unit=product.price_per_unit,
        unit_price=product.unit_price,
        regular_price=product.regular_price,
        discount_price=product.discount_price,
        lowest_price=product.lowest_price,
        in_promotion=product.in_promotion,
        amount=product.amount,
        weight=product.weight,
        volume_label_short=product.volume_label_short,
        base_unit_short=product.base_unit_short,
        images=list(product.images or []),
        published=product.published,
        categories=[
            CategoryRefSchema(id=c.id, key=c.key, name=c.name, slug=c.slug)
            for c in product.categories
        ],
        scraped_at=product.scraped_at,
        updated_at=product.updated_at,
    )


def page_to_response(result: PaginatedResult[Product]) -> ProductsListResponse:
    """Convert a page of products to the list response."""
    return ProductsListResponse(
        items=[product_to_response(p) for p in result.items],
        total=result.total,
        page=result.page,
        limit=result.page_size,
        total_pages=result.total_pages,
        has_more=result.has_next,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductsListResponse,
    summary="List products",
    description="Search and filter products. Category filters include all subcategories.",
)
async def list_products(
    service: Annotated[ProductService, Depends(get_product_service)],
    category: str | None = Query(default=None, description="Category key or slug"),
    search: str | None = Query(default=None, description="Free-text query"),
    store: str | None = Query(default=None, description="Store code"),
    in_promotion: bool | None = Query(default=None, alias="inPromotion", description="Only promotions"),
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100, description="Items per page"),
) -> ProductsListResponse:
    """List products ranked by the search index.

    Args:
        service: Product service.
        category: Category key or slug filter.
        search: Free-text query.
        store: Store filter.
        in_promotion: Promotion filter.
        page: Page number.
        limit: Items per page.

    Returns:
        Paginated list of products.
    """
    result = await service.get_products(
        ProductFilter(store=store, category=category, search=search, in_promotion=in_promotion),
        PaginationParams(page=page, page_size=limit),
    )
    return page_to_response(result)


@router.get(
    "/promotions",
    response_model=PromotionsResponse,
    summary="List promotions",
)
async def list_promotions(
    service: Annotated[ProductService, Depends(get_product_service)],
    store: str | None = Query(default=None, description="Store code"),
    limit: int = Query(default=20, ge=1, le=100, description="Maximum products"),
) -> PromotionsResponse:
    products = await service.get_promotions(limit=limit, store=store)
    return PromotionsResponse(
        items=[product_to_response(p) for p in products],
        count=len(products),
    )


@router.get(
    "/stores",
    response_model=StoresListResponse,
    summary="List stores",
)
async def list_stores(
    service: Annotated[ProductService, Depends(get_product_service)],
) -> StoresListResponse:
    stores = await service.get_stores()
    return StoresListResponse(stores=[StoreSchema(**store) for store in stores])


@router.get(
    "/slug/{slug}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product by slug",
)
async def get_product_by_slug(
    slug: str,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductResponse:
    """Get a product by slug.

    Raises:
        ProductNotFoundError: If no product has this slug.
    """
    product = await service.get_product_by_slug(slug)
    if product is None:
        raise ProductNotFoundError(slug)
    return product_to_response(product)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: int,
    service: Annotated[ProductService, Depends(get_product_service)],
) -> ProductResponse:
    """Get a product by database id.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """
    product = await service.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(str(product_id))
    return product_to_response(product)
