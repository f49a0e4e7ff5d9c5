"""API schemas for the read API.

Pydantic models for response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Any = Field(default_factory=list, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for correlation")


class PaginatedResponse(BaseModel):
    """Base paginated response."""

    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Total number of pages")
    has_more: bool = Field(..., description="Whether there are more pages")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRefSchema(BaseModel):
    """Category a product is linked to."""

    id: int = Field(..., description="Category database id")
    key: str = Field(..., description="Natural key")
    name: str = Field(..., description="Display name")
    slug: str = Field(..., description="URL slug")


class CategoryResponse(CategoryRefSchema):
    """Single category."""

    order_hint: str | None = Field(default=None, description="Upstream ordering hint")
    parent_id: int | None = Field(default=None, description="Parent category id")
    created_at: datetime = Field(..., description="When the category was first stored")
    updated_at: datetime = Field(..., description="When the category was last upserted")


class CategorySummarySchema(CategoryRefSchema):
    """Category with product count, as listed per store."""

    parent_id: int | None = Field(default=None, description="Parent category id")
    store: str = Field(..., description="Store the category belongs to")
    product_count: int = Field(..., description="Directly linked products")
    subcategories: list["CategorySummarySchema"] = Field(
        default_factory=list, description="Direct subcategories"
    )


class CategoriesByStoreResponse(BaseModel):
    """Root categories grouped by store."""

    stores: dict[str, list[CategorySummarySchema]] = Field(
        ..., description="Store code to root categories"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductResponse(BaseModel):
    """Product with its categories. Prices are in minor units."""

    id: int = Field(..., description="Product database id")
    store: str = Field(..., description="Store code")
    product_id: str = Field(..., description="Upstream product identifier")
    sku: str = Field(..., description="Stock keeping unit")
    slug: str = Field(..., description="URL slug")
    name: str = Field(..., description="Product name")
    brand: str | None = Field(default=None, description="Brand name")
    description_short: str | None = Field(default=None, description="Short description")
    description_long: str | None = Field(default=None, description="Long description")
    category: str | None = Field(default=None, description="Category label from the scrape")
    category_slug: str | None = Field(default=None, description="Category slug from the scrape")
    price: int | None = Field(default=None, description="Current price")
    price_per_unit: int | None = Field(default=None, description="Price per base unit")
    unit_price: float | None = Field(default=None, description="Upstream per-unit price")
    regular_price: int | None = Field(default=None, description="Price without promotion")
    discount_price: int | None = Field(default=None, description="Promotional price")
    lowest_price: int | None = Field(default=None, description="Lowest recent price")
    in_promotion: bool = Field(..., description="Whether the product is discounted")
    amount: str | None = Field(default=None, description="Package amount")
    weight: float | None = Field(default=None, description="Weight")
    volume_label_short: str | None = Field(default=None, description="Volume label")
    base_unit_short: str | None = Field(default=None, description="Base unit")
    images: list[str] = Field(default_factory=list, description="Image URLs")
    published: bool = Field(..., description="Whether the product is available")
    categories: list[CategoryRefSchema] = Field(
        default_factory=list, description="Linked categories"
    )
    scraped_at: datetime = Field(..., description="When the product was first scraped")
    updated_at: datetime = Field(..., description="When the product was last upserted")


class ProductsListResponse(PaginatedResponse):
    """Paginated list of products."""

    items: list[ProductResponse] = Field(..., description="List of products")


class PromotionsResponse(BaseModel):
    """Products currently in promotion."""

    items: list[ProductResponse] = Field(..., description="List of products")
    count: int = Field(..., description="Number of returned products")


class StoreSchema(BaseModel):
    """Store with its product count."""

    store: str = Field(..., description="Store code")
    product_count: int = Field(..., description="Stored products")


class StoresListResponse(BaseModel):
    """Stores that have products."""

    stores: list[StoreSchema] = Field(..., description="List of stores")


class CategoryProductsResponse(ProductsListResponse):
    """Products of a category and its descendants."""

    category: CategoryResponse = Field(..., description="The requested category")
