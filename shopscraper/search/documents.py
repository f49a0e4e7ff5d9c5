"""Denormalized search documents built from catalog products."""

from typing import Any

from shopscraper.catalog.models import Product


def product_to_document(product: Product) -> dict[str, Any]:
    """Build the search document for a product.

    The product's categories must be loaded. ``categoryKeys`` lists the
    keys of every linked category so category filters can match any of
    them.

    Args:
        product: Product with categories loaded.

    Returns:
        Document keyed by the product's database id.
    """
    return {
        "id": product.id,
        "store": product.store,
        "productId": product.product_id,
        "sku": product.sku,
        "slug": product.slug,
        "name": product.name,
        "brand": product.brand,
        "descriptionShort": product.description_short,
        "descriptionLong": product.description_long,
        "category": product.category,
        "categorySlug": product.category_slug,
        "categoryKeys": [category.key for category in product.categories],
        "price": product.price,
        "pricePerUnit": product.price_per_unit,
        "inPromotion": product.in_promotion,
        "published": product.published,
        "amount": product.amount,
        "volumeLabelShort": product.volume_label_short,
        "baseUnitShort": product.base_unit_short,
        "images": list(product.images or []),
        "scrapedAt": product.scraped_at.isoformat() if product.scraped_at else None,
    }
