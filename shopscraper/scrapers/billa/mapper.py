"""Mapping of Billa product objects into the unified catalog schema.

Billa already reports prices in minor units (hellers), they are stored
unchanged.
"""

from dataclasses import dataclass, field
from typing import Any

from shopscraper.catalog.reconciler import CategoryNode
from shopscraper.catalog.records import ProductRecord

BILLA_STORE = "BILLA"


@dataclass
class MappedBillaProduct:
    """A mapped product and the category paths it was listed under."""

    record: ProductRecord
    category_paths: list[list[CategoryNode]] = field(default_factory=list)


def _as_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(round(float(value)))


def _as_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def parse_category_paths(parent_categories: list[list[dict[str, Any]]] | None) -> list[list[CategoryNode]]:
    """Convert ``parentCategories`` into category paths.

    Args:
        parent_categories: Parallel root-to-leaf paths of
            ``{key, name, slug, orderHint}`` objects.

    Returns:
        Paths of category nodes, empty paths dropped.
    """
    paths: list[list[CategoryNode]] = []
    for raw_path in parent_categories or []:
        path = [
            CategoryNode(
                key=segment["key"],
                name=segment.get("name") or segment["key"],
                slug=segment.get("slug") or segment["key"],
                order_hint=segment.get("orderHint"),
            )
            for segment in raw_path or []
            if segment.get("key")
        ]
        if path:
            paths.append(path)
    return paths


def map_billa_product(data: dict[str, Any], category_slug: str) -> MappedBillaProduct:
    """Map a Billa product object to a product record.

    Args:
        data: Product object from the listing ``results``.
        category_slug: Slug of the category being scraped.

    Returns:
        The record with the product's category paths.

    Raises:
        KeyError: If productId or name is missing.
    """
    price = data.get("price") or {}
    regular = price.get("regular") or {}
    brand = data.get("brand") or {}
    per_quantity = regular.get("perStandardizedQuantity")

    record = ProductRecord(
        store=BILLA_STORE,
        product_id=data["productId"],
        sku=data.get("sku") or data["productId"],
        slug=data.get("slug") or data["productId"],
        name=data["name"],
        description_short=data.get("descriptionShort") or None,
        description_long=data.get("descriptionLong") or None,
        regulated_product_name=data.get("regulatedProductName") or None,
        category=data.get("category"),
        category_slug=category_slug,
        brand=brand.get("name") or None,
        brand_slug=brand.get("slug") or None,
        price=_as_int(regular.get("value")),
        price_per_unit=_as_int(per_quantity),
        unit_price=_as_float(per_quantity),
        regular_price=_as_int(regular.get("value")),
        discount_price=_as_int(price.get("crossed")),
        lowest_price=_as_int(price.get("lowestPrice")),
        in_promotion=bool(data.get("inPromotion", False)),
        amount=str(data["amount"]) if data.get("amount") is not None else None,
        weight=_as_float(data.get("weight")),
        package_label=data.get("packageLabel") or None,
        package_label_key=data.get("packageLabelKey") or None,
        volume_label_key=data.get("volumeLabelKey") or None,
        volume_label_short=data.get("volumeLabelShort") or None,
        base_unit_long=price.get("baseUnitLong") or None,
        base_unit_short=price.get("baseUnitShort") or None,
        images=list(data.get("images") or []),
        product_marketing=data.get("productMarketing") or None,
        brand_marketing=data.get("brandMarketing") or None,
        published=bool(data.get("published", True)),
        medical=bool(data.get("medical", False)),
        weight_article=bool(data.get("weightArticle", False)),
    )

    return MappedBillaProduct(
        record=record,
        category_paths=parse_category_paths(data.get("parentCategories")),
    )
