"""Mapping of Foodora products into the unified catalog schema.

Foodora reports prices as floats in major units (CZK); they are
converted to integer minor units.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from slugify import slugify

from shopscraper.catalog.records import ProductRecord
from shopscraper.scrapers.foodora.schemas import FoodoraProduct


def to_minor_units(value: float | str | None) -> int | None:
    """Convert a major-unit amount to integer minor units.

    Rounds half up on the decimal representation, so ``12.50`` becomes
    ``1250`` and ``0.125`` becomes ``13``.

    Args:
        value: Amount in major units.

    Returns:
        Amount in minor units, None if missing or unparsable.
    """
    amount = parse_decimal(value)
    if amount is None:
        return None
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_decimal(value: float | str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation:
        return None


def map_foodora_product(
    product: FoodoraProduct,
    category_name: str,
    category_slug: str,
    store: str,
) -> ProductRecord:
    """Map a Foodora product to a product record.

    Args:
        product: Validated product from a category grouping.
        category_name: Name of the grouping the product came from.
        category_slug: Slug of that grouping's category.
        store: Store code.

    Returns:
        The product record. Brand is not provided by Foodora.
    """
    base_unit = product.attribute("baseUnit")
    price_per_base_unit = product.attribute("pricePerBaseUnit")
    unit_price = parse_decimal(price_per_base_unit)
    in_promotion = product.price < product.original_price
    weight = (
        product.weightable_attributes.weight_value.value
        if product.weightable_attributes
        else None
    )

    return ProductRecord(
        store=store,
        product_id=product.product_id,
        sku=product.attribute("sku") or product.product_id,
        slug=slugify(product.name) or product.product_id,
        name=product.name,
        description_short=product.description or None,
        description_long=product.description or None,
        category=category_name,
        category_slug=category_slug,
        price=to_minor_units(product.price),
        price_per_unit=to_minor_units(price_per_base_unit),
        unit_price=float(unit_price) if unit_price is not None else None,
        regular_price=to_minor_units(product.original_price),
        discount_price=to_minor_units(product.price) if in_promotion else None,
        in_promotion=in_promotion,
        weight=weight or None,
        base_unit_long=base_unit,
        base_unit_short=base_unit,
        images=list(product.urls),
        published=product.is_available,
        medical=False,
        weight_article=product.weightable_attributes is not None,
    )
