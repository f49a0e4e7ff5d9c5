"""Simplified view of a full Foodora product.

Used by the product-details command to print the essentials of a
product: pricing, stock, campaigns and food labelling.
"""

from dataclasses import dataclass, field

from shopscraper.scrapers.foodora.schemas import (
    ActiveCampaign,
    FoodLabelling,
    FoodoraProduct,
    WeightableAttributes,
)


@dataclass
class SimplifiedCampaign:
    name: str
    discount_value: float
    discount_type: str
    end_time: str


@dataclass
class SimplifiedWeight:
    value: float
    unit: str


@dataclass
class SimplifiedProduct:
    """Essentials of a Foodora product.

    Attributes:
        price: Current price in major units.
        original_price: Price before discount in major units.
        discount: Absolute discount, None without a discount.
        discount_percentage: Rounded discount percentage.
        price_per_unit: Label like "45.90 Kč/kg".
        stock: "Out of Stock", "<n> units" or "In Stock".
    """

    id: str
    name: str
    description: str
    price: float
    original_price: float
    discount: float | None
    discount_percentage: int | None
    is_available: bool
    type: str
    image_url: str | None
    sku: str | None
    brand: str | None
    price_per_unit: str | None
    stock: str
    campaigns: list[SimplifiedCampaign] = field(default_factory=list)
    allergens: list[str] = field(default_factory=list)
    nutrition_facts: dict[str, str] = field(default_factory=dict)
    weight: SimplifiedWeight | None = None


def calculate_discount(original_price: float, price: float) -> float | None:
    return round(original_price - price, 2) if original_price > price else None


def calculate_discount_percentage(discount: float | None, original_price: float) -> int | None:
    if not discount or not original_price:
        return None
    return round(discount / original_price * 100)


def extract_campaigns(campaigns: list[ActiveCampaign] | None) -> list[SimplifiedCampaign]:
    return [
        SimplifiedCampaign(
            name=campaign.name,
            discount_value=campaign.discount_value,
            discount_type=campaign.discount_type,
            end_time=campaign.end_time,
        )
        for campaign in campaigns or []
    ]


def extract_allergens(labelling: FoodLabelling | None) -> list[str]:
    if labelling is None or not labelling.allergens:
        return []
    return [value for info in labelling.allergens for value in info.label_values]


def extract_nutrition_facts(labelling: FoodLabelling | None) -> dict[str, str]:
    if labelling is None or not labelling.nutrition_facts:
        return {}
    return {info.label_title: ", ".join(info.label_values) for info in labelling.nutrition_facts}


def extract_weight(attributes: WeightableAttributes | None) -> SimplifiedWeight | None:
    if attributes is None:
        return None
    return SimplifiedWeight(value=attributes.weight_value.value, unit=attributes.weight_value.unit)


def stock_status(is_available: bool, stock_amount: float) -> str:
    if not is_available:
        return "Out of Stock"
    return f"{int(stock_amount)} units" if stock_amount > 0 else "In Stock"


def simplify_product(product: FoodoraProduct) -> SimplifiedProduct:
    """Reduce a full product to its essentials.

    Args:
        product: Product from the product-details response.

    Returns:
        Simplified product.
    """
    price_per_base_unit = product.attribute("pricePerBaseUnit")
    base_unit = product.attribute("baseUnit")
    discount = calculate_discount(product.original_price, product.price)

    return SimplifiedProduct(
        id=product.product_id,
        name=product.name,
        description=product.description,
        price=product.price,
        original_price=product.original_price,
        discount=discount,
        discount_percentage=calculate_discount_percentage(discount, product.original_price),
        is_available=product.is_available,
        type=product.type,
        image_url=product.urls[0] if product.urls else None,
        sku=product.attribute("sku"),
        brand=product.attribute("brand"),
        price_per_unit=(
            f"{price_per_base_unit} Kč/{base_unit}"
            if price_per_base_unit and base_unit
            else None
        ),
        stock=stock_status(product.is_available, product.stock_amount),
        campaigns=extract_campaigns(product.active_campaigns),
        allergens=extract_allergens(product.food_labelling),
        nutrition_facts=extract_nutrition_facts(product.food_labelling),
        weight=extract_weight(product.weightable_attributes),
    )
