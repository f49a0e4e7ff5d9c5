"""Store-independent product record produced by the upstream mappers."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class ProductRecord:
    """A product normalized into the unified catalog schema.

    Prices are integer minor units. ``unit_price`` keeps the upstream
    per-unit figure as a float.
    """

    store: str
    product_id: str
    sku: str
    slug: str
    name: str
    description_short: str | None = None
    description_long: str | None = None
    regulated_product_name: str | None = None
    category: str | None = None
    category_slug: str | None = None
    brand: str | None = None
    brand_slug: str | None = None
    price: int | None = None
    price_per_unit: int | None = None
    unit_price: float | None = None
    regular_price: int | None = None
    discount_price: int | None = None
    lowest_price: int | None = None
    in_promotion: bool = False
    amount: str | None = None
    weight: float | None = None
    package_label: str | None = None
    package_label_key: str | None = None
    volume_label_key: str | None = None
    volume_label_short: str | None = None
    base_unit_long: str | None = None
    base_unit_short: str | None = None
    images: list[str] = field(default_factory=list)
    product_marketing: str | None = None
    brand_marketing: str | None = None
    published: bool = True
    medical: bool = False
    weight_article: bool = False

    def to_row(self) -> dict[str, Any]:
        """Column values for the products table."""
        return asdict(self)
