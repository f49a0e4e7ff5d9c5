"""Tests for mapping Foodora products."""

from collections.abc import Callable
from typing import Any

import pytest

from shopscraper.scrapers.foodora.mapper import map_foodora_product, parse_decimal, to_minor_units
from shopscraper.scrapers.foodora.schemas import FoodoraProduct


class TestToMinorUnits:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12.5, 1250),
            ("12.50", 1250),
            (0.125, 13),
            (19.99, 1999),
            ("49,90", 4990),
            (0, 0),
            (None, None),
            ("n/a", None),
        ],
    )
    def test_conversion(self, value: float | str | None, expected: int | None) -> None:
        assert to_minor_units(value) == expected

    def test_parse_decimal_strips_whitespace(self) -> None:
        assert str(parse_decimal(" 3.5 ")) == "3.5"


class TestMapFoodoraProduct:
    """Tests for map_foodora_product."""

    def test_regular_price(self, foodora_product: Callable[..., dict[str, Any]]) -> None:
        product = FoodoraProduct.model_validate(foodora_product())

        record = map_foodora_product(product, "Ovoce", "foodora-dmart-ovoce-12f0aeb7", "FOODORA_DMART")

        assert record.store == "FOODORA_DMART"
        assert record.product_id == "f1"
        assert record.sku == "sku-f1"
        assert record.slug == "banany"
        assert record.price == 1250
        assert record.regular_price == 1250
        assert record.discount_price is None
        assert record.in_promotion is False
        assert record.price_per_unit == 4990
        assert record.unit_price == 49.9
        assert record.base_unit_short == "kg"
        assert record.category == "Ovoce"
        assert record.category_slug == "foodora-dmart-ovoce-12f0aeb7"
        assert record.brand is None
        assert record.images == ["https://images.foodora.cz/f1.jpg"]
        assert record.published is True

    def test_discounted_price(self, foodora_product: Callable[..., dict[str, Any]]) -> None:
        product = FoodoraProduct.model_validate(foodora_product(price=12.5, original_price=15.0))

        record = map_foodora_product(product, "Ovoce", "ovoce", "FOODORA_DMART")

        assert record.in_promotion is True
        assert record.price == 1250
        assert record.regular_price == 1500
        assert record.discount_price == 1250

    def test_without_attributes(self, foodora_product: Callable[..., dict[str, Any]]) -> None:
        product = FoodoraProduct.model_validate(foodora_product(attributes=None))

        record = map_foodora_product(product, "Ovoce", "ovoce", "FOODORA_DMART")

        assert record.sku == "f1"
        assert record.price_per_unit is None
        assert record.unit_price is None
        assert record.base_unit_short is None

    def test_weightable_product(self, foodora_product: Callable[..., dict[str, Any]]) -> None:
        product = FoodoraProduct.model_validate(foodora_product(weightableAttributes={
            "weightedOriginalPrice": 25.0,
            "weightedPrice": 25.0,
            "weightValue": {"unit": "kg", "value": 0.5},
        }))

        record = map_foodora_product(product, "Ovoce", "ovoce", "FOODORA_DMART")

        assert record.weight == 0.5
        assert record.weight_article is True

    def test_unavailable_product_is_unpublished(self, foodora_product: Callable[..., dict[str, Any]]) -> None:
        product = FoodoraProduct.model_validate(foodora_product(isAvailable=False))

        record = map_foodora_product(product, "Ovoce", "ovoce", "FOODORA_DMART")

        assert record.published is False
