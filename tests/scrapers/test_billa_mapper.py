"""Tests for mapping Billa products."""

from collections.abc import Callable
from typing import Any

import pytest

from shopscraper.scrapers.billa.mapper import map_billa_product, parse_category_paths


class TestMapBillaProduct:
    def test_maps_fields(self, billa_product: Callable[..., dict[str, Any]]) -> None:
        mapped = map_billa_product(billa_product(), "ovoce-a-zelenina-1165")
        record = mapped.record

        assert record.store == "BILLA"
        assert record.product_id == "84001234"
        assert record.name == "Jablka červená"
        assert record.brand == "Clever"
        assert record.brand_slug == "clever"
        assert record.category == "Ovoce"
        assert record.category_slug == "ovoce-a-zelenina-1165"
        assert record.amount == "1"
        assert record.base_unit_short == "kg"
        assert record.images == ["https://cdn.billa.cz/jablka.jpg"]
        assert record.weight_article is True

    def test_prices_stay_in_minor_units(self, billa_product: Callable[..., dict[str, Any]]) -> None:
        record = map_billa_product(billa_product(), "ovoce-a-zelenina-1165").record

        assert record.price == 3990
        assert record.regular_price == 3990
        assert record.price_per_unit == 3990
        assert record.unit_price == 3990.0
        assert record.lowest_price == 3590
        assert record.discount_price is None
        assert record.in_promotion is False

    def test_promotion(self, billa_product: Callable[..., dict[str, Any]]) -> None:
        data = billa_product(inPromotion=True)
        data["price"]["crossed"] = 4990

        record = map_billa_product(data, "ovoce-a-zelenina-1165").record

        assert record.in_promotion is True
        assert record.discount_price == 4990

    def test_missing_optional_fields(self) -> None:
        mapped = map_billa_product({"productId": "1", "name": "Rohlík"}, "pecivo-1198")

        assert mapped.record.sku == "1"
        assert mapped.record.slug == "1"
        assert mapped.record.price is None
        assert mapped.record.brand is None
        assert mapped.record.images == []
        assert mapped.category_paths == []

    def test_missing_product_id_raises(self) -> None:
        with pytest.raises(KeyError):
            map_billa_product({"name": "Rohlík"}, "pecivo-1198")

    def test_category_paths(self, billa_product: Callable[..., dict[str, Any]]) -> None:
        (path,) = map_billa_product(billa_product(), "ovoce-a-zelenina-1165").category_paths

        assert [node.key for node in path] == ["1165", "1166"]
        assert path[0].slug == "ovoce-a-zelenina-1165"
        assert path[0].order_hint == "0.1"


class TestParseCategoryPaths:
    def test_parallel_paths(self) -> None:
        paths = parse_category_paths([
            [{"key": "1", "name": "A", "slug": "a-1"}],
            [{"key": "1", "name": "A", "slug": "a-1"}, {"key": "2", "name": "B", "slug": "b-2"}],
        ])
        assert [[node.key for node in path] for path in paths] == [["1"], ["1", "2"]]

    def test_drops_empty_paths_and_keyless_segments(self) -> None:
        paths = parse_category_paths([[], [{"name": "no key"}], None])
        assert paths == []

    def test_name_and_slug_fall_back_to_key(self) -> None:
        (path,) = parse_category_paths([[{"key": "7"}]])
        assert path[0].name == "7"
        assert path[0].slug == "7"

    def test_none(self) -> None:
        assert parse_category_paths(None) == []
