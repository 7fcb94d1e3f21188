"""Unit tests for the LineItem data carrier."""

from decimal import Decimal

import pytest

from cartcore.domain.model.line_item import LineItem
from tests.fakes import remote_entry


class TestFromProduct:

    def test_price_string_is_normalized(self):
        item = LineItem.from_product({"id": 1, "name": "Mug", "price": "9.99"}, 2)
        assert item.price == Decimal("9.99")
        assert item.quantity == 2

    def test_unparseable_price_becomes_none(self):
        item = LineItem.from_product({"id": 1, "name": "Mug", "price": "n/a"})
        assert item.price is None

    def test_optional_fields_default_to_none(self):
        item = LineItem.from_product({"id": "abc", "name": "Mug", "price": 3})
        assert item.stock is None
        assert item.image is None
        assert item.slug is None

    def test_from_line_item_copies_with_new_quantity(self):
        original = LineItem(id=1, name="Mug", price=Decimal("2"), quantity=1)
        assert LineItem.from_product(original, 4) == original.with_quantity(4)


class TestLineTotal:

    def test_price_times_quantity(self):
        item = LineItem(id=1, name="Mug", price=Decimal("7.99"), quantity=3)
        assert item.line_total == Decimal("23.97")

    def test_missing_price_counts_as_zero(self):
        item = LineItem(id=1, name="Mug", price=None, quantity=3)
        assert item.line_total == Decimal("0")


class TestSerialization:

    def test_dict_round_trip_keeps_price_exact(self):
        item = LineItem(
            id=7, name="Lamp", price=Decimal("19.90"), quantity=2,
            stock=4, image="lamp.jpg", slug="lamp",
        )
        raw = item.to_dict()
        assert raw["price"] == "19.90"
        assert LineItem.from_dict(raw) == item


class TestFromRemoteEntry:

    def test_prefers_thumbnail_url(self):
        item = LineItem.from_remote_entry(remote_entry(5, 2))
        assert item.image == "https://cdn.example.com/5_thumb.jpg"
        assert item.quantity == 2
        assert item.price == Decimal("5.00")

    def test_falls_back_to_image_url(self):
        entry = remote_entry(5, 2)
        entry["product"]["thumbnail_url"] = None
        assert LineItem.from_remote_entry(entry).image == "https://cdn.example.com/5.jpg"

    def test_missing_product_raises(self):
        with pytest.raises(KeyError):
            LineItem.from_remote_entry({"quantity": 1})
