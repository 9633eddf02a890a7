"""Tests for the Product aggregate."""

import json

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.product.events import (
    ProductCreated,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductReviewed,
    StockLevelChanged,
)
from storefront.catalogue.product.product import Product, ProductStatus, compute_rating, normalize_tags
from storefront.shared.errors import InsufficientStock


def _make_product(**overrides):
    defaults = {
        "name": "Trail Shoe",
        "description": "Lightweight trail running shoe",
        "price": 80.0,
        "category_id": "cat-001",
        "sku": "SHOE-TRAIL-01",
        "inventory": {"quantity": 10, "low_stock_threshold": 3},
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestProductCreation:
    def test_defaults(self):
        product = _make_product()

        assert product.status == ProductStatus.ACTIVE.value
        assert product.is_active
        assert product.inventory.quantity == 10
        assert product.inventory.track_quantity is True
        assert product.rating_average == 0.0
        assert product.rating_count == 0

    def test_raises_created_event(self):
        product = _make_product()
        assert isinstance(product._events[-1], ProductCreated)
        assert product._events[-1].sku == "SHOE-TRAIL-01"

    def test_tags_are_normalized(self):
        product = _make_product(tags=["Running", " outdoor ", "running"])
        assert product.tag_list == ["running", "outdoor"]

    def test_search_text_covers_name_brand_and_tags(self):
        product = _make_product(brand="Acme", tags=["Outdoor"])
        assert "trail shoe" in product.search_text
        assert "acme" in product.search_text
        assert "outdoor" in product.search_text


class TestImages:
    def test_first_image_is_primary_by_default(self):
        product = _make_product(images=[{"url": "https://cdn.example.com/a.jpg"}, {"url": "https://cdn.example.com/b.jpg"}])

        assert product.images[0].is_primary is True
        assert product.images[1].is_primary is False
        assert product.primary_image == "https://cdn.example.com/a.jpg"

    def test_flagged_image_wins(self):
        product = _make_product(
            images=[{"url": "https://cdn.example.com/a.jpg"}, {"url": "https://cdn.example.com/b.jpg", "is_primary": True}]
        )
        assert product.primary_image == "https://cdn.example.com/b.jpg"

    def test_two_primary_images_are_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(
                images=[
                    {"url": "https://cdn.example.com/a.jpg", "is_primary": True},
                    {"url": "https://cdn.example.com/b.jpg", "is_primary": True},
                ]
            )

    def test_alt_text_defaults_to_name(self):
        product = _make_product(images=[{"url": "https://cdn.example.com/a.jpg"}])
        assert product.images[0].alt_text == "Trail Shoe"


class TestVariants:
    def _with_sizes(self):
        return _make_product(
            variants=[
                {"name": "Size", "options": [{"value": "M"}, {"value": "XL", "price_modifier": 5}]},
                {"name": "Colour", "options": [{"value": "Red"}]},
            ]
        )

    def test_resolves_known_selections_with_modifiers(self):
        product = self._with_sizes()

        resolved = product.resolve_variant_selections([{"name": "Size", "value": "XL"}, {"name": "Colour", "value": "Red"}])

        assert resolved == [
            {"name": "Size", "value": "XL", "price_modifier": 5.0},
            {"name": "Colour", "value": "Red", "price_modifier": 0.0},
        ]

    def test_unknown_groups_and_values_are_dropped(self):
        product = self._with_sizes()

        resolved = product.resolve_variant_selections([{"name": "Size", "value": "XXS"}, {"name": "Fit", "value": "Slim"}])

        assert resolved == []

    def test_duplicate_group_names_are_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(variants=[{"name": "Size", "options": [{"value": "M"}]}, {"name": "size", "options": [{"value": "L"}]}])

    def test_group_without_options_is_rejected(self):
        with pytest.raises(ValidationError):
            _make_product(variants=[{"name": "Size", "options": []}])


class TestDerivedValues:
    def test_sale_percentage(self):
        assert _make_product(price=75.0, compare_price=100.0).sale_percentage == 25

    def test_no_sale_without_higher_compare_price(self):
        assert _make_product(price=75.0).sale_percentage == 0
        assert _make_product(price=75.0, compare_price=70.0).sale_percentage == 0

    def test_low_stock(self):
        assert _make_product(inventory={"quantity": 3, "low_stock_threshold": 3}).is_low_stock
        assert not _make_product(inventory={"quantity": 4, "low_stock_threshold": 3}).is_low_stock
        assert not _make_product(inventory={"quantity": 0}).is_low_stock

    def test_untracked_inventory_is_always_in_stock(self):
        product = _make_product(inventory={"quantity": 0, "track_quantity": False})
        assert product.is_in_stock
        assert product.has_stock_for(1000)


class TestStockMovements:
    def test_remove_stock(self):
        product = _make_product()
        product._events.clear()

        product.remove_stock(4, reason="order ORD-1")

        assert product.inventory.quantity == 6
        event = product._events[-1]
        assert isinstance(event, StockLevelChanged)
        assert (event.previous_quantity, event.new_quantity) == (10, 6)

    def test_cannot_go_below_zero(self):
        product = _make_product()

        with pytest.raises(InsufficientStock):
            product.remove_stock(11)
        assert product.inventory.quantity == 10

    def test_restore_stock(self):
        product = _make_product()
        product.restore_stock(5)
        assert product.inventory.quantity == 15

    def test_untracked_inventory_is_not_moved(self):
        product = _make_product(inventory={"quantity": 2, "track_quantity": False})
        product._events.clear()

        product.remove_stock(5)

        assert product.inventory.quantity == 2
        assert product._events == []


class TestUpdateDetails:
    def test_partial_update_reports_changed_fields(self):
        product = _make_product()
        product._events.clear()

        changed = product.update_details(name="Trail Shoe v2", brand=None)

        assert changed == ["name"]
        assert product.name == "Trail Shoe v2"
        assert isinstance(product._events[-1], ProductDetailsUpdated)
        assert json.loads(product._events[-1].changed_fields) == ["name"]

    def test_price_change_raises_price_event(self):
        product = _make_product()
        product._events.clear()

        product.update_details(price=70.0)

        price_events = [e for e in product._events if isinstance(e, ProductPriceChanged)]
        assert len(price_events) == 1
        assert (price_events[0].previous_price, price_events[0].new_price) == (80.0, 70.0)

    def test_no_changes_raise_nothing(self):
        product = _make_product()
        product._events.clear()

        assert product.update_details(name="Trail Shoe") == []
        assert product._events == []

    def test_inventory_update_keeps_unspecified_values(self):
        product = _make_product()
        product.update_details(inventory={"quantity": 2})

        assert product.inventory.quantity == 2
        assert product.inventory.low_stock_threshold == 3


class TestReviews:
    def test_rating_is_recomputed(self):
        product = _make_product()
        product.add_review(user_id="user-1", rating=5, comment="Great")
        product.add_review(user_id="user-2", rating=4, comment="Good")

        assert product.rating_average == 4.5
        assert product.rating_count == 2
        assert isinstance(product._events[-1], ProductReviewed)

    def test_one_review_per_user(self):
        product = _make_product()
        product.add_review(user_id="user-1", rating=5, comment="Great")

        with pytest.raises(ValidationError) as exc:
            product.add_review(user_id="user-1", rating=1, comment="Changed my mind")
        assert "review" in exc.value.messages
        assert product.rating_count == 1

    def test_compute_rating_rounds_to_one_decimal(self):
        assert compute_rating([5, 4, 4]) == (4.3, 3)
        assert compute_rating([]) == (0.0, 0)


def test_normalize_tags_skips_blanks():
    assert normalize_tags(["", "  ", "Sale"]) == ["sale"]
