"""Tests for the Cart aggregate: lines, totals and coupons."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.ordering.cart.cart import Cart, selection_key
from storefront.ordering.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)

SIZE_XL = [{"name": "Size", "value": "XL", "price_modifier": 5.0}]
SIZE_M = [{"name": "Size", "value": "M", "price_modifier": 0.0}]


def _cart():
    return Cart.create(user_id="user-001")


class TestCartCreation:
    def test_new_cart_is_empty(self):
        cart = _cart()

        assert len(cart.items) == 0
        assert cart.total_items == 0
        assert cart.subtotal == 0
        assert cart.discount == 0.0
        assert cart.last_activity is not None


class TestAddItem:
    def test_add_new_line(self):
        cart = _cart()
        item = cart.add_item("prod-1", 2, 25.0)

        assert len(cart.items) == 1
        assert item.quantity == 2
        assert item.unit_price == 25.0
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_same_product_and_selection_merges(self):
        cart = _cart()
        cart.add_item("prod-1", 2, 25.0, SIZE_M)
        item = cart.add_item("prod-1", 3, 25.0, SIZE_M)

        assert len(cart.items) == 1
        assert item.quantity == 5
        assert cart._events[-1].line_quantity == 5

    def test_different_selection_is_a_new_line(self):
        cart = _cart()
        cart.add_item("prod-1", 1, 25.0, SIZE_M)
        cart.add_item("prod-1", 1, 25.0, SIZE_XL)

        assert len(cart.items) == 2

    def test_selection_order_does_not_matter(self):
        first = [{"name": "Size", "value": "M"}, {"name": "Colour", "value": "Red"}]
        second = list(reversed(first))
        assert selection_key(first) == selection_key(second)

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _cart().add_item("prod-1", 0, 25.0)


class TestTotals:
    def test_variant_modifiers_are_added_to_the_unit_price(self):
        cart = _cart()
        item = cart.add_item("prod-1", 2, 20.0, SIZE_XL)

        assert item.effective_price == 25
        assert cart.subtotal == 50
        assert cart.total_items == 2

    def test_subtotal_rounds_to_cents(self):
        cart = _cart()
        cart.add_item("prod-1", 3, 0.1)
        assert str(cart.subtotal) == "0.30"

    def test_total_subtracts_discount(self):
        cart = _cart()
        cart.add_item("prod-1", 2, 30.0)
        cart.apply_coupon("save10", 6)

        assert cart.total == 54


class TestUpdateAndRemove:
    def test_update_quantity(self):
        cart = _cart()
        item = cart.add_item("prod-1", 1, 10.0)

        cart.update_item_quantity(item.id, 4)

        assert cart.items[0].quantity == 4
        event = cart._events[-1]
        assert isinstance(event, CartItemQuantityUpdated)
        assert (event.previous_quantity, event.new_quantity) == (1, 4)

    def test_zero_quantity_removes_line(self):
        cart = _cart()
        item = cart.add_item("prod-1", 1, 10.0)

        cart.update_item_quantity(item.id, 0)

        assert len(cart.items) == 0
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_unknown_item(self):
        with pytest.raises(ObjectNotFoundError):
            _cart().remove_item("missing")

    def test_clear_drops_lines_and_coupon(self):
        cart = _cart()
        cart.add_item("prod-1", 2, 30.0)
        cart.apply_coupon("SAVE10", 6)

        cart.clear(reason="checkout")

        assert len(cart.items) == 0
        assert cart.coupon_code is None
        assert cart.discount == 0.0
        assert isinstance(cart._events[-1], CartCleared)
        assert cart._events[-1].reason == "checkout"


class TestCoupons:
    def test_code_is_upper_cased(self):
        cart = _cart()
        cart.add_item("prod-1", 2, 30.0)

        cart.apply_coupon(" save10 ", 6)

        assert cart.coupon_code == "SAVE10"
        assert isinstance(cart._events[-1], CartCouponApplied)

    def test_discount_is_capped_at_subtotal(self):
        cart = _cart()
        cart.add_item("prod-1", 1, 10.0)

        cart.apply_coupon("FREESHIP", 15)

        assert cart.discount == 10.0
        assert cart.total == 0

    def test_empty_cart_cannot_take_a_coupon(self):
        with pytest.raises(ValidationError):
            _cart().apply_coupon("SAVE10", 6)

    def test_remove_coupon(self):
        cart = _cart()
        cart.add_item("prod-1", 2, 30.0)
        cart.apply_coupon("SAVE10", 6)

        cart.remove_coupon()

        assert cart.coupon_code is None
        assert cart.discount == 0.0
        assert isinstance(cart._events[-1], CartCouponRemoved)

    def test_removing_absent_coupon_raises_no_event(self):
        cart = _cart()
        cart._events.clear()
        cart.remove_coupon()
        assert cart._events == []
