"""Application tests for cart item commands via domain.process()."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product.management import UpdateProduct
from storefront.ordering.cart.cart import Cart
from storefront.ordering.cart.items import ClearCart, RefreshCart, RemoveCartItem, UpdateCartItem
from storefront.shared.errors import InsufficientStock, ProductUnavailable


def _cart(user_id="user-001"):
    return current_domain.repository_for(Cart).for_user(user_id)


class TestAddToCart:
    def test_first_add_creates_the_cart(self, make_product, add_to_cart):
        product_id = make_product(price=25.0)

        item_id = add_to_cart("user-001", product_id, 2)

        cart = _cart()
        assert str(cart.items[0].id) == item_id
        assert cart.items[0].unit_price == 25.0
        assert cart.total_items == 2

    def test_repeat_add_merges_lines(self, make_product, add_to_cart):
        product_id = make_product()

        first = add_to_cart("user-001", product_id, 1)
        second = add_to_cart("user-001", product_id, 2)

        assert first == second
        assert len(_cart().items) == 1
        assert _cart().items[0].quantity == 3

    def test_variant_selection_captures_modifier(self, make_product, add_to_cart):
        product_id = make_product(
            price=20.0, variants=[{"name": "Size", "options": [{"value": "M"}, {"value": "XL", "price_modifier": 5}]}]
        )

        add_to_cart("user-001", product_id, 1, [{"name": "Size", "value": "XL"}])
        add_to_cart("user-001", product_id, 1, [{"name": "Size", "value": "M"}])

        cart = _cart()
        assert len(cart.items) == 2
        assert cart.subtotal == 45

    def test_stock_check_counts_existing_line(self, make_product, add_to_cart):
        product_id = make_product(quantity=3)
        add_to_cart("user-001", product_id, 2)

        with pytest.raises(InsufficientStock) as exc:
            add_to_cart("user-001", product_id, 2)

        assert exc.value.messages["quantity"] == ["Only 3 items available in stock"]
        assert _cart().items[0].quantity == 2

    def test_inactive_product(self, make_product, add_to_cart):
        product_id = make_product(status="inactive")
        with pytest.raises(ProductUnavailable):
            add_to_cart("user-001", product_id, 1)

    def test_unknown_product(self, add_to_cart):
        with pytest.raises(ObjectNotFoundError):
            add_to_cart("user-001", "no-such-product", 1)


class TestUpdateAndRemove:
    def test_update_quantity_checks_stock(self, make_product, add_to_cart):
        product_id = make_product(quantity=5)
        item_id = add_to_cart("user-001", product_id, 1)

        current_domain.process(UpdateCartItem(user_id="user-001", item_id=item_id, quantity=5), asynchronous=False)
        assert _cart().items[0].quantity == 5

        with pytest.raises(InsufficientStock):
            current_domain.process(UpdateCartItem(user_id="user-001", item_id=item_id, quantity=6), asynchronous=False)

    def test_zero_quantity_removes_line(self, make_product, add_to_cart):
        item_id = add_to_cart("user-001", make_product(), 1)

        current_domain.process(UpdateCartItem(user_id="user-001", item_id=item_id, quantity=0), asynchronous=False)

        assert len(_cart().items) == 0

    def test_remove_item(self, make_product, add_to_cart):
        item_id = add_to_cart("user-001", make_product(), 1)

        current_domain.process(RemoveCartItem(user_id="user-001", item_id=item_id), asynchronous=False)

        assert len(_cart().items) == 0

    def test_update_without_cart(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateCartItem(user_id="user-001", item_id="x", quantity=1), asynchronous=False)

    def test_clear_cart(self, make_product, add_to_cart):
        add_to_cart("user-001", make_product(), 1)

        current_domain.process(ClearCart(user_id="user-001"), asynchronous=False)

        assert len(_cart().items) == 0

    def test_clear_without_cart_is_a_no_op(self):
        current_domain.process(ClearCart(user_id="user-001"), asynchronous=False)
        assert _cart() is None


class TestRefreshCart:
    def test_creates_missing_cart(self):
        removed = current_domain.process(RefreshCart(user_id="user-001"), asynchronous=False)

        assert removed == 0
        assert _cart() is not None

    def test_prunes_unavailable_lines(self, make_product, add_to_cart):
        keep = make_product("Keyboard")
        retired = make_product("Old Mouse")
        add_to_cart("user-001", keep, 1)
        add_to_cart("user-001", retired, 1)

        current_domain.process(UpdateProduct(product_id=retired, status="inactive"), asynchronous=False)
        removed = current_domain.process(RefreshCart(user_id="user-001"), asynchronous=False)

        assert removed == 1
        assert [str(item.product_id) for item in _cart().items] == [keep]

    def test_prunes_lines_beyond_stock(self, make_product, add_to_cart):
        product_id = make_product(quantity=5)
        add_to_cart("user-001", product_id, 4)

        current_domain.process(UpdateProduct(product_id=product_id, inventory=json.dumps({"quantity": 2})), asynchronous=False)
        removed = current_domain.process(RefreshCart(user_id="user-001"), asynchronous=False)

        assert removed == 1
        assert len(_cart().items) == 0
