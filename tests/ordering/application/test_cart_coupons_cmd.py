"""Application tests for coupon commands."""

from decimal import Decimal

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.ordering.cart.cart import Cart
from storefront.ordering.cart.coupons import (
    ApplyCoupon,
    Coupon,
    DiscountKind,
    RemoveCoupon,
    StaticCouponResolver,
    set_coupon_resolver,
)


def _apply(code, user_id="user-001"):
    return current_domain.process(ApplyCoupon(user_id=user_id, coupon_code=code), asynchronous=False)


def _cart(user_id="user-001"):
    return current_domain.repository_for(Cart).for_user(user_id)


class TestApplyCoupon:
    def test_save10_on_sixty(self, make_product, add_to_cart):
        add_to_cart("user-001", make_product(price=30.0), 2)

        discount = _apply("save10")

        assert discount == 6.0
        cart = _cart()
        assert cart.coupon_code == "SAVE10"
        assert cart.discount == 6.0
        assert cart.total == 54

    def test_minimum_not_met(self, make_product, add_to_cart):
        add_to_cart("user-001", make_product(price=30.0), 1)

        with pytest.raises(ValidationError) as exc:
            _apply("SAVE10")

        assert exc.value.messages["coupon_code"] == ["Minimum order amount of $50.00 required for SAVE10"]
        assert _cart().coupon_code is None

    def test_unknown_code(self, make_product, add_to_cart):
        add_to_cart("user-001", make_product(price=30.0), 2)

        with pytest.raises(ValidationError) as exc:
            _apply("BOGUS")
        assert exc.value.messages["coupon_code"] == ["Invalid coupon code"]

    def test_empty_cart(self):
        with pytest.raises(ValidationError):
            _apply("SAVE10")

    def test_custom_resolver(self, make_product, add_to_cart):
        set_coupon_resolver(StaticCouponResolver([Coupon("WELCOME", DiscountKind.FIXED, Decimal("7.5"))]))
        add_to_cart("user-001", make_product(price=10.0), 1)

        assert _apply("welcome") == 7.5


def test_remove_coupon(make_product, add_to_cart):
    add_to_cart("user-001", make_product(price=30.0), 2)
    _apply("SAVE10")

    current_domain.process(RemoveCoupon(user_id="user-001"), asynchronous=False)

    cart = _cart()
    assert cart.coupon_code is None
    assert cart.discount == 0.0
