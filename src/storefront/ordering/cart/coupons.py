"""Coupon rules and the cart commands that apply them.

The cart only stores a code and a discount amount. Coupon rules come from a
``CouponResolver``; ``StaticCouponResolver`` serves a fixed table and can be
swapped with ``set_coupon_resolver()`` for a real promotions service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart
from storefront.shared.money import quantize, to_decimal


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Coupon:
    code: str
    kind: DiscountKind
    value: Decimal
    minimum_subtotal: Decimal = Decimal("0")

    def discount_for(self, subtotal) -> Decimal:
        """Discount this coupon grants on ``subtotal``, never more than the subtotal."""
        subtotal = to_decimal(subtotal)
        if subtotal < self.minimum_subtotal:
            raise ValidationError(
                {"coupon_code": [f"Minimum order amount of ${self.minimum_subtotal:.2f} required for {self.code}"]}
            )

        if self.kind == DiscountKind.PERCENTAGE:
            discount = quantize(subtotal * self.value / 100)
        else:
            discount = quantize(self.value)

        return min(discount, subtotal)


class CouponResolver(ABC):
    @abstractmethod
    def resolve(self, code: str) -> Coupon | None:
        """Return the coupon for ``code``, or None when it is unknown or expired."""
        ...


class StaticCouponResolver(CouponResolver):
    """Coupons from an in-memory table keyed by upper-cased code."""

    DEFAULT_COUPONS = (
        Coupon("SAVE10", DiscountKind.PERCENTAGE, Decimal("10"), Decimal("50")),
        Coupon("SAVE20", DiscountKind.PERCENTAGE, Decimal("20"), Decimal("100")),
        Coupon("FREESHIP", DiscountKind.FIXED, Decimal("15"), Decimal("30")),
    )

    def __init__(self, coupons=None) -> None:
        self.coupons = {coupon.code: coupon for coupon in (coupons or self.DEFAULT_COUPONS)}

    def resolve(self, code: str) -> Coupon | None:
        return self.coupons.get((code or "").strip().upper())


_current_resolver: CouponResolver | None = None


def get_coupon_resolver() -> CouponResolver:
    """Return the active coupon resolver. Defaults to the static table."""
    global _current_resolver
    if _current_resolver is None:
        _current_resolver = StaticCouponResolver()
    return _current_resolver


def set_coupon_resolver(resolver: CouponResolver) -> None:
    global _current_resolver
    _current_resolver = resolver


def reset_coupon_resolver() -> None:
    global _current_resolver
    _current_resolver = None


@storefront.command(part_of="Cart")
class ApplyCoupon:
    user_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@storefront.command(part_of="Cart")
class RemoveCoupon:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCoupon)
    def apply_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None or not cart.items:
            raise ValidationError({"coupon_code": ["Cannot apply a coupon to an empty cart"]})

        coupon = get_coupon_resolver().resolve(command.coupon_code)
        if coupon is None:
            raise ValidationError({"coupon_code": ["Invalid coupon code"]})

        discount = coupon.discount_for(cart.subtotal)
        cart.apply_coupon(coupon.code, discount)
        repo.add(cart)

        return float(discount)

    @handle(RemoveCoupon)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return
        cart.remove_coupon()
        repo.add(cart)
