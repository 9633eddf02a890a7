"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, either as a new line or merged into one."""

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was overwritten."""

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    """All lines, the coupon and the discount were removed."""

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    reason = String(required=True)


@storefront.event(part_of="Cart")
class CartCouponApplied:
    """A coupon was accepted and its discount recorded on the cart."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = Float(required=True)


@storefront.event(part_of="Cart")
class CartCouponRemoved:
    """The cart's coupon and discount were cleared."""

    cart_id = Identifier(required=True)
    coupon_code = String(required=True)
