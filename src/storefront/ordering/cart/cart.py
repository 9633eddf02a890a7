"""Cart aggregate: one mutable collection of line items per user.

Totals are never stored: ``total_items``, ``subtotal`` and ``total`` are
computed from the lines on every read. The discount is the only stored
amount, written when a coupon is applied and capped at the subtotal of that
moment.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.ordering.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from storefront.shared.money import quantize, to_amount, to_decimal


def selection_key(selections) -> frozenset:
    """Identity of a variant selection: the set of (name, value) pairs."""
    return frozenset((selection["name"], selection["value"]) for selection in selections or [])


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)  # Product price when added
    selected_variants = Text()  # JSON: [{"name", "value", "price_modifier"}]
    added_at = DateTime()

    @property
    def variant_list(self) -> list[dict]:
        return json.loads(self.selected_variants) if self.selected_variants else []

    @property
    def modifier_total(self) -> Decimal:
        return sum((to_decimal(v.get("price_modifier", 0)) for v in self.variant_list), Decimal("0"))

    @property
    def effective_price(self) -> Decimal:
        """Unit price including the captured variant modifiers."""
        return to_decimal(self.unit_price) + self.modifier_total

    @property
    def line_total(self) -> Decimal:
        return self.effective_price * self.quantity


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True)
    items = HasMany(CartItem)
    coupon_code = String(max_length=50)
    discount = Float(default=0.0, min_value=0.0)
    last_activity = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            discount=0.0,
            last_activity=now,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived totals
    # -------------------------------------------------------------------
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> Decimal:
        return quantize(sum((item.line_total for item in self.items), Decimal("0")))

    @property
    def total(self) -> Decimal:
        return max(Decimal("0"), self.subtotal - to_decimal(self.discount))

    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError({"item_id": ["Item not found in cart"]})
        return item

    def find_line(self, product_id, selections):
        key = selection_key(selections)
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and selection_key(i.variant_list) == key
            ),
            None,
        )

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, selected_variants=None):
        """Add a product, merging into an existing line with the same variant selection.

        ``selected_variants`` must already be resolved against the product,
        each entry carrying its captured ``price_modifier``.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.find_line(product_id, selected_variants)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=to_amount(unit_price),
                selected_variants=json.dumps(selected_variants or []),
                added_at=now,
            )
            self.add_items(item)

        self._touch(now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=item.quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity):
        """Overwrite a line's quantity; zero or less removes the line."""
        item = self.find_item(item_id)

        if quantity <= 0:
            self.remove_item(item_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self._touch()

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)
        self._touch()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                product_id=str(item.product_id),
            )
        )

    def clear(self, reason="cleared"):
        """Drop every line along with the coupon and discount."""
        for item in list(self.items):
            self.remove_items(item)
        self.coupon_code = None
        self.discount = 0.0
        self._touch()

        self.raise_(CartCleared(cart_id=str(self.id), user_id=str(self.user_id), reason=reason))

    # -------------------------------------------------------------------
    # Coupons
    # -------------------------------------------------------------------
    def apply_coupon(self, code, discount):
        """Record a coupon and its pre-computed discount, capped at the subtotal."""
        if not self.items:
            raise ValidationError({"coupon_code": ["Cannot apply a coupon to an empty cart"]})

        self.coupon_code = code.strip().upper()
        self.discount = to_amount(min(to_decimal(discount), self.subtotal))
        self._touch()

        self.raise_(CartCouponApplied(cart_id=str(self.id), coupon_code=self.coupon_code, discount=self.discount))

    def remove_coupon(self):
        previous_code = self.coupon_code
        self.coupon_code = None
        self.discount = 0.0
        self._touch()

        if previous_code:
            self.raise_(CartCouponRemoved(cart_id=str(self.id), coupon_code=previous_code))

    def _touch(self, now=None):
        now = now or datetime.now(UTC)
        self.last_activity = now
        self.updated_at = now
