"""Order aggregate: an immutable snapshot of a cart with a mutable lifecycle.

Line items, addresses and pricing are fixed at checkout. Fulfillment status
and payment status move independently:

    Fulfillment: pending → confirmed → processing → shipped → delivered,
                 plus cancelled and returned
    Payment:     pending → processing → completed | failed,
                 completed → refunded

Every fulfillment change appends a StatusChange entry; the history is never
rewritten.
"""

import secrets
import string
import time
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.ordering.order.events import (
    OrderPaid,
    OrderPaymentFailed,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    OrderTrackingUpdated,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    CASH_ON_DELIVERY = "cash_on_delivery"


# States from which the owner may cancel
_CANCELLABLE_STATES = {
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
}

# Transitions into these states put stock back when the order was paid
_RESTOCK_STATES = {
    OrderStatus.CANCELLED.value,
    OrderStatus.RETURNED.value,
}

TRACKING_URL_TEMPLATE = "https://track.example.com/{tracking_number}"

_BASE36 = string.digits + string.ascii_uppercase


def _base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_order_number(now_ms: int | None = None) -> str:
    """ORD-<base36 millisecond timestamp>-<3 random base36 characters>."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(3))
    return f"ORD-{_base36(timestamp)}-{suffix}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """A shipping or billing address captured at checkout time."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(max_length=100, default="United States")


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Price breakdown fixed at checkout; total is never recomputed."""

    subtotal = Float(required=True, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)


@storefront.value_object(part_of="Order")
class PaymentDetails:
    method = String(required=True, choices=PaymentMethod)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    payment_intent_id = String(max_length=255)
    paid_at = DateTime()


@storefront.value_object(part_of="Order")
class TrackingInfo:
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    tracking_url = String(max_length=500)
    estimated_delivery = DateTime()
    actual_delivery = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line captured from the cart; independent of later product edits."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    image = String(max_length=500)
    price = Float(required=True, min_value=0.0)  # Unit price including variant modifiers
    quantity = Integer(required=True, min_value=1)
    selected_variants = Text()  # JSON: [{"name", "value", "price_modifier"}]


@storefront.entity(part_of="Order")
class StatusChange:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    changed_by = Identifier()
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address, required=True)
    pricing = ValueObject(OrderPricing, required=True)
    payment = ValueObject(PaymentDetails, required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking = ValueObject(TrackingInfo)
    status_history = HasMany(StatusChange)
    customer_note = String(max_length=500)
    admin_note = String(max_length=500)
    coupon_code = String(max_length=50)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=200)
    inventory_restored = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        user_id,
        items,
        shipping_address,
        billing_address,
        pricing,
        payment_method,
        coupon_code=None,
        customer_note=None,
        is_gift=False,
        gift_message=None,
    ):
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            shipping_address=shipping_address,
            billing_address=billing_address,
            pricing=pricing,
            payment=PaymentDetails(method=payment_method, status=PaymentStatus.PENDING.value),
            status=OrderStatus.PENDING.value,
            coupon_code=coupon_code,
            customer_note=customer_note,
            is_gift=bool(is_gift),
            gift_message=gift_message,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)
        order._record_status(OrderStatus.PENDING.value, "Order placed", user_id, now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                item_count=order.total_items,
                total=pricing.total,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_paid(self) -> bool:
        return self.payment.status == PaymentStatus.COMPLETED.value

    @property
    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED.value

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in _CANCELLABLE_STATES

    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def restocks_on(self, new_status) -> bool:
        """Whether moving to ``new_status`` must put the items back in stock.

        A paid order restocks on its first move into cancelled or returned.
        Stock taken at checkout goes back at most once, whatever path the
        status takes afterwards.
        """
        return new_status in _RESTOCK_STATES and self.is_paid and not self.inventory_restored

    def _claim_restock(self, new_status) -> bool:
        restock = self.restocks_on(new_status)
        if restock:
            self.inventory_restored = True
        return restock

    # -------------------------------------------------------------------
    # Fulfillment status
    # -------------------------------------------------------------------
    def update_status(self, new_status, note=None, actor=None):
        """Set any status; returns True when stock must be restored."""
        valid = [status.value for status in OrderStatus]
        if new_status not in valid:
            raise ValidationError({"status": [f"Invalid status. Must be one of: {', '.join(valid)}"]})

        restock = self._claim_restock(new_status)
        self._transition(new_status, note, actor)
        return restock

    def cancel(self, reason=None, actor=None):
        """Owner cancellation; returns True when stock must be restored."""
        if not self.can_be_cancelled:
            raise ValidationError({"status": [f"Order cannot be cancelled. Current status: {self.status}"]})

        restock = self._claim_restock(OrderStatus.CANCELLED.value)
        self._transition(OrderStatus.CANCELLED.value, reason or "Order cancelled by customer", actor)
        return restock

    def set_tracking(self, carrier=None, tracking_number=None, estimated_delivery=None, actor=None):
        current = self.tracking
        self.tracking = TrackingInfo(
            carrier=carrier if carrier is not None else (current.carrier if current else None),
            tracking_number=tracking_number if tracking_number is not None else (current.tracking_number if current else None),
            tracking_url=(
                TRACKING_URL_TEMPLATE.format(tracking_number=tracking_number)
                if tracking_number
                else (current.tracking_url if current else None)
            ),
            estimated_delivery=estimated_delivery or (current.estimated_delivery if current else None),
            actual_delivery=current.actual_delivery if current else None,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderTrackingUpdated(
                order_id=str(self.id),
                carrier=self.tracking.carrier,
                tracking_number=self.tracking.tracking_number,
                tracking_url=self.tracking.tracking_url,
            )
        )

        if tracking_number and self.status == OrderStatus.PROCESSING.value:
            self._transition(OrderStatus.SHIPPED.value, "Tracking information added", actor)

    def _transition(self, new_status, note, actor):
        now = datetime.now(UTC)
        previous_status = self.status

        self._record_status(new_status, note, actor, now)
        self.status = new_status
        self.updated_at = now

        if new_status == OrderStatus.DELIVERED.value:
            self._stamp_delivery(now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous_status,
                new_status=new_status,
                note=note,
                changed_by=str(actor) if actor else None,
                changed_at=now,
            )
        )

    def _record_status(self, status, note, actor, when):
        self.add_status_history(
            StatusChange(
                status=status,
                note=note,
                changed_by=str(actor) if actor else None,
                changed_at=when,
            )
        )

    def _stamp_delivery(self, when):
        current = self.tracking
        self.tracking = TrackingInfo(
            carrier=current.carrier if current else None,
            tracking_number=current.tracking_number if current else None,
            tracking_url=current.tracking_url if current else None,
            estimated_delivery=current.estimated_delivery if current else None,
            actual_delivery=when,
        )

    # -------------------------------------------------------------------
    # Payment status
    # -------------------------------------------------------------------
    def _update_payment(self, **changes):
        current = self.payment
        values = {
            "method": current.method,
            "status": current.status,
            "transaction_id": current.transaction_id,
            "payment_intent_id": current.payment_intent_id,
            "paid_at": current.paid_at,
        }
        values.update(changes)
        self.payment = PaymentDetails(**values)
        self.updated_at = datetime.now(UTC)

    def ensure_payable(self):
        if self.is_paid:
            raise ValidationError({"order": ["Order is already paid"]})
        if self.is_cancelled:
            raise ValidationError({"order": ["Cannot pay for a cancelled order"]})

    def ensure_refundable(self):
        if not self.is_paid:
            raise ValidationError({"order": ["Order payment is not completed"]})

    def attach_payment_intent(self, payment_intent_id):
        self.ensure_payable()
        self._update_payment(
            method=PaymentMethod.STRIPE.value,
            status=PaymentStatus.PROCESSING.value,
            payment_intent_id=payment_intent_id,
        )

    def mark_as_paid(self, transaction_id, method=None, actor=None):
        """Record a successful payment. Returns False when already recorded.

        A payment that settles after the order was cancelled is recorded, but
        the order stays cancelled so an admin can refund it.
        """
        if self.is_paid:
            return False

        now = datetime.now(UTC)
        self._update_payment(
            method=method or self.payment.method,
            status=PaymentStatus.COMPLETED.value,
            transaction_id=transaction_id,
            paid_at=now,
        )
        if not self.is_cancelled:
            self._transition(OrderStatus.CONFIRMED.value, "Payment received", actor)

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                transaction_id=transaction_id,
                amount=self.pricing.total,
                paid_at=now,
            )
        )
        return True

    def mark_payment_failed(self, reason=None, actor=None):
        """Record a failed payment. Returns False when there is nothing to change.

        A failure reported after a success (reordered delivery) is ignored.
        """
        if self.payment.status in (
            PaymentStatus.COMPLETED.value,
            PaymentStatus.REFUNDED.value,
            PaymentStatus.FAILED.value,
        ):
            return False

        self._update_payment(status=PaymentStatus.FAILED.value)
        if not self.is_cancelled:
            self._transition(OrderStatus.PENDING.value, "Payment failed", actor)

        self.raise_(OrderPaymentFailed(order_id=str(self.id), reason=reason))
        return True

    def refund(self, amount, reason=None, refund_id=None, actor=None):
        """Mark a paid order refunded and returned; returns True when stock must be restored."""
        self.ensure_refundable()

        restock = self._claim_restock(OrderStatus.RETURNED.value)
        self._update_payment(status=PaymentStatus.REFUNDED.value)
        self._transition(OrderStatus.RETURNED.value, reason or "Refund processed", actor)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                amount=amount,
                reason=reason,
                refund_id=refund_id,
            )
        )
        return restock
