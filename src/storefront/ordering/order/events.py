"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created from a cart at checkout."""

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The fulfillment status moved; one history entry was appended."""

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_by = Identifier()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """The payment provider reported a successful charge."""

    order_id = Identifier(required=True)
    transaction_id = String(required=True)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentFailed:
    """The payment provider reported a failed charge; the order is back to pending."""

    order_id = Identifier(required=True)
    reason = String()


@storefront.event(part_of="Order")
class OrderTrackingUpdated:
    """Carrier and tracking number were assigned to the order."""

    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    tracking_url = String()


@storefront.event(part_of="Order")
class OrderRefunded:
    """A completed payment was refunded and the order marked returned."""

    order_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    refund_id = String()
