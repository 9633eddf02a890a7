"""Applies a payment outcome to an order.

Synchronous confirmation and webhooks both end here, so a duplicated or
reordered delivery lands on the same idempotent order methods: success after
failure is applied, failure after success is ignored.
"""

from storefront.ordering.order.order import PaymentMethod
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def apply_payment_outcome(order, succeeded, payment_intent_id, reason=None, actor=None) -> bool:
    """Record the outcome on ``order``; returns True when the order changed."""
    if succeeded:
        changed = order.mark_as_paid(payment_intent_id, method=PaymentMethod.STRIPE.value, actor=actor)
    else:
        changed = order.mark_payment_failed(reason=reason, actor=actor)

    logger.info(
        "Payment outcome applied" if changed else "Payment outcome already recorded",
        order_id=str(order.id),
        payment_intent_id=payment_intent_id,
        succeeded=succeeded,
        payment_status=order.payment.status,
    )
    return changed
