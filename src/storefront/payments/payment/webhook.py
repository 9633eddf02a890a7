"""Payment webhook processing: command and handler.

The HTTP layer verifies the signature and hands over the parsed event.
Only payment-intent outcomes are acted on; other event types are logged and
acknowledged.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.payments.payment.reconciliation import apply_payment_outcome
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


@storefront.command(part_of="Order")
class ProcessPaymentWebhook:
    """Apply a verified provider notification."""

    event_id = String(max_length=255)
    event_type = String(required=True, max_length=100)
    payment_intent_id = String(required=True, max_length=255)
    order_id = Identifier()
    intent_status = String(max_length=50)


@storefront.command_handler(part_of=Order)
class ProcessWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_webhook(self, command):
        if command.event_type not in (PAYMENT_SUCCEEDED, PAYMENT_FAILED):
            logger.info("Unhandled webhook event type", event_id=command.event_id, event_type=command.event_type)
            return False

        if not command.order_id:
            logger.warning("Webhook event without order reference", event_id=command.event_id)
            return False

        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            logger.warning("Webhook for unknown order", event_id=command.event_id, order_id=str(command.order_id))
            return False

        changed = apply_payment_outcome(
            order,
            succeeded=command.event_type == PAYMENT_SUCCEEDED,
            payment_intent_id=command.payment_intent_id,
            reason=f"Payment {command.intent_status or 'failed'}",
        )
        if changed:
            repo.add(order)
        return changed
