"""Synchronous payment confirmation: command and handler.

The handler always persists the outcome and reports it back. A failed
payment is not raised from here, since that would roll back the recorded
failure; the HTTP layer turns it into a 400.
"""

from dataclasses import dataclass

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.payments.gateway import get_gateway
from storefront.payments.payment.intent import load_order_for_payment
from storefront.payments.payment.reconciliation import apply_payment_outcome


@storefront.command(part_of="Order")
class ConfirmPayment:
    payment_intent_id = String(required=True, max_length=255)
    requested_by = Identifier(required=True)
    is_admin = Boolean(default=False)


@dataclass(frozen=True)
class PaymentConfirmation:
    succeeded: bool
    intent_status: str
    order_id: str


@storefront.command_handler(part_of=Order)
class PaymentConfirmationHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        intent = get_gateway().retrieve_payment_intent(command.payment_intent_id)
        if not intent.order_id:
            raise ObjectNotFoundError("Order not found")

        order = load_order_for_payment(intent.order_id, command.requested_by, command.is_admin)
        apply_payment_outcome(
            order,
            succeeded=intent.succeeded,
            payment_intent_id=intent.id,
            reason=f"Payment {intent.status}",
            actor=command.requested_by,
        )
        current_domain.repository_for(Order).add(order)

        return PaymentConfirmation(succeeded=intent.succeeded, intent_status=intent.status, order_id=str(order.id))
