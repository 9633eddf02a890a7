"""Administrator refunds: command and handler."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.inventory import restore_stock
from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.payments.gateway import get_gateway
from storefront.shared.money import to_amount, to_minor_units
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class RefundPayment:
    order_id = Identifier(required=True)
    amount = Float(min_value=0.01)  # Defaults to the order total
    reason = String(max_length=500)
    requested_by = Identifier()


@storefront.command_handler(part_of=Order)
class RefundPaymentHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.ensure_refundable()

        amount = to_amount(command.amount if command.amount is not None else order.pricing.total)
        refund = get_gateway().create_refund(
            payment_intent_id=order.payment.payment_intent_id or order.payment.transaction_id,
            amount=to_minor_units(amount),
            reason=command.reason,
        )

        restock = order.refund(
            amount,
            reason=command.reason or "Refunded by admin",
            refund_id=refund.refund_id,
            actor=command.requested_by,
        )
        repo.add(order)

        if restock:
            restore_stock(order.items, reason=f"order {order.order_number} refunded")

        logger.info(
            "Payment refunded",
            order_id=str(order.id),
            refund_id=refund.refund_id,
            amount=amount,
            restocked=restock,
        )
        return refund.refund_id
