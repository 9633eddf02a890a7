"""Payment intent creation: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.payments.gateway import get_gateway
from storefront.shared.errors import AccessDenied
from storefront.shared.money import to_minor_units
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    is_admin = Boolean(default=False)


def load_order_for_payment(order_id, user_id, is_admin=False) -> Order:
    """Orders are payable by their owner or an administrator."""
    order = current_domain.repository_for(Order).get(order_id)
    if not is_admin and not order.is_owned_by(user_id):
        raise AccessDenied()
    return order


@storefront.command_handler(part_of=Order)
class PaymentIntentHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        order = load_order_for_payment(command.order_id, command.requested_by, command.is_admin)
        order.ensure_payable()

        intent = get_gateway().create_payment_intent(
            amount=to_minor_units(order.pricing.total),
            currency=get_settings().currency,
            metadata={"order_id": str(order.id), "user_id": str(command.requested_by)},
            description=f"Order {order.order_number}",
        )

        order.attach_payment_intent(intent.id)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Payment intent created",
            order_id=str(order.id),
            payment_intent_id=intent.id,
            amount=intent.amount,
        )
        return {"client_secret": intent.client_secret, "payment_intent_id": intent.id}
