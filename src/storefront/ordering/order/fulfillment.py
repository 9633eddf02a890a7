"""Order fulfillment: status updates, tracking and cancellation."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.inventory import restore_stock
from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)
    changed_by = Identifier()


@storefront.command(part_of="Order")
class UpdateTracking:
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    estimated_delivery = DateTime()
    changed_by = Identifier()


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    is_admin = Boolean(default=False)
    reason = String(max_length=500)


def load_visible_order(order_id, user_id, is_admin=False):
    """Load an order the caller may see; other users' orders look missing."""
    order = current_domain.repository_for(Order).get(order_id)
    if not is_admin and not order.is_owned_by(user_id):
        raise ObjectNotFoundError(f"Order {order_id} not found")
    return order


@storefront.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status

        restock = order.update_status(command.status, note=command.note, actor=command.changed_by)
        repo.add(order)

        if restock:
            restore_stock(order.items, reason=f"order {order.order_number} {command.status}")

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
            restocked=restock,
        )

    @handle(UpdateTracking)
    def update_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.set_tracking(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            estimated_delivery=command.estimated_delivery,
            actor=command.changed_by,
        )
        repo.add(order)

        logger.info(
            "Tracking updated",
            order_id=str(order.id),
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            status=order.status,
        )

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_visible_order(command.order_id, command.requested_by, command.is_admin)

        restock = order.cancel(reason=command.reason, actor=command.requested_by)
        current_domain.repository_for(Order).add(order)

        if restock:
            restore_stock(order.items, reason=f"order {order.order_number} cancelled")

        logger.info("Order cancelled", order_id=str(order.id), restocked=restock)
