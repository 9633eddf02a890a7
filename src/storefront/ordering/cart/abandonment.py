"""Abandoned cart cleanup: command and handler.

Triggered by an external scheduler through ``manage.py cleanup-carts``.
Carts idle beyond the threshold are deleted; a fresh one is created lazily
the next time the user touches their cart.
"""

from datetime import UTC, datetime, timedelta

from protean import handle
from protean.fields import DateTime, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Cart")
class CleanupAbandonedCarts:
    """Delete carts with no activity for ``idle_days`` days."""

    idle_days = Integer(default=30, min_value=1)
    as_of = DateTime()  # Optional: defaults to now


@storefront.command_handler(part_of=Cart)
class CartCleanupHandler:
    @handle(CleanupAbandonedCarts)
    def cleanup_abandoned_carts(self, command):
        as_of = command.as_of or datetime.now(UTC)
        cutoff = as_of - timedelta(days=command.idle_days or 30)

        logger.info("Checking for abandoned carts", cutoff=cutoff.isoformat(), idle_days=command.idle_days)

        repo = current_domain.repository_for(Cart)
        abandoned = repo.idle_since(cutoff)

        for cart in abandoned:
            repo._dao.delete(cart)
            logger.info(
                "Deleted abandoned cart",
                cart_id=str(cart.id),
                user_id=str(cart.user_id),
                item_count=cart.total_items,
                last_activity=str(cart.last_activity),
            )

        logger.info("Cart cleanup complete", deleted_count=len(abandoned))
        return len(abandoned)
