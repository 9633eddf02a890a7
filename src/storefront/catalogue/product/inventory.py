"""Stock movements shared by checkout, cancellation and refunds.

Every command that checks and then writes product stock is processed through
``process_stock_command``. The handler's unit of work commits inside the
lock, so the sufficiency check and the decrement cannot interleave with
another stock command in this process. ``Product.remove_stock`` refuses to
go below zero, which keeps the decrement conditional even without the lock.
"""

import threading
from collections import OrderedDict

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.shared.errors import InsufficientStock, ProductUnavailable
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_stock_lock = threading.RLock()


def process_stock_command(command):
    with _stock_lock:
        return current_domain.process(command, asynchronous=False)


def required_quantities(lines) -> "OrderedDict[str, int]":
    """Total quantity per product across lines that may repeat a product."""
    totals = OrderedDict()
    for line in lines:
        key = str(line.product_id)
        totals[key] = totals.get(key, 0) + line.quantity
    return totals


def load_available_products(lines) -> dict[str, Product]:
    """Load every product the lines need and confirm it can be sold.

    Raises before anything is written: ``ProductUnavailable`` for a missing or
    inactive product, ``InsufficientStock`` when tracked stock does not cover
    the combined quantity.
    """
    repo = current_domain.repository_for(Product)
    products = {}

    for product_id, quantity in required_quantities(lines).items():
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            raise ProductUnavailable({"product_id": [f"Product {product_id} no longer exists"]}) from None

        if not product.is_active:
            raise ProductUnavailable({"product_id": [f"Product {product.name} is no longer available"]})
        if not product.has_stock_for(quantity):
            raise InsufficientStock(
                {"quantity": [f"Insufficient stock for {product.name}. Only {product.inventory.quantity} available"]}
            )
        products[product_id] = product

    return products


def take_stock(lines, products, reason):
    repo = current_domain.repository_for(Product)
    for product_id, quantity in required_quantities(lines).items():
        product = products[product_id]
        product.remove_stock(quantity, reason=reason)
        repo.add(product)


def restore_stock(lines, reason):
    """Put line quantities back on the shelf; products deleted since are skipped."""
    repo = current_domain.repository_for(Product)
    for product_id, quantity in required_quantities(lines).items():
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Skipping stock restore for missing product", product_id=product_id, quantity=quantity)
            continue
        product.restore_stock(quantity, reason=reason)
        repo.add(product)
