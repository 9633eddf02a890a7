"""Order placement: converts the user's cart into an order.

The handler validates every line against the catalogue before touching
anything, then writes the order, decrements stock and clears the cart inside
the same unit of work. Route callers go through ``process_stock_command`` so
the stock check and the decrement are not interleaved with another order.
"""

import json

from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.inventory import load_available_products, take_stock
from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart
from storefront.ordering.order.order import (
    Address,
    Order,
    OrderItem,
    OrderPricing,
    PaymentMethod,
    generate_order_number,
)
from storefront.ordering.order.pricing import quote
from storefront.shared.errors import EmptyCart
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_ORDER_NUMBER_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON address
    billing_address = Text()  # JSON address; defaults to the shipping address
    payment_method = String(required=True, choices=PaymentMethod)
    customer_note = String(max_length=500)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=200)


def _unique_order_number(repo) -> str:
    for _ in range(_ORDER_NUMBER_ATTEMPTS):
        candidate = generate_order_number()
        if repo.find_by_number(candidate) is None:
            return candidate
    raise RuntimeError("Could not allocate a unique order number")


def _snapshot(cart, products) -> list[OrderItem]:
    items = []
    for line in cart.items:
        product = products[str(line.product_id)]
        items.append(
            OrderItem(
                product_id=line.product_id,
                name=product.name,
                image=product.primary_image,
                price=float(line.effective_price),
                quantity=line.quantity,
                selected_variants=line.selected_variants,
            )
        )
    return items


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        if cart is None or not cart.items:
            raise EmptyCart({"cart": ["Cart is empty"]})

        # All checks happen before the first write
        products = load_available_products(cart.items)

        price = quote(cart.subtotal, cart.discount)
        shipping_address = Address(**json.loads(command.shipping_address))
        billing_address = (
            Address(**json.loads(command.billing_address)) if command.billing_address else shipping_address
        )

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=_unique_order_number(order_repo),
            user_id=command.user_id,
            items=_snapshot(cart, products),
            shipping_address=shipping_address,
            billing_address=billing_address,
            pricing=OrderPricing(**price.as_amounts()),
            payment_method=command.payment_method,
            coupon_code=cart.coupon_code,
            customer_note=command.customer_note,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
        )
        order_repo.add(order)

        take_stock(cart.items, products, reason=f"order {order.order_number}")

        cart.clear(reason="checkout")
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            total=order.pricing.total,
        )
        return str(order.id)
