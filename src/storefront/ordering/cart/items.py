"""Cart item management: commands and handler."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart
from storefront.shared.errors import InsufficientStock, ProductUnavailable
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    selected_variants = Text()  # JSON: [{"name", "value"}]


@storefront.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class RefreshCart:
    """Create the cart if needed and drop lines that can no longer be bought."""

    user_id = Identifier(required=True)


def _available_product(product_id) -> Product:
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_active:
        raise ProductUnavailable({"product_id": ["Product is not available"]})
    return product


def _ensure_stock(product, quantity):
    if not product.has_stock_for(quantity):
        raise InsufficientStock({"quantity": [f"Only {product.inventory.quantity} items available in stock"]})


def _existing_cart(user_id) -> Cart:
    cart = current_domain.repository_for(Cart).for_user(user_id)
    if cart is None:
        raise ObjectNotFoundError({"cart": ["Cart not found"]})
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = _available_product(command.product_id)
        selections = json.loads(command.selected_variants) if command.selected_variants else []
        resolved = product.resolve_variant_selections(selections)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)

        existing = cart.find_line(product.id, resolved)
        _ensure_stock(product, command.quantity + (existing.quantity if existing else 0))

        item = cart.add_item(
            product_id=product.id,
            quantity=command.quantity,
            unit_price=product.price,
            selected_variants=resolved,
        )
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _existing_cart(command.user_id)

        if command.quantity > 0:
            item = cart.find_item(command.item_id)
            product = _available_product(item.product_id)
            _ensure_stock(product, command.quantity)

        cart.update_item_quantity(command.item_id, command.quantity)
        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _existing_cart(command.user_id)
        cart.remove_item(command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return
        cart.clear()
        repo.add(cart)

    @handle(RefreshCart)
    def refresh_cart(self, command):
        repo = current_domain.repository_for(Cart)
        product_repo = current_domain.repository_for(Product)

        cart = repo.for_user(command.user_id)
        if cart is None:
            repo.add(Cart.create(user_id=command.user_id))
            return 0

        stale = []
        for item in cart.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                stale.append(item)
                continue
            if not product.is_active or not product.has_stock_for(item.quantity):
                stale.append(item)

        for item in stale:
            cart.remove_item(item.id)

        if stale:
            repo.add(cart)
            logger.info("Pruned unavailable cart lines", cart_id=str(cart.id), removed=len(stale))

        return len(stale)
