"""Wishlist changes: commands and handler.

Only the owner may change a wishlist. Products must exist when added; a
product deleted later stays referenced until the user removes it.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.identity.user.account import load_user
from storefront.identity.user.user import User
from storefront.shared.errors import AccessDenied


@storefront.command(part_of="User")
class AddToWishlist:
    user_id: String(required=True, max_length=255)
    requested_by: String(required=True, max_length=255)
    product_id: Identifier(required=True)


@storefront.command(part_of="User")
class RemoveFromWishlist:
    user_id: String(required=True, max_length=255)
    requested_by: String(required=True, max_length=255)
    product_id: Identifier(required=True)


def _load_own_user(command) -> User:
    if str(command.user_id) != str(command.requested_by):
        raise AccessDenied()
    return load_user(command.user_id)


@storefront.command_handler(part_of=User)
class WishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        user = _load_own_user(command)
        try:
            current_domain.repository_for(Product).get(command.product_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError({"product_id": ["Product not found"]}) from None

        user.add_to_wishlist(command.product_id)
        current_domain.repository_for(User).add(user)
        return user.wishlist_product_ids

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        user = _load_own_user(command)
        if user.remove_from_wishlist(command.product_id):
            current_domain.repository_for(User).add(user)
        return user.wishlist_product_ids
