"""Repository for the Cart aggregate."""

from storefront.domain import storefront
from storefront.ordering.cart.cart import Cart


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id) -> Cart | None:
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def get_or_create(self, user_id) -> Cart:
        """The user's cart, or a new unsaved one; carts are created lazily."""
        return self.for_user(user_id) or Cart.create(user_id=user_id)

    def idle_since(self, cutoff, limit: int = 500) -> list[Cart]:
        return self._dao.query.filter(last_activity__lt=cutoff).limit(limit).all().items
