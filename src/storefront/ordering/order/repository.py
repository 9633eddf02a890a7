"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.shared.pagination import Page


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def listing(self, user_id=None, status=None, page: int = 1, limit: int = 10) -> Page:
        """Newest orders first; ``user_id`` None lists every user's orders."""
        query = self._dao.query
        if user_id is not None:
            query = query.filter(user_id=str(user_id))
        if status:
            query = query.filter(status=status)

        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return Page(items=result.items, total=result.total, page=page, limit=limit)

    def placed_between(self, start, end, limit: int = 10000) -> list[Order]:
        query = self._dao.query.filter(created_at__gte=start, created_at__lte=end)
        return query.order_by("-created_at").limit(limit).all().items
