"""Repository for the User aggregate."""

from protean.utils.query import Q

from storefront.domain import storefront
from storefront.identity.user.user import User
from storefront.shared.pagination import Page

SORTABLE_FIELDS = ("created_at", "email", "first_name", "last_name", "role")


@storefront.repository(part_of=User)
class UserRepository:
    def for_user(self, user_id) -> User | None:
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def find_by_email(self, email: str) -> User | None:
        return self._dao.query.filter(email=email.strip().lower()).all().first

    def listing(
        self,
        search=None,
        role=None,
        is_active=None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        """Users matching the filters, one page at a time.

        ``search`` is a case-insensitive match on first name, last name or
        email. Unknown sort fields fall back to ``created_at``.
        """
        query = self._dao.query
        if search:
            term = search.strip()
            query = query.filter(
                Q(first_name__icontains=term) | Q(last_name__icontains=term) | Q(email__icontains=term)
            )
        if role:
            query = query.filter(role=role)
        if is_active is not None:
            query = query.filter(is_active=is_active)

        field = sort_by if sort_by in SORTABLE_FIELDS else "created_at"
        ordering = field if sort_order == "asc" else f"-{field}"

        result = query.order_by(ordering).offset((page - 1) * limit).limit(limit).all()
        return Page(items=result.items, total=result.total, page=page, limit=limit)

    def registered_since(self, start, limit: int = 10000) -> list[User]:
        return self._dao.query.filter(created_at__gte=start).limit(limit).all().items

    def count(self, **filters) -> int:
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        return query.limit(1).all().total
