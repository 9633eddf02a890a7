"""Repository for the Product aggregate, with the catalogue's listing queries."""

import json
from dataclasses import dataclass, field
from functools import reduce
from operator import or_

from protean.utils.query import Q

from storefront.catalogue.product.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.shared.pagination import Page

SORT_FIELDS = {
    "created_at": "created_at",
    "price": "price",
    "rating": "rating_average",
    "name": "name",
    "popularity": "rating_count",
}

MAX_PAGE_SIZE = 100


@dataclass
class ProductSearch:
    """Filters, sort and page for a catalogue listing."""

    status: str | None = ProductStatus.ACTIVE.value
    category_ids: list[str] = field(default_factory=list)
    search: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_rating: float | None = None
    brand: str | None = None
    tags: list[str] = field(default_factory=list)
    featured: bool | None = None
    exclude_id: str | None = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 12

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@storefront.repository(part_of=Product)
class ProductRepository:
    def find_by_sku(self, sku: str) -> Product | None:
        return self._dao.query.filter(sku=sku).all().first

    def count_in_categories(self, category_ids) -> int:
        if not category_ids:
            return 0
        return self._dao.query.filter(category_id__in=[str(cid) for cid in category_ids]).all().total

    def search(self, criteria: ProductSearch) -> Page:
        query = self._dao.query

        if criteria.status:
            query = query.filter(status=criteria.status)
        if criteria.category_ids:
            query = query.filter(category_id__in=[str(cid) for cid in criteria.category_ids])
        if criteria.search:
            query = query.filter(search_text__contains=criteria.search.strip().lower())
        if criteria.min_price is not None:
            query = query.filter(price__gte=criteria.min_price)
        if criteria.max_price is not None:
            query = query.filter(price__lte=criteria.max_price)
        if criteria.min_rating is not None:
            query = query.filter(rating_average__gte=criteria.min_rating)
        if criteria.brand:
            query = query.filter(brand__icontains=criteria.brand.strip())
        if criteria.tags:
            # Tags are stored as a JSON array, so a quoted tag only matches whole entries
            query = query.filter(
                reduce(or_, [Q(tags__contains=json.dumps(tag.strip().lower())) for tag in criteria.tags])
            )
        if criteria.featured is not None:
            query = query.filter(is_featured=criteria.featured)
        if criteria.exclude_id:
            query = query.exclude(id=criteria.exclude_id)

        sort_field = SORT_FIELDS.get(criteria.sort_by, "created_at")
        ordering = sort_field if criteria.sort_order == "asc" else f"-{sort_field}"

        result = query.order_by(ordering).offset(criteria.offset).limit(criteria.limit).all()
        return Page(items=result.items, total=result.total, page=criteria.page, limit=criteria.limit)

    def featured(self, limit: int = 8) -> list[Product]:
        return self.search(ProductSearch(featured=True, limit=limit)).items

    def suggestions(self, term: str, limit: int = 10) -> list[Product]:
        return self.search(ProductSearch(search=term, sort_by="name", sort_order="asc", limit=limit)).items

    def related_to(self, product: Product, limit: int = 4) -> list[Product]:
        criteria = ProductSearch(
            category_ids=[product.category_id],
            exclude_id=str(product.id),
            sort_by="rating",
            limit=limit,
        )
        return self.search(criteria).items
