"""Repository for the Category aggregate."""

from storefront.catalogue.category.category import PATH_SEPARATOR, Category
from storefront.domain import storefront

# Rows fetched per page when walking tree-shaped reads
BATCH_SIZE = 500


def _display_order(category):
    return (category.sort_order or 0, category.name.lower())


@storefront.repository(part_of=Category)
class CategoryRepository:
    def _scan(self, query) -> list[Category]:
        """Every row matching ``query``, fetched page by page in path order."""
        rows = []
        offset = 0
        while True:
            batch = query.order_by("path").offset(offset).limit(BATCH_SIZE).all().items
            rows.extend(batch)
            if len(batch) < BATCH_SIZE:
                return rows
            offset += BATCH_SIZE

    def find_by_name(self, name: str) -> Category | None:
        return self._dao.query.filter(name=name.strip()).all().first

    def find_by_slug(self, slug: str) -> Category | None:
        return self._dao.query.filter(slug=slug).all().first

    def listing(self, include_inactive: bool = False) -> list[Category]:
        """All categories in display order: sort_order, then name."""
        query = self._dao.query if include_inactive else self._dao.query.filter(is_active=True)
        return sorted(self._scan(query), key=_display_order)

    def children_of(self, category_id) -> list[Category]:
        children = self._scan(self._dao.query.filter(parent_id=category_id))
        return sorted(children, key=_display_order)

    def descendants_of(self, path: str) -> list[Category]:
        """Every category below the one at ``path``, found by materialized path prefix."""
        prefix = path + PATH_SEPARATOR
        candidates = self._scan(self._dao.query.filter(path__contains=prefix))
        return [candidate for candidate in candidates if candidate.path.startswith(prefix)]

    def ancestors_of(self, category: Category) -> list[Category]:
        """Ancestors from the root down to the direct parent."""
        ancestors = []
        for slug in category.ancestor_slugs:
            ancestor = self.find_by_slug(slug)
            if ancestor is not None:
                ancestors.append(ancestor)
        return ancestors
