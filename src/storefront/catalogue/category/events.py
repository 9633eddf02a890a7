"""Domain events for the Category aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A new product category was added to the catalogue hierarchy."""

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    parent_id: Identifier()
    level: Integer(required=True)
    path: String(required=True)


@storefront.event(part_of="Category")
class CategoryDetailsUpdated:
    """A category's name, description or display settings were changed."""

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    path: String(required=True)


@storefront.event(part_of="Category")
class CategoryMoved:
    """A category was re-parented; its path and level were recomputed."""

    category_id: Identifier(required=True)
    previous_parent_id: Identifier()
    parent_id: Identifier()
    previous_path: String(required=True)
    path: String(required=True)
    level: Integer(required=True)


@storefront.event(part_of="Category")
class CategoryReordered:
    """A category's sort order among its siblings was changed."""

    category_id: Identifier(required=True)
    previous_sort_order: Integer(required=True)
    sort_order: Integer(required=True)
