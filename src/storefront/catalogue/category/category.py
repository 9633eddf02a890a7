"""Category aggregate root for product categorization.

Categories form a tree. Each one stores its depth (``level``) and a
materialized ``path`` of slugs from the root, so descendants can be found by
path prefix instead of walking the tree.
"""

import json
import re
from datetime import datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront

MAX_LEVEL = 5
PATH_SEPARATOR = "/"

ATTRIBUTE_TYPES = ("text", "number", "boolean", "select", "multiselect")


def slugify(name: str) -> str:
    """Derive a URL slug from a category name.

    "Men's Shoes & Boots" -> "mens-shoes-boots"
    """
    slug = (name or "").lower().strip()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def join_path(parent_path: str | None, slug: str) -> str:
    return f"{parent_path}{PATH_SEPARATOR}{slug}" if parent_path else slug


@storefront.aggregate
class Category:
    """A hierarchical grouping for organizing products in the catalogue.

    Categories nest up to six levels deep (0-5). Slug, level and path are
    derived; they are refreshed whenever the name or the parent changes.
    """

    name: String(required=True, max_length=50)
    slug: String(required=True, max_length=60)
    description: String(max_length=500)
    image_url: String(max_length=500)
    image_alt: String(max_length=200)
    parent_id: Identifier()
    level: Integer(default=0, min_value=0, max_value=MAX_LEVEL)
    path: String(required=True, max_length=500)
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)
    attributes: Text()
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def slug_must_not_be_empty(self):
        if not self.slug:
            raise ValidationError({"name": ["Category name must contain at least one letter or digit"]})

    @invariant.post
    def attributes_must_be_valid(self):
        if not self.attributes:
            return

        try:
            attributes = json.loads(self.attributes)
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"attributes": ["Attributes must be valid JSON"]}) from None

        if not isinstance(attributes, list):
            raise ValidationError({"attributes": ["Attributes must be a JSON array"]})

        for attribute in attributes:
            if not isinstance(attribute, dict) or not attribute.get("name"):
                raise ValidationError({"attributes": ["Every attribute needs a name"]})
            if attribute.get("type", "text") not in ATTRIBUTE_TYPES:
                raise ValidationError(
                    {"attributes": [f"Attribute '{attribute['name']}' has an unsupported type '{attribute['type']}'"]}
                )

    @classmethod
    def create(
        cls,
        name,
        parent=None,
        description=None,
        image_url=None,
        image_alt=None,
        sort_order=0,
        is_active=True,
        meta_title=None,
        meta_description=None,
        attributes=None,
    ):
        from storefront.catalogue.category.events import CategoryCreated

        now = datetime.now()
        slug = slugify(name)
        if not slug:
            raise ValidationError({"name": ["Category name must contain at least one letter or digit"]})

        level = parent.level + 1 if parent else 0
        if level > MAX_LEVEL:
            raise ValidationError({"parent_id": [f"Categories cannot be nested more than {MAX_LEVEL + 1} levels deep"]})

        category = cls(
            name=name.strip(),
            slug=slug,
            description=description,
            image_url=image_url,
            image_alt=image_alt,
            parent_id=parent.id if parent else None,
            level=level,
            path=join_path(parent.path if parent else None, slug),
            is_active=is_active,
            sort_order=sort_order or 0,
            meta_title=meta_title,
            meta_description=meta_description,
            attributes=json.dumps(attributes) if attributes else None,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                slug=category.slug,
                parent_id=category.parent_id,
                level=category.level,
                path=category.path,
            )
        )
        return category

    @property
    def parent_path(self) -> str | None:
        if PATH_SEPARATOR not in (self.path or ""):
            return None
        return self.path.rsplit(PATH_SEPARATOR, 1)[0]

    @property
    def ancestor_slugs(self) -> list[str]:
        return self.path.split(PATH_SEPARATOR)[:-1]

    def is_ancestor_of(self, other) -> bool:
        return other.path.startswith(self.path + PATH_SEPARATOR)

    @property
    def attribute_list(self) -> list[dict]:
        return json.loads(self.attributes) if self.attributes else []

    def update_details(
        self,
        name=None,
        description=None,
        image_url=None,
        image_alt=None,
        is_active=None,
        meta_title=None,
        meta_description=None,
        attributes=None,
    ):
        from storefront.catalogue.category.events import CategoryDetailsUpdated

        if name is not None and name.strip() != self.name:
            self.name = name.strip()
            self.slug = slugify(self.name)
            self.path = join_path(self.parent_path, self.slug)

        if description is not None:
            self.description = description
        if image_url is not None:
            self.image_url = image_url
        if image_alt is not None:
            self.image_alt = image_alt
        if is_active is not None:
            self.is_active = is_active
        if meta_title is not None:
            self.meta_title = meta_title
        if meta_description is not None:
            self.meta_description = meta_description
        if attributes is not None:
            self.attributes = json.dumps(attributes)

        self.updated_at = datetime.now()

        self.raise_(
            CategoryDetailsUpdated(
                category_id=self.id,
                name=self.name,
                slug=self.slug,
                path=self.path,
            )
        )

    def move_under(self, parent=None):
        """Re-parent this category, or make it a root when ``parent`` is None."""
        from storefront.catalogue.category.events import CategoryMoved

        if parent is not None and (str(parent.id) == str(self.id) or self.is_ancestor_of(parent)):
            raise ValidationError({"parent_id": ["A category cannot be placed under itself or one of its descendants"]})

        level = parent.level + 1 if parent else 0
        if level > MAX_LEVEL:
            raise ValidationError({"parent_id": [f"Categories cannot be nested more than {MAX_LEVEL + 1} levels deep"]})

        previous_parent_id = self.parent_id
        previous_path = self.path

        self.parent_id = parent.id if parent else None
        self.level = level
        self.path = join_path(parent.path if parent else None, self.slug)
        self.updated_at = datetime.now()

        self.raise_(
            CategoryMoved(
                category_id=self.id,
                previous_parent_id=previous_parent_id,
                parent_id=self.parent_id,
                previous_path=previous_path,
                path=self.path,
                level=self.level,
            )
        )

    def rebase(self, old_prefix, new_prefix, level_delta):
        """Follow an ancestor's rename or move by rewriting the path prefix."""
        level = self.level + level_delta
        if level > MAX_LEVEL:
            raise ValidationError({"parent_id": [f"Categories cannot be nested more than {MAX_LEVEL + 1} levels deep"]})

        self.path = new_prefix + self.path[len(old_prefix) :]
        self.level = level
        self.updated_at = datetime.now()

    def reorder(self, sort_order):
        from storefront.catalogue.category.events import CategoryReordered

        previous_sort_order = self.sort_order
        self.sort_order = sort_order
        self.updated_at = datetime.now()

        self.raise_(
            CategoryReordered(
                category_id=self.id,
                previous_sort_order=previous_sort_order,
                sort_order=sort_order,
            )
        )
