"""Category management: commands and handlers."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category, slugify
from storefront.domain import storefront
from storefront.shared.errors import DuplicateEntry
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=50)
    parent_id: Identifier()
    description: String(max_length=500)
    image_url: String(max_length=500)
    image_alt: String(max_length=200)
    sort_order: Integer(default=0)
    is_active: Boolean(default=True)
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)
    attributes: Text()


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=50)
    description: String(max_length=500)
    image_url: String(max_length=500)
    image_alt: String(max_length=200)
    is_active: Boolean()
    meta_title: String(max_length=60)
    meta_description: String(max_length=160)
    attributes: Text()


@storefront.command(part_of="Category")
class MoveCategory:
    category_id: Identifier(required=True)
    parent_id: Identifier()  # None moves the category to the root


@storefront.command(part_of="Category")
class ReorderCategory:
    category_id: Identifier(required=True)
    sort_order: Integer(required=True)


@storefront.command(part_of="Category")
class ReorderCategories:
    positions: Text(required=True)  # JSON array of {"category_id", "sort_order"}


@storefront.command(part_of="Category")
class DeleteCategory:
    category_id: Identifier(required=True)


def _ensure_unique(repo, name, exclude_id=None):
    existing = repo.find_by_name(name)
    if existing is not None and str(existing.id) != str(exclude_id):
        raise DuplicateEntry({"name": [f"Category '{name}' already exists"]})

    existing = repo.find_by_slug(slugify(name))
    if existing is not None and str(existing.id) != str(exclude_id):
        raise DuplicateEntry({"name": [f"Category slug '{existing.slug}' is already in use"]})


def _cascade_path_change(repo, category, previous_path, previous_level):
    """Rewrite descendants' paths and levels after a rename or a move."""
    if category.path == previous_path and category.level == previous_level:
        return 0

    descendants = repo.descendants_of(previous_path)
    for descendant in descendants:
        descendant.rebase(previous_path, category.path, category.level - previous_level)
        repo.add(descendant)

    return len(descendants)


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        _ensure_unique(repo, command.name)

        parent = repo.get(command.parent_id) if command.parent_id else None

        category = Category.create(
            name=command.name,
            parent=parent,
            description=command.description,
            image_url=command.image_url,
            image_alt=command.image_alt,
            sort_order=command.sort_order,
            is_active=command.is_active,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
            attributes=json.loads(command.attributes) if command.attributes else None,
        )
        repo.add(category)

        logger.info("Category created", category_id=str(category.id), path=category.path)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        if command.name is not None:
            _ensure_unique(repo, command.name, exclude_id=category.id)

        previous_path, previous_level = category.path, category.level
        category.update_details(
            name=command.name,
            description=command.description,
            image_url=command.image_url,
            image_alt=command.image_alt,
            is_active=command.is_active,
            meta_title=command.meta_title,
            meta_description=command.meta_description,
            attributes=json.loads(command.attributes) if command.attributes else None,
        )
        repo.add(category)
        _cascade_path_change(repo, category, previous_path, previous_level)

    @handle(MoveCategory)
    def move_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        parent = repo.get(command.parent_id) if command.parent_id else None

        previous_path, previous_level = category.path, category.level
        category.move_under(parent)
        repo.add(category)
        moved = _cascade_path_change(repo, category, previous_path, previous_level)

        logger.info(
            "Category moved",
            category_id=str(category.id),
            previous_path=previous_path,
            path=category.path,
            descendants_moved=moved,
        )

    @handle(ReorderCategory)
    def reorder_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.reorder(command.sort_order)
        repo.add(category)

    @handle(ReorderCategories)
    def reorder_categories(self, command):
        try:
            positions = json.loads(command.positions)
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"positions": ["Positions must be valid JSON"]}) from None

        if not isinstance(positions, list) or not positions:
            raise ValidationError({"positions": ["Provide at least one category position"]})

        for position in positions:
            if not isinstance(position, dict) or not position.get("category_id"):
                raise ValidationError({"positions": ["Every position needs a category_id"]})
            if not isinstance(position.get("sort_order"), int) or isinstance(position.get("sort_order"), bool):
                raise ValidationError({"positions": ["Sort order must be a number"]})

        repo = current_domain.repository_for(Category)
        for position in positions:
            category = repo.get(position["category_id"])
            category.reorder(position["sort_order"])
            repo.add(category)

        return len(positions)

    @handle(DeleteCategory)
    def delete_category(self, command):
        from storefront.catalogue.product.product import Product

        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)

        product_count = current_domain.repository_for(Product).count_in_categories([category.id])
        if product_count:
            raise ValidationError(
                {"category": [f"Cannot delete category with {product_count} products. Move or delete products first."]}
            )

        if repo.children_of(category.id):
            raise ValidationError(
                {"category": ["Cannot delete category with subcategories. Move or delete subcategories first."]}
            )

        repo._dao.delete(category)
        logger.info("Category deleted", category_id=str(category.id), path=category.path)
