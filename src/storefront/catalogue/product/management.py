"""Product management: administrator commands and handler."""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product, ProductStatus
from storefront.domain import storefront
from storefront.shared.errors import DuplicateEntry
from storefront.shared.sku import normalize_sku
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=100)
    description: String(required=True, max_length=2000)
    price: Float(required=True, min_value=0.0)
    compare_price: Float(min_value=0.0)
    category_id: Identifier(required=True)
    sku: String(required=True, max_length=50)
    brand: String(max_length=100)
    inventory: Text()  # JSON: {"quantity", "low_stock_threshold", "track_quantity"}
    variants: Text()  # JSON: [{"name", "options": [{"value", "price_modifier"}]}]
    images: Text()  # JSON: [{"url", "alt_text", "is_primary"}]
    tags: Text()  # JSON array
    specifications: Text()  # JSON object
    seo_title: String(max_length=60)
    seo_description: String(max_length=160)
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    is_featured: Boolean(default=False)
    is_digital: Boolean(default=False)
    weight: Float(min_value=0.0)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(max_length=100)
    description: String(max_length=2000)
    price: Float(min_value=0.0)
    compare_price: Float(min_value=0.0)
    category_id: Identifier()
    sku: String(max_length=50)
    brand: String(max_length=100)
    inventory: Text()
    variants: Text()
    images: Text()
    tags: Text()
    specifications: Text()
    seo_title: String(max_length=60)
    seo_description: String(max_length=160)
    status: String(choices=ProductStatus)
    is_featured: Boolean()
    is_digital: Boolean()
    weight: Float(min_value=0.0)


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


def _loads(value):
    return json.loads(value) if value else None


def _ensure_unique_sku(repo, sku, exclude_id=None):
    existing = repo.find_by_sku(sku)
    if existing is not None and str(existing.id) != str(exclude_id):
        raise DuplicateEntry({"sku": [f"Product with SKU {sku} already exists"]})


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)
        sku = normalize_sku(command.sku)
        _ensure_unique_sku(repo, sku)

        # Raises ObjectNotFoundError for an unknown category
        current_domain.repository_for(Category).get(command.category_id)

        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            compare_price=command.compare_price,
            category_id=command.category_id,
            sku=sku,
            brand=command.brand,
            inventory=_loads(command.inventory),
            variants=_loads(command.variants),
            images=_loads(command.images),
            tags=_loads(command.tags),
            specifications=_loads(command.specifications),
            seo_title=command.seo_title,
            seo_description=command.seo_description,
            status=command.status,
            is_featured=command.is_featured,
            is_digital=command.is_digital,
            weight=command.weight,
        )
        repo.add(product)

        logger.info("Product created", product_id=str(product.id), sku=product.sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        if command.sku is not None:
            sku = normalize_sku(command.sku)
            _ensure_unique_sku(repo, sku, exclude_id=product.id)
            product.sku = sku

        if command.category_id is not None:
            current_domain.repository_for(Category).get(command.category_id)

        changed = product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            compare_price=command.compare_price,
            category_id=command.category_id,
            brand=command.brand,
            inventory=_loads(command.inventory),
            variants=_loads(command.variants),
            images=_loads(command.images),
            tags=_loads(command.tags),
            specifications=_loads(command.specifications),
            seo_title=command.seo_title,
            seo_description=command.seo_description,
            status=command.status,
            is_featured=command.is_featured,
            is_digital=command.is_digital,
            weight=command.weight,
        )
        repo.add(product)

        logger.info("Product updated", product_id=str(product.id), changed_fields=changed)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)

        logger.info("Product deleted", product_id=str(product.id), sku=product.sku)
