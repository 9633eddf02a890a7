"""FastAPI endpoints for the Catalogue: products and categories."""

import json

from fastapi import APIRouter, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import AdminUser, CurrentUser, OptionalUser
from storefront.catalogue.api.schemas import (
    CategoryIdResponse,
    CreateCategoryRequest,
    CreateProductRequest,
    ProductIdResponse,
    ReorderCategoriesRequest,
    ReorderCategoryRequest,
    ReviewIdResponse,
    StatusResponse,
    SubmitReviewRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
)
from storefront.catalogue.api.serializers import (
    category_detail,
    category_summary,
    category_tree,
    product_detail,
    product_summary,
)
from storefront.catalogue.category.category import Category
from storefront.catalogue.category.management import (
    CreateCategory,
    DeleteCategory,
    MoveCategory,
    ReorderCategories,
    ReorderCategory,
    UpdateCategory,
)
from storefront.catalogue.category.tree import build_tree, full_path_name
from storefront.catalogue.product.inventory import process_stock_command
from storefront.catalogue.product.management import CreateProduct, DeleteProduct, UpdateProduct
from storefront.catalogue.product.product import Product
from storefront.catalogue.product.repository import MAX_PAGE_SIZE, ProductSearch
from storefront.catalogue.product.reviews import SubmitReview

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])

SORT_PATTERN = "^(created_at|price|rating|name|popularity)$"
ORDER_PATTERN = "^(asc|desc)$"


def _dumps(value):
    if value is None:
        return None
    if isinstance(value, list):
        return json.dumps([item.model_dump() if hasattr(item, "model_dump") else item for item in value])
    if hasattr(value, "model_dump"):
        return json.dumps(value.model_dump())
    return json.dumps(value)


def _category_scope(category, include_subcategories=True) -> list[str]:
    ids = [str(category.id)]
    if include_subcategories:
        descendants = current_domain.repository_for(Category).descendants_of(category.path)
        ids.extend(str(descendant.id) for descendant in descendants)
    return ids


# --- Product endpoints ---


@product_router.get("")
async def list_products(
    category: str | None = None,
    search: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    rating: float | None = Query(None, ge=0, le=5),
    brand: str | None = None,
    tags: str | None = None,
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_order: str = Query("desc", pattern=ORDER_PATTERN),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=MAX_PAGE_SIZE),
    status: str = "active",
    featured: bool | None = None,
) -> dict:
    criteria = ProductSearch(
        status=status,
        search=search,
        min_price=min_price,
        max_price=max_price,
        min_rating=rating,
        brand=brand,
        tags=[tag for tag in (tags or "").split(",") if tag.strip()],
        featured=featured,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    if category:
        try:
            criteria.category_ids = _category_scope(current_domain.repository_for(Category).get(category))
        except ObjectNotFoundError:
            # An unknown category does not narrow the listing
            criteria.category_ids = []

    result = current_domain.repository_for(Product).search(criteria)
    return {
        "products": [product_summary(product) for product in result.items],
        "pagination": result.metadata("products"),
    }


@product_router.get("/featured")
async def featured_products(limit: int = Query(8, ge=1, le=MAX_PAGE_SIZE)) -> dict:
    products = current_domain.repository_for(Product).featured(limit=limit)
    return {"products": [product_summary(product) for product in products]}


@product_router.get("/search-suggestions")
async def search_suggestions(q: str = "") -> dict:
    if len(q.strip()) < 2:
        return {"suggestions": []}
    products = current_domain.repository_for(Product).suggestions(q, limit=10)
    return {"suggestions": [{"id": str(product.id), "name": product.name, "brand": product.brand} for product in products]}


@product_router.get("/{product_id}")
async def get_product(product_id: str, user: OptionalUser) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_active and not (user and user.is_admin):
        raise ObjectNotFoundError("Product not found")
    return {"product": product_detail(product)}


@product_router.get("/{product_id}/related")
async def related_products(product_id: str, limit: int = Query(4, ge=1, le=20)) -> dict:
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    return {"products": [product_summary(related) for related in repo.related_to(product, limit=limit)]}


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def create_product(body: CreateProductRequest, admin: AdminUser) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        compare_price=body.compare_price,
        category_id=body.category_id,
        sku=body.sku,
        brand=body.brand,
        inventory=_dumps(body.inventory),
        variants=_dumps(body.variants),
        images=_dumps(body.images),
        tags=_dumps(body.tags),
        specifications=_dumps(body.specifications),
        seo_title=body.seo_title,
        seo_description=body.seo_description,
        status=body.status,
        is_featured=body.is_featured,
        is_digital=body.is_digital,
        weight=body.weight,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=StatusResponse)
async def update_product(product_id: str, body: UpdateProductRequest, admin: AdminUser) -> StatusResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        compare_price=body.compare_price,
        category_id=body.category_id,
        sku=body.sku,
        brand=body.brand,
        inventory=_dumps(body.inventory),
        variants=_dumps(body.variants),
        images=_dumps(body.images),
        tags=_dumps(body.tags),
        specifications=_dumps(body.specifications),
        seo_title=body.seo_title,
        seo_description=body.seo_description,
        status=body.status,
        is_featured=body.is_featured,
        is_digital=body.is_digital,
        weight=body.weight,
    )
    # Inventory edits race with checkout like any other stock write
    process_stock_command(command)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def delete_product(product_id: str, admin: AdminUser) -> StatusResponse:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="deleted")


@product_router.post("/{product_id}/reviews", status_code=201, response_model=ReviewIdResponse)
async def submit_review(product_id: str, body: SubmitReviewRequest, user: CurrentUser) -> ReviewIdResponse:
    command = SubmitReview(
        product_id=product_id,
        user_id=user.user_id,
        user_name=user.name,
        rating=body.rating,
        comment=body.comment,
    )
    result = current_domain.process(command, asynchronous=False)
    return ReviewIdResponse(review_id=result)


# --- Category endpoints ---


@category_router.get("")
async def list_categories(tree: bool = True, include_inactive: bool = False) -> dict:
    categories = current_domain.repository_for(Category).listing(include_inactive=include_inactive)
    if tree:
        return {"categories": category_tree(build_tree(categories))}
    return {"categories": [category_summary(category) for category in categories]}


@category_router.post("/reorder-bulk", response_model=StatusResponse)
async def reorder_categories(body: ReorderCategoriesRequest, admin: AdminUser) -> StatusResponse:
    positions = json.dumps([position.model_dump() for position in body.categories])
    current_domain.process(ReorderCategories(positions=positions), asynchronous=False)
    return StatusResponse(status="reordered")


@category_router.get("/{category_id}")
async def get_category(category_id: str) -> dict:
    repo = current_domain.repository_for(Category)
    category = repo.get(category_id)

    ancestors = repo.ancestors_of(category)
    children = [child for child in repo.children_of(category.id) if child.is_active]
    product_count = current_domain.repository_for(Product).search(ProductSearch(category_ids=[category.id], limit=1)).total

    data = category_detail(category)
    data.update(
        {
            "parent": category_summary(ancestors[-1]) if ancestors else None,
            "children": [category_summary(child) for child in children],
            "full_path": full_path_name(category, ancestors),
            "product_count": product_count,
        }
    )
    return {"category": data}


@category_router.get("/{category_id}/products")
async def category_products(
    category_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=MAX_PAGE_SIZE),
    sort_by: str = Query("created_at", pattern=SORT_PATTERN),
    sort_order: str = Query("desc", pattern=ORDER_PATTERN),
    include_subcategories: bool = True,
) -> dict:
    category = current_domain.repository_for(Category).get(category_id)
    criteria = ProductSearch(
        category_ids=_category_scope(category, include_subcategories),
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    result = current_domain.repository_for(Product).search(criteria)
    return {
        "products": [product_summary(product) for product in result.items],
        "category": {"id": str(category.id), "name": category.name, "slug": category.slug},
        "pagination": result.metadata("products"),
    }


@category_router.post("", status_code=201, response_model=CategoryIdResponse)
async def create_category(body: CreateCategoryRequest, admin: AdminUser) -> CategoryIdResponse:
    command = CreateCategory(
        name=body.name,
        parent_id=body.parent_id,
        description=body.description,
        image_url=body.image_url,
        image_alt=body.image_alt,
        sort_order=body.sort_order,
        is_active=body.is_active,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
        attributes=_dumps(body.attributes),
    )
    result = current_domain.process(command, asynchronous=False)
    return CategoryIdResponse(category_id=result)


@category_router.put("/{category_id}", response_model=StatusResponse)
async def update_category(category_id: str, body: UpdateCategoryRequest, admin: AdminUser) -> StatusResponse:
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        image_url=body.image_url,
        image_alt=body.image_alt,
        is_active=body.is_active,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
        attributes=_dumps(body.attributes),
    )
    current_domain.process(command, asynchronous=False)

    # An explicit null moves the category to the root
    if "parent_id" in body.model_fields_set:
        current_domain.process(MoveCategory(category_id=category_id, parent_id=body.parent_id), asynchronous=False)
    return StatusResponse()


@category_router.delete("/{category_id}", response_model=StatusResponse)
async def delete_category(category_id: str, admin: AdminUser) -> StatusResponse:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return StatusResponse(status="deleted")


@category_router.put("/{category_id}/reorder", response_model=StatusResponse)
async def reorder_category(category_id: str, body: ReorderCategoryRequest, admin: AdminUser) -> StatusResponse:
    command = ReorderCategory(category_id=category_id, sort_order=body.sort_order)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="reordered")
