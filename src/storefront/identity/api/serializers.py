"""JSON representations of users and wishlists."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.api.serializers import product_summary
from storefront.catalogue.product.product import Product


def _iso(value):
    return value.isoformat() if value else None


def wishlist_products(product_ids, active_only=False) -> list[dict]:
    """Catalogue summaries for ``product_ids``; products that no longer exist are skipped."""
    repo = current_domain.repository_for(Product)
    products = []
    for product_id in product_ids:
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            continue
        if active_only and not product.is_active:
            continue
        products.append(product_summary(product))
    return products


def user_summary(user) -> dict:
    return {
        "user_id": user.user_id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "full_name": user.full_name,
        "role": user.role,
        "is_active": user.is_active,
        "wishlist_count": len(user.wishlist),
        "created_at": _iso(user.created_at),
    }


def user_detail(user) -> dict:
    data = user_summary(user)
    data.update(
        {
            "wishlist": wishlist_products(user.wishlist_product_ids),
            "updated_at": _iso(user.updated_at),
            "deactivated_at": _iso(user.deactivated_at),
        }
    )
    return data
