"""JSON representations of catalogue aggregates returned by the API."""

from storefront.catalogue.category.tree import CategoryNode


def product_summary(product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "price": product.price,
        "compare_price": product.compare_price,
        "sale_percentage": product.sale_percentage,
        "brand": product.brand,
        "sku": product.sku,
        "category_id": str(product.category_id),
        "primary_image": product.primary_image,
        "rating": {"average": product.rating_average, "count": product.rating_count},
        "status": product.status,
        "is_featured": product.is_featured,
        "is_in_stock": product.is_in_stock,
        "is_low_stock": product.is_low_stock,
    }


def product_detail(product) -> dict:
    data = product_summary(product)
    data.update(
        {
            "description": product.description,
            "images": [
                {"id": str(image.id), "url": image.url, "alt_text": image.alt_text, "is_primary": image.is_primary}
                for image in product.images
            ],
            "inventory": {
                "quantity": product.inventory.quantity,
                "low_stock_threshold": product.inventory.low_stock_threshold,
                "track_quantity": product.inventory.track_quantity,
            },
            "variants": [{"name": group.name, "options": group.option_list()} for group in product.variants],
            "reviews": [
                {
                    "id": str(review.id),
                    "user_id": str(review.user_id),
                    "user_name": review.user_name,
                    "rating": review.rating,
                    "comment": review.comment,
                    "created_at": review.created_at.isoformat() if review.created_at else None,
                }
                for review in product.reviews
            ],
            "tags": product.tag_list,
            "specifications": product.specification_map,
            "seo_title": product.seo_title,
            "seo_description": product.seo_description,
            "is_digital": product.is_digital,
            "weight": product.weight,
            "created_at": product.created_at.isoformat() if product.created_at else None,
            "updated_at": product.updated_at.isoformat() if product.updated_at else None,
        }
    )
    return data


def category_summary(category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image": {"url": category.image_url, "alt": category.image_alt} if category.image_url else None,
        "parent_id": str(category.parent_id) if category.parent_id else None,
        "level": category.level,
        "path": category.path,
        "is_active": category.is_active,
        "sort_order": category.sort_order,
    }


def category_detail(category) -> dict:
    data = category_summary(category)
    data.update(
        {
            "meta_title": category.meta_title,
            "meta_description": category.meta_description,
            "attributes": category.attribute_list,
        }
    )
    return data


def category_tree(nodes: list[CategoryNode]) -> list[dict]:
    return [dict(category_summary(node.category), children=category_tree(node.children)) for node in nodes]
