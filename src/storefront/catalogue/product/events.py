"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    product_id: Identifier(required=True)
    sku: String(required=True)
    name: String(required=True)
    category_id: Identifier(required=True)
    price: Float(required=True)
    status: String(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    """One or more product attributes were changed by an administrator."""

    product_id: Identifier(required=True)
    changed_fields: Text(required=True)  # JSON array of field names


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The selling price of a product changed; carts may now hold stale prices."""

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)


@storefront.event(part_of="Product")
class StockLevelChanged:
    """Tracked inventory moved up (restock, cancellation) or down (sale)."""

    product_id: Identifier(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)
    reason: String(required=True)


@storefront.event(part_of="Product")
class ProductReviewed:
    """A customer reviewed a product and the aggregate rating was refreshed."""

    product_id: Identifier(required=True)
    review_id: Identifier(required=True)
    user_id: Identifier(required=True)
    rating: Integer(required=True)
    rating_average: Float(required=True)
    rating_count: Integer(required=True)
