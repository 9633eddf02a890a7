"""JSON representations of carts and orders returned by the API."""

import json

from storefront.shared.money import to_amount


def _iso(value):
    return value.isoformat() if value else None


def cart_payload(cart, products=None) -> dict:
    """Cart with derived totals; ``products`` maps ids to loaded products for display names."""
    products = products or {}
    if cart is None:
        return {
            "items": [],
            "coupon_code": None,
            "discount": 0.0,
            "total_items": 0,
            "subtotal": 0.0,
            "total": 0.0,
        }

    items = []
    for item in cart.items:
        product = products.get(str(item.product_id))
        items.append(
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "name": product.name if product else None,
                "image": product.primary_image if product else None,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "selected_variants": item.variant_list,
                "price": to_amount(item.effective_price),
                "line_total": to_amount(item.line_total),
                "added_at": _iso(item.added_at),
            }
        )

    return {
        "id": str(cart.id),
        "items": items,
        "coupon_code": cart.coupon_code,
        "discount": cart.discount,
        "total_items": cart.total_items,
        "subtotal": to_amount(cart.subtotal),
        "total": to_amount(cart.total),
        "last_activity": _iso(cart.last_activity),
    }


def _address(address) -> dict | None:
    if address is None:
        return None
    return {
        "first_name": address.first_name,
        "last_name": address.last_name,
        "email": address.email,
        "phone": address.phone,
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "country": address.country,
    }


def order_summary(order) -> dict:
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "user_id": str(order.user_id),
        "status": order.status,
        "payment_status": order.payment.status,
        "total": order.pricing.total,
        "total_items": order.total_items,
        "created_at": _iso(order.created_at),
    }


def order_detail(order) -> dict:
    tracking = order.tracking
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "user_id": str(order.user_id),
        "items": [
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "name": item.name,
                "image": item.image,
                "price": item.price,
                "quantity": item.quantity,
                "selected_variants": json.loads(item.selected_variants) if item.selected_variants else [],
            }
            for item in order.items
        ],
        "shipping_address": _address(order.shipping_address),
        "billing_address": _address(order.billing_address),
        "pricing": {
            "subtotal": order.pricing.subtotal,
            "shipping": order.pricing.shipping,
            "tax": order.pricing.tax,
            "discount": order.pricing.discount,
            "total": order.pricing.total,
        },
        "payment": {
            "method": order.payment.method,
            "status": order.payment.status,
            "transaction_id": order.payment.transaction_id,
            "payment_intent_id": order.payment.payment_intent_id,
            "paid_at": _iso(order.payment.paid_at),
        },
        "status": order.status,
        "tracking": (
            {
                "carrier": tracking.carrier,
                "tracking_number": tracking.tracking_number,
                "tracking_url": tracking.tracking_url,
                "estimated_delivery": _iso(tracking.estimated_delivery),
                "actual_delivery": _iso(tracking.actual_delivery),
            }
            if tracking
            else None
        ),
        "status_history": [
            {
                "status": change.status,
                "note": change.note,
                "changed_by": str(change.changed_by) if change.changed_by else None,
                "changed_at": _iso(change.changed_at),
            }
            for change in order.status_history
        ],
        "customer_note": order.customer_note,
        "coupon_code": order.coupon_code,
        "is_gift": order.is_gift,
        "gift_message": order.gift_message,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }
