"""FastAPI endpoints for the Ordering domain: cart and orders."""

import json
from datetime import datetime

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.auth import AdminUser, CurrentUser
from storefront.catalogue.product.inventory import process_stock_command
from storefront.catalogue.product.product import Product
from storefront.ordering.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    CancelOrderRequest,
    CartCountResponse,
    CartItemIdResponse,
    CouponResponse,
    OrderIdResponse,
    PlaceOrderRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdateTrackingRequest,
)
from storefront.ordering.api.serializers import cart_payload, order_detail, order_summary
from storefront.ordering.cart.cart import Cart
from storefront.ordering.cart.coupons import ApplyCoupon, RemoveCoupon
from storefront.ordering.cart.items import AddToCart, ClearCart, RefreshCart, RemoveCartItem, UpdateCartItem
from storefront.ordering.cart.validation import validate_cart
from storefront.ordering.order.analytics import sales_summary
from storefront.ordering.order.creation import PlaceOrder
from storefront.ordering.order.fulfillment import CancelOrder, UpdateOrderStatus, UpdateTracking, load_visible_order
from storefront.ordering.order.order import Order, OrderStatus

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(user_id) -> dict:
    cart = current_domain.repository_for(Cart).for_user(user_id)
    products = {}
    if cart is not None:
        product_repo = current_domain.repository_for(Product)
        products = {str(item.product_id): product_repo.get(item.product_id) for item in cart.items}
    return {"cart": cart_payload(cart, products)}


@cart_router.get("")
async def get_cart(user: CurrentUser) -> dict:
    """Current cart, after dropping lines that can no longer be bought."""
    removed = current_domain.process(RefreshCart(user_id=user.user_id), asynchronous=False)
    response = _cart_response(user.user_id)
    response["removed_items"] = removed or 0
    return response


@cart_router.post("/items", status_code=201, response_model=CartItemIdResponse)
async def add_to_cart(body: AddToCartRequest, user: CurrentUser) -> CartItemIdResponse:
    command = AddToCart(
        user_id=user.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        selected_variants=json.dumps([selection.model_dump() for selection in body.selected_variants]),
    )
    result = current_domain.process(command, asynchronous=False)
    return CartItemIdResponse(item_id=result)


@cart_router.put("/items/{item_id}", response_model=StatusResponse)
async def update_cart_item(item_id: str, body: UpdateCartItemRequest, user: CurrentUser) -> StatusResponse:
    command = UpdateCartItem(user_id=user.user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="removed" if body.quantity <= 0 else "updated")


@cart_router.delete("/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(item_id: str, user: CurrentUser) -> StatusResponse:
    current_domain.process(RemoveCartItem(user_id=user.user_id, item_id=item_id), asynchronous=False)
    return StatusResponse(status="removed")


@cart_router.delete("", response_model=StatusResponse)
async def clear_cart(user: CurrentUser) -> StatusResponse:
    current_domain.process(ClearCart(user_id=user.user_id), asynchronous=False)
    return StatusResponse(status="cleared")


@cart_router.post("/apply-coupon", response_model=CouponResponse)
async def apply_coupon(body: ApplyCouponRequest, user: CurrentUser) -> CouponResponse:
    command = ApplyCoupon(user_id=user.user_id, coupon_code=body.coupon_code)
    discount = current_domain.process(command, asynchronous=False)
    return CouponResponse(coupon_code=body.coupon_code.strip().upper(), discount=discount)


@cart_router.delete("/coupon", response_model=StatusResponse)
async def remove_coupon(user: CurrentUser) -> StatusResponse:
    current_domain.process(RemoveCoupon(user_id=user.user_id), asynchronous=False)
    return StatusResponse(status="removed")


@cart_router.get("/count", response_model=CartCountResponse)
async def cart_count(user: CurrentUser) -> CartCountResponse:
    cart = current_domain.repository_for(Cart).for_user(user.user_id)
    return CartCountResponse(count=cart.total_items if cart else 0)


@cart_router.post("/validate")
async def validate(user: CurrentUser) -> dict:
    cart = current_domain.repository_for(Cart).for_user(user.user_id)
    return validate_cart(cart).to_dict()


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(
    user: CurrentUser,
    status: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> dict:
    result = current_domain.repository_for(Order).listing(
        user_id=None if user.is_admin else user.user_id,
        status=status,
        page=page,
        limit=limit,
    )
    return {
        "orders": [order_summary(order) for order in result.items],
        "pagination": result.metadata("orders"),
    }


@order_router.get("/analytics/summary")
async def analytics_summary(
    admin: AdminUser,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> dict:
    return sales_summary(start=start_date, end=end_date).to_dict()


@order_router.get("/{order_id}")
async def get_order(order_id: str, user: CurrentUser) -> dict:
    order = load_visible_order(order_id, user.user_id, user.is_admin)
    return {"order": order_detail(order)}


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, user: CurrentUser) -> OrderIdResponse:
    command = PlaceOrder(
        user_id=user.user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        customer_note=body.customer_note,
        is_gift=body.is_gift,
        gift_message=body.gift_message,
    )
    result = process_stock_command(command)
    return OrderIdResponse(order_id=result)


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest, admin: AdminUser) -> StatusResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note, changed_by=admin.user_id)
    process_stock_command(command)
    return StatusResponse(status=body.status)


@order_router.put("/{order_id}/tracking", response_model=StatusResponse)
async def update_tracking(order_id: str, body: UpdateTrackingRequest, admin: AdminUser) -> StatusResponse:
    command = UpdateTracking(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
        changed_by=admin.user_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, user: CurrentUser, body: CancelOrderRequest | None = None) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        requested_by=user.user_id,
        is_admin=user.is_admin,
        reason=body.reason if body else None,
    )
    process_stock_command(command)
    return StatusResponse(status=OrderStatus.CANCELLED.value)
