"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the Protean commands they
are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=254)
    phone: str | None = Field(None, max_length=30)
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field("United States", max_length=100)


class VariantSelectionSchema(BaseModel):
    name: str
    value: str


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "0b6f7f3e-1c2d-4c51-8a7e-5f0a6f0f1c11",
                    "quantity": 2,
                    "selected_variants": [{"name": "Size", "value": "M"}],
                }
            ]
        }
    }

    product_id: str
    quantity: int = Field(1, ge=1, le=100)
    selected_variants: list[VariantSelectionSchema] = Field(default_factory=list)


class UpdateCartItemRequest(BaseModel):
    quantity: int  # zero or less removes the line


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(..., min_length=1, max_length=50)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "email": "ada@example.com",
                        "street": "12 Analytical Way",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                    },
                    "payment_method": "stripe",
                    "customer_note": "Leave at the door",
                }
            ]
        }
    }

    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str = Field(..., pattern="^(stripe|paypal|cash_on_delivery)$")
    customer_note: str | None = Field(None, max_length=500)
    is_gift: bool = False
    gift_message: str | None = Field(None, max_length=200)


class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = Field(None, max_length=500)


class UpdateTrackingRequest(BaseModel):
    carrier: str | None = Field(None, max_length=100)
    tracking_number: str | None = Field(None, max_length=100)
    estimated_delivery: datetime | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartItemIdResponse(BaseModel):
    item_id: str


class CartCountResponse(BaseModel):
    count: int


class CouponResponse(BaseModel):
    coupon_code: str
    discount: float


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
