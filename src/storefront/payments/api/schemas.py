"""Pydantic request/response schemas for the Payments API."""

from pydantic import BaseModel, Field


class CreatePaymentIntentRequest(BaseModel):
    order_id: str


class PaymentIntentResponse(BaseModel):
    client_secret: str | None
    payment_intent_id: str


class ConfirmPaymentRequest(BaseModel):
    payment_intent_id: str = Field(..., min_length=1)


class PaymentConfirmationResponse(BaseModel):
    message: str
    order_id: str
    status: str


class RefundRequest(BaseModel):
    order_id: str
    amount: float | None = Field(None, gt=0)
    reason: str | None = Field(None, max_length=500)


class RefundResponse(BaseModel):
    message: str
    refund_id: str


class WebhookAckResponse(BaseModel):
    received: bool = True


class PaymentConfigResponse(BaseModel):
    gateway: str
    publishable_key: str | None
    currency: str
