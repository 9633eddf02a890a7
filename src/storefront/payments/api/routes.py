"""FastAPI routes for the Payments domain."""

from fastapi import APIRouter, Header, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.api.auth import AdminUser, CurrentUser
from storefront.catalogue.product.inventory import process_stock_command
from storefront.config import get_settings
from storefront.payments.api.schemas import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    PaymentConfigResponse,
    PaymentConfirmationResponse,
    PaymentIntentResponse,
    RefundRequest,
    RefundResponse,
    WebhookAckResponse,
)
from storefront.payments.gateway import get_gateway
from storefront.payments.payment.confirmation import ConfirmPayment
from storefront.payments.payment.intent import CreatePaymentIntent
from storefront.payments.payment.refund import RefundPayment
from storefront.payments.payment.webhook import ProcessPaymentWebhook
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

payment_router = APIRouter(prefix="/payment", tags=["payment"])


@payment_router.post("/stripe/create-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(body: CreatePaymentIntentRequest, user: CurrentUser) -> PaymentIntentResponse:
    command = CreatePaymentIntent(order_id=body.order_id, requested_by=user.user_id, is_admin=user.is_admin)
    result = current_domain.process(command, asynchronous=False)
    return PaymentIntentResponse(**result)


@payment_router.post("/stripe/confirm", response_model=PaymentConfirmationResponse)
async def confirm_payment(body: ConfirmPaymentRequest, user: CurrentUser):
    command = ConfirmPayment(
        payment_intent_id=body.payment_intent_id,
        requested_by=user.user_id,
        is_admin=user.is_admin,
    )
    confirmation = current_domain.process(command, asynchronous=False)

    # The failure is already recorded on the order; only the response differs
    if not confirmation.succeeded:
        return JSONResponse(
            status_code=400,
            content={"message": "Payment failed", "status": confirmation.intent_status, "order_id": confirmation.order_id},
        )
    return PaymentConfirmationResponse(
        message="Payment confirmed successfully",
        order_id=confirmation.order_id,
        status=confirmation.intent_status,
    )


@payment_router.post("/stripe/webhook", response_model=WebhookAckResponse)
async def stripe_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookAckResponse:
    """Provider callback; authenticated by signature rather than bearer token."""
    payload = await request.body()
    event = get_gateway().construct_webhook_event(payload, stripe_signature)

    logger.info("Webhook received", event_id=event.id, event_type=event.type, payment_intent_id=event.intent.id)

    command = ProcessPaymentWebhook(
        event_id=event.id,
        event_type=event.type,
        payment_intent_id=event.intent.id,
        order_id=event.intent.order_id,
        intent_status=event.intent.status,
    )
    current_domain.process(command, asynchronous=False)
    return WebhookAckResponse()


@payment_router.post("/refund", response_model=RefundResponse)
async def refund_payment(body: RefundRequest, admin: AdminUser) -> RefundResponse:
    command = RefundPayment(
        order_id=body.order_id,
        amount=body.amount,
        reason=body.reason,
        requested_by=admin.user_id,
    )
    refund_id = process_stock_command(command)
    return RefundResponse(message="Refund processed successfully", refund_id=refund_id)


@payment_router.get("/config", response_model=PaymentConfigResponse)
async def payment_config(user: CurrentUser) -> PaymentConfigResponse:
    settings = get_settings()
    return PaymentConfigResponse(
        gateway=get_gateway().name,
        publishable_key=settings.stripe_publishable_key,
        currency=settings.currency,
    )
