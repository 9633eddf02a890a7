"""Stripe payment gateway adapter, backed by the stripe-python SDK."""

import stripe

from storefront.payments.gateway.port import (
    PaymentGateway,
    PaymentIntent,
    RefundResult,
    WebhookEvent,
)
from storefront.shared.errors import InvalidWebhookSignature, PaymentGatewayError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _metadata(stripe_object) -> dict:
    metadata = stripe_object.get("metadata") or {}
    return {key: metadata[key] for key in metadata.keys()}


def _to_intent(stripe_intent) -> PaymentIntent:
    return PaymentIntent(
        id=stripe_intent["id"],
        status=stripe_intent["status"],
        amount=stripe_intent["amount"],
        currency=stripe_intent["currency"],
        client_secret=stripe_intent.get("client_secret"),
        metadata=_metadata(stripe_intent),
    )


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    name = "stripe"

    def __init__(self, api_key: str, webhook_secret: str) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret

    def create_payment_intent(self, amount, currency, metadata, description=None) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=amount,
                currency=currency,
                metadata=metadata,
                description=description,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent creation failed", error=str(exc), code=exc.code)
            raise PaymentGatewayError(exc.user_message or str(exc), provider_code=exc.code) from exc
        return _to_intent(intent)

    def retrieve_payment_intent(self, payment_intent_id) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent lookup failed", payment_intent_id=payment_intent_id, error=str(exc))
            raise PaymentGatewayError(exc.user_message or str(exc), provider_code=exc.code) from exc
        return _to_intent(intent)

    def create_refund(self, payment_intent_id, amount=None, reason=None) -> RefundResult:
        params = {"payment_intent": payment_intent_id, "metadata": {"reason": reason or ""}}
        if amount is not None:
            params["amount"] = amount
        try:
            refund = stripe.Refund.create(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe refund failed", payment_intent_id=payment_intent_id, error=str(exc))
            raise PaymentGatewayError(exc.user_message or str(exc), provider_code=exc.code) from exc
        return RefundResult(refund_id=refund["id"], status=refund["status"], amount=refund["amount"])

    def construct_webhook_event(self, payload, signature) -> WebhookEvent:
        try:
            event = stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise InvalidWebhookSignature(str(exc)) from exc
        except ValueError as exc:
            raise InvalidWebhookSignature(f"Invalid payload: {exc}") from exc

        return WebhookEvent(id=event["id"], type=event["type"], intent=_to_intent(event["data"]["object"]))
