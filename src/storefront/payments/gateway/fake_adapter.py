"""Configurable fake payment gateway for development and testing.

Keeps payment intents in memory and mimics the provider's behaviour:
intents are created unpaid, tests (or the operator) settle them with
``succeed``/``fail``, and webhooks are signed like the real provider does,
with an HMAC-SHA256 of ``"<timestamp>.<payload>"`` under the webhook secret,
sent as ``t=<timestamp>,v1=<hex digest>``.
"""

import hashlib
import hmac
import json
import time
from uuid import uuid4

from storefront.payments.gateway.port import (
    SUCCEEDED,
    PaymentGateway,
    PaymentIntent,
    RefundResult,
    WebhookEvent,
)
from storefront.shared.errors import InvalidWebhookSignature, PaymentGatewayError

REQUIRES_PAYMENT_METHOD = "requires_payment_method"


def _signature_for(secret: str, timestamp: int, payload: bytes) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


class FakeGateway(PaymentGateway):
    """In-memory payment gateway."""

    name = "fake"

    def __init__(self, webhook_secret: str = "whsec_test") -> None:
        self.webhook_secret = webhook_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.intents: dict[str, PaymentIntent] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Make subsequent provider calls succeed or fail."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _check_available(self) -> None:
        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason, provider_code="card_declined")

    # -------------------------------------------------------------------
    # Port
    # -------------------------------------------------------------------
    def create_payment_intent(self, amount, currency, metadata, description=None) -> PaymentIntent:
        self.calls.append(
            {
                "method": "create_payment_intent",
                "amount": amount,
                "currency": currency,
                "metadata": dict(metadata),
                "description": description,
            }
        )
        self._check_available()

        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        intent = PaymentIntent(
            id=intent_id,
            status=REQUIRES_PAYMENT_METHOD,
            amount=amount,
            currency=currency,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id) -> PaymentIntent:
        self.calls.append({"method": "retrieve_payment_intent", "payment_intent_id": payment_intent_id})
        intent = self.intents.get(payment_intent_id)
        if intent is None:
            raise PaymentGatewayError(f"No such payment_intent: {payment_intent_id}", provider_code="resource_missing")
        return intent

    def create_refund(self, payment_intent_id, amount=None, reason=None) -> RefundResult:
        self.calls.append(
            {
                "method": "create_refund",
                "payment_intent_id": payment_intent_id,
                "amount": amount,
                "reason": reason,
            }
        )
        self._check_available()
        return RefundResult(refund_id=f"re_fake_{uuid4().hex[:12]}", status=SUCCEEDED, amount=amount)

    def construct_webhook_event(self, payload, signature) -> WebhookEvent:
        if isinstance(payload, str):
            payload = payload.encode()

        parts = dict(part.split("=", 1) for part in (signature or "").split(",") if "=" in part)
        timestamp, digest = parts.get("t"), parts.get("v1")
        if not timestamp or not digest or not timestamp.isdigit():
            raise InvalidWebhookSignature("Unable to extract timestamp and signatures from header")

        expected = _signature_for(self.webhook_secret, int(timestamp), payload)
        if not hmac.compare_digest(expected, digest):
            raise InvalidWebhookSignature("No signatures found matching the expected signature for payload")

        try:
            body = json.loads(payload)
            data = body["data"]["object"]
            intent = PaymentIntent(
                id=data["id"],
                status=data.get("status", ""),
                amount=data.get("amount", 0),
                currency=data.get("currency", ""),
                metadata=data.get("metadata") or {},
            )
            return WebhookEvent(id=body.get("id", ""), type=body["type"], intent=intent)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise InvalidWebhookSignature(f"Invalid payload: {exc}") from exc

    # -------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------
    def _settle(self, payment_intent_id, status) -> PaymentIntent:
        current = self.intents[payment_intent_id]
        settled = PaymentIntent(
            id=current.id,
            status=status,
            amount=current.amount,
            currency=current.currency,
            client_secret=current.client_secret,
            metadata=current.metadata,
        )
        self.intents[payment_intent_id] = settled
        return settled

    def succeed(self, payment_intent_id) -> PaymentIntent:
        """Simulate the customer completing the payment."""
        return self._settle(payment_intent_id, SUCCEEDED)

    def fail(self, payment_intent_id) -> PaymentIntent:
        """Simulate a declined payment; the provider returns the intent to its unpaid state."""
        return self._settle(payment_intent_id, REQUIRES_PAYMENT_METHOD)

    def sign(self, payload, timestamp=None) -> str:
        """Signature header for ``payload``, as the provider would send it."""
        if isinstance(payload, str):
            payload = payload.encode()
        timestamp = timestamp or int(time.time())
        return f"t={timestamp},v1={_signature_for(self.webhook_secret, timestamp, payload)}"

    def event_payload(self, event_type, payment_intent_id) -> bytes:
        """Serialized webhook body for one of this gateway's intents."""
        intent = self.intents[payment_intent_id]
        return json.dumps(
            {
                "id": f"evt_fake_{uuid4().hex[:12]}",
                "type": event_type,
                "data": {
                    "object": {
                        "id": intent.id,
                        "status": intent.status,
                        "amount": intent.amount,
                        "currency": intent.currency,
                        "metadata": intent.metadata,
                    }
                },
            }
        ).encode()
