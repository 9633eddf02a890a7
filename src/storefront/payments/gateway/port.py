"""Payment gateway port (abstract interface).

Adapters speak the payment-intent model: the storefront creates an intent
for an order total, the client completes it with the provider, and the
outcome arrives either through a synchronous confirmation (retrieving the
intent) or through a signed webhook. Amounts cross this boundary in minor
currency units.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

SUCCEEDED = "succeeded"


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    status: str
    amount: int
    currency: str
    client_secret: str | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED

    @property
    def order_id(self) -> str | None:
        return self.metadata.get("order_id")


@dataclass(frozen=True)
class RefundResult:
    refund_id: str
    status: str
    amount: int | None = None


@dataclass(frozen=True)
class WebhookEvent:
    """A verified provider notification about a payment intent."""

    id: str
    type: str
    intent: PaymentIntent


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    name: str = "gateway"

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict,
        description: str | None = None,
    ) -> PaymentIntent:
        """Create an intent to collect ``amount`` minor units."""
        ...

    @abstractmethod
    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    def create_refund(
        self,
        payment_intent_id: str,
        amount: int | None = None,
        reason: str | None = None,
    ) -> RefundResult:
        """Refund a captured intent; ``amount`` None refunds in full."""
        ...

    @abstractmethod
    def construct_webhook_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the signature and parse the payload.

        Raises ``InvalidWebhookSignature`` when verification fails.
        """
        ...
