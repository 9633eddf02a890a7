"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (``PAYMENT_GATEWAY=fake``)
- StripeGateway for production (``PAYMENT_GATEWAY=stripe``)
"""

from storefront.config import get_settings
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.port import PaymentGateway
from storefront.payments.gateway.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None


def _configured_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.payment_gateway == "stripe":
        if not settings.stripe_secret_key:
            raise RuntimeError("STRIPE_SECRET_KEY must be set when PAYMENT_GATEWAY=stripe")
        return StripeGateway(api_key=settings.stripe_secret_key, webhook_secret=settings.stripe_webhook_secret)
    return FakeGateway(webhook_secret=settings.stripe_webhook_secret)


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _configured_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
