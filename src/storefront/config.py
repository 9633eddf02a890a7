"""Application settings read from the environment.

Protean's own configuration (databases, brokers, event store) stays with the
framework. These are the storefront's business and integration settings.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache

from storefront.utils.logging import get_environment


@dataclass(frozen=True)
class StoreSettings:
    environment: str
    currency: str
    tax_rate: Decimal
    free_shipping_threshold: Decimal
    flat_shipping_rate: Decimal
    jwt_secret: str
    jwt_algorithm: str
    payment_gateway: str
    stripe_secret_key: str | None
    stripe_publishable_key: str | None
    stripe_webhook_secret: str
    cart_abandon_days: int

    @property
    def is_development(self) -> bool:
        return self.environment in ("development", "test")


@lru_cache
def get_settings() -> StoreSettings:
    return StoreSettings(
        environment=get_environment(),
        currency=os.getenv("STORE_CURRENCY", "usd").lower(),
        tax_rate=Decimal(os.getenv("STORE_TAX_RATE", "0.085")),
        free_shipping_threshold=Decimal(os.getenv("STORE_FREE_SHIPPING_THRESHOLD", "100")),
        flat_shipping_rate=Decimal(os.getenv("STORE_FLAT_SHIPPING_RATE", "10")),
        jwt_secret=os.getenv("JWT_SECRET", "change-me"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        payment_gateway=os.getenv("PAYMENT_GATEWAY", "fake").lower(),
        stripe_secret_key=os.getenv("STRIPE_SECRET_KEY"),
        stripe_publishable_key=os.getenv("STRIPE_PUBLISHABLE_KEY"),
        stripe_webhook_secret=os.getenv("STRIPE_WEBHOOK_SECRET", "whsec_test"),
        cart_abandon_days=int(os.getenv("CART_ABANDON_DAYS", "30")),
    )
