"""Business-rule exceptions raised by the storefront domain.

Rule violations extend Protean's ``ValidationError`` so they carry the same
field-keyed messages and surface as 400 responses.
"""

from protean.exceptions import ValidationError


class DuplicateEntry(ValidationError):
    """A unique attribute (SKU, category name) is already taken."""


class ProductUnavailable(ValidationError):
    """The product exists but is not active."""


class InsufficientStock(ValidationError):
    """Tracked inventory cannot cover the requested quantity."""


class EmptyCart(ValidationError):
    """Checkout was attempted on a cart without items."""


class AccessDenied(Exception):
    """The caller is authenticated but may not act on this resource."""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)
        self.message = message


class PaymentGatewayError(Exception):
    """The payment provider rejected or failed a request."""

    def __init__(self, message: str, provider_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.provider_code = provider_code


class InvalidWebhookSignature(Exception):
    """A webhook payload could not be authenticated against the shared secret."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message)
        self.message = message
