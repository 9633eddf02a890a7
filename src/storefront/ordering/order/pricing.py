"""Checkout price calculation."""

from dataclasses import dataclass
from decimal import Decimal

from storefront.config import get_settings
from storefront.shared.money import quantize, to_amount, to_decimal


@dataclass(frozen=True)
class PriceQuote:
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal

    def as_amounts(self) -> dict:
        return {
            "subtotal": to_amount(self.subtotal),
            "shipping": to_amount(self.shipping),
            "tax": to_amount(self.tax),
            "discount": to_amount(self.discount),
            "total": to_amount(self.total),
        }


def quote(subtotal, discount=0, settings=None) -> PriceQuote:
    """Shipping, tax and total for a cart subtotal.

    Shipping is free at or above the threshold, otherwise a flat rate. Tax
    applies to subtotal plus shipping, before the discount.
    """
    settings = settings or get_settings()

    subtotal = quantize(subtotal)
    discount = min(quantize(discount), subtotal)
    shipping = Decimal("0") if subtotal >= settings.free_shipping_threshold else quantize(settings.flat_shipping_rate)
    tax = quantize((subtotal + shipping) * to_decimal(settings.tax_rate))
    total = subtotal + shipping + tax - discount

    return PriceQuote(subtotal=subtotal, shipping=shipping, tax=tax, discount=discount, total=quantize(total))
