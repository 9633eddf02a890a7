"""Read-only cart validation against the current catalogue.

``validate_cart`` never changes the cart; it reports what checkout would
trip over so the client can fix the cart first.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product.product import Product
from storefront.shared.money import prices_match, to_amount, to_decimal


class IssueKind(Enum):
    PRODUCT_NOT_FOUND = "product_not_found"
    PRODUCT_INACTIVE = "product_inactive"
    OUT_OF_STOCK = "out_of_stock"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRICE_CHANGED = "price_changed"


@dataclass(frozen=True)
class CartIssue:
    item_id: str
    type: str
    message: str
    available_quantity: int | None = None
    old_price: float | None = None
    new_price: float | None = None


@dataclass
class CartValidation:
    issues: list[CartIssue] = field(default_factory=list)
    total_items_count: int = 0

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def valid_items_count(self) -> int:
        return self.total_items_count - len({issue.item_id for issue in self.issues})

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "issues": [{k: v for k, v in asdict(issue).items() if v is not None} for issue in self.issues],
            "valid_items_count": self.valid_items_count,
            "total_items_count": self.total_items_count,
        }


def _lookup_product(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None


def validate_cart(cart, lookup=_lookup_product) -> CartValidation:
    """Check every line for existence, availability, stock and price drift."""
    result = CartValidation(total_items_count=len(cart.items) if cart else 0)
    if cart is None:
        return result

    for item in cart.items:
        item_id = str(item.id)
        product = lookup(item.product_id)

        if product is None:
            result.issues.append(CartIssue(item_id, IssueKind.PRODUCT_NOT_FOUND.value, "Product no longer exists"))
            continue

        if not product.is_active:
            result.issues.append(CartIssue(item_id, IssueKind.PRODUCT_INACTIVE.value, "Product is no longer available"))
            continue

        if product.inventory.track_quantity:
            available = product.inventory.quantity
            if available == 0:
                result.issues.append(CartIssue(item_id, IssueKind.OUT_OF_STOCK.value, "Product is out of stock"))
                continue
            if available < item.quantity:
                result.issues.append(
                    CartIssue(
                        item_id,
                        IssueKind.INSUFFICIENT_STOCK.value,
                        f"Only {available} items available",
                        available_quantity=available,
                    )
                )

        current_price = to_decimal(product.price) + item.modifier_total
        if not prices_match(current_price, item.effective_price):
            result.issues.append(
                CartIssue(
                    item_id,
                    IssueKind.PRICE_CHANGED.value,
                    "Product price has changed",
                    old_price=to_amount(item.effective_price),
                    new_price=to_amount(current_price),
                )
            )

    return result
