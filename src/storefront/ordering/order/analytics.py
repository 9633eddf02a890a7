"""Sales summary over a window of placed orders."""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from protean.utils.globals import current_domain

from storefront.ordering.order.order import Order, PaymentStatus
from storefront.shared.money import quantize, to_amount, to_decimal

DEFAULT_WINDOW_DAYS = 30
TOP_PRODUCTS_LIMIT = 10


@dataclass
class ProductSales:
    product_id: str
    name: str
    quantity: int = 0
    revenue: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "total_quantity": self.quantity,
            "total_revenue": to_amount(self.revenue),
        }


@dataclass
class SalesSummary:
    start: datetime
    end: datetime
    total_orders: int = 0
    total_revenue: Decimal = Decimal("0")
    total_items: int = 0
    status_breakdown: dict = field(default_factory=dict)
    top_products: list[ProductSales] = field(default_factory=list)

    @property
    def average_order_value(self) -> Decimal:
        if not self.total_orders:
            return Decimal("0")
        return quantize(self.total_revenue / self.total_orders)

    def to_dict(self) -> dict:
        return {
            "analytics": {
                "total_orders": self.total_orders,
                "total_revenue": to_amount(self.total_revenue),
                "average_order_value": to_amount(self.average_order_value),
                "total_items": self.total_items,
            },
            "status_breakdown": self.status_breakdown,
            "top_products": [product.to_dict() for product in self.top_products],
            "period": {"start_date": self.start.isoformat(), "end_date": self.end.isoformat()},
        }


def summarize(orders, start, end) -> SalesSummary:
    """Revenue, items and top products count paid orders only.

    The status breakdown covers every order in the window, with revenue
    counted for the paid ones.
    """
    summary = SalesSummary(start=start, end=end)
    statuses = Counter()
    status_revenue = defaultdict(Decimal)
    products: dict[str, ProductSales] = {}

    for order in orders:
        statuses[order.status] += 1
        if order.payment.status != PaymentStatus.COMPLETED.value:
            continue

        total = to_decimal(order.pricing.total)
        status_revenue[order.status] += total
        summary.total_orders += 1
        summary.total_revenue += total
        summary.total_items += order.total_items

        for item in order.items:
            key = str(item.product_id)
            sales = products.setdefault(key, ProductSales(product_id=key, name=item.name))
            sales.quantity += item.quantity
            sales.revenue += to_decimal(item.price) * item.quantity

    summary.total_revenue = quantize(summary.total_revenue)
    summary.status_breakdown = {
        status: {"count": count, "revenue": to_amount(status_revenue[status])} for status, count in statuses.items()
    }
    summary.top_products = sorted(products.values(), key=lambda sales: sales.quantity, reverse=True)[
        :TOP_PRODUCTS_LIMIT
    ]
    return summary


def _aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def sales_summary(start=None, end=None) -> SalesSummary:
    """Summary for orders placed in ``[start, end]``; defaults to the last 30 days.

    Naive datetimes are read as UTC.
    """
    end = _aware(end) or datetime.now(UTC)
    start = _aware(start) or end - timedelta(days=DEFAULT_WINDOW_DAYS)
    orders = current_domain.repository_for(Order).placed_between(start, end)
    return summarize(orders, start, end)
