"""
订单金额计算：运费与税费规则
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from .entity import LineItem, Order, ShippingAddress

CENT = Decimal("0.01")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingPolicy:
    """
    业务规则：
    1. 小计严格大于免运费门槛时运费为 0，否则收取固定运费
    2. 税费按小计计算，不含运费
    3. 所有金额保留到分（四舍五入）
    """

    free_shipping_threshold: Decimal = Decimal("75.00")
    flat_shipping: Decimal = Decimal("9.99")
    tax_rate: Decimal = Decimal("0.0875")

    def shipping_for(self, subtotal: Decimal) -> Decimal:
        if subtotal > self.free_shipping_threshold:
            return Decimal("0.00")
        return _to_cents(self.flat_shipping)

    def tax_for(self, subtotal: Decimal) -> Decimal:
        return _to_cents(subtotal * self.tax_rate)

    def build_order(self, order_id: str, items: Iterable[LineItem], shipping: ShippingAddress) -> Order:
        lines = tuple(items)
        subtotal = _to_cents(sum((line.line_total for line in lines), Decimal("0")))
        shipping_cost = self.shipping_for(subtotal)
        tax = self.tax_for(subtotal)
        return Order(
            id=order_id,
            items=lines,
            shipping=shipping,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            total=subtotal + shipping_cost + tax,
        )
