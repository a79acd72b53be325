"""
购物车状态容器

由组合根创建并注入给使用方，不作为全局单例存在。单写者：仅 UI 驱动修改，无需加锁。
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

from domain.common.exceptions import DomainValidationException
from domain.order.entity import LineItem


@dataclass(frozen=True)
class CartItem:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_line_item(self) -> LineItem:
        return LineItem(id=self.product_id, name=self.name, price=self.unit_price, quantity=self.quantity)


class CartStore:
    """购物车：增删改清空 + 派生合计"""

    def __init__(self, items: Optional[list[CartItem]] = None) -> None:
        self._items: list[CartItem] = list(items or [])

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get(self, product_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, product_id: str, name: str, unit_price: Decimal, quantity: int = 1) -> CartItem:
        """已存在的商品累加数量，否则追加到末尾"""
        if quantity <= 0:
            raise DomainValidationException(f"加购数量必须大于0: {quantity}", field="quantity")
        existing = self.get(product_id)
        if existing is not None:
            updated = replace(existing, quantity=existing.quantity + quantity)
            self._replace(updated)
            return updated
        item = CartItem(product_id=product_id, name=name, unit_price=Decimal(unit_price), quantity=quantity)
        self._items.append(item)
        return item

    def remove_item(self, product_id: str) -> None:
        self._items = [item for item in self._items if item.product_id != product_id]

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        existing = self.get(product_id)
        if existing is None:
            return
        self._replace(replace(existing, quantity=quantity))

    def clear(self) -> None:
        self._items = []

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0"))

    def to_line_items(self) -> list[LineItem]:
        return [item.to_line_item() for item in self._items]

    def _replace(self, updated: CartItem) -> None:
        self._items = [updated if item.product_id == updated.product_id else item for item in self._items]
