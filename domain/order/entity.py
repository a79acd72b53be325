"""
订单领域实体 - 由购物车派生的购买意图
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from domain.common.exceptions import DomainValidationException
from shared.ids import epoch_millis, random_base36


ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

# ZIP 前两位 → 州（简化映射，生产环境应接入专门服务）
_ZIP_PREFIX_TO_STATE = {
    "90": "CA", "91": "CA", "92": "CA", "93": "CA", "94": "CA", "95": "CA",
    "10": "NY", "11": "NY", "12": "NY", "13": "NY", "14": "NY",
    "77": "TX", "78": "TX", "79": "TX",
    "32": "FL", "33": "FL", "34": "FL",
    "60": "IL", "61": "IL", "62": "IL",
    "80": "CO", "81": "CO",
    "97": "OR", "98": "WA", "99": "WA",
    "83": "ID", "84": "UT",
    "05": "VT", "02": "RI",
    "96": "HI", "72": "AR",
    "66": "KS", "67": "KS",
    "70": "LA", "71": "LA",
    "73": "OK", "74": "OK",
}


def validate_zip_code(zip_code: str) -> bool:
    """5 位或 5+4 位美国邮编"""
    return ZIP_CODE_PATTERN.fullmatch(zip_code or "") is not None


def state_from_zip(zip_code: str) -> Optional[str]:
    return _ZIP_PREFIX_TO_STATE.get((zip_code or "")[:2])


def generate_order_id() -> str:
    """`ORD-<epochMillis>-<9位大写 base36>`"""
    return f"ORD-{epoch_millis()}-{random_base36().upper()}"


def format_price(amount: Decimal) -> str:
    quantized = Decimal(amount).quantize(Decimal("0.01"))
    sign = "-" if quantized < 0 else ""
    return f"{sign}${abs(quantized):,.2f}"


@dataclass(frozen=True)
class LineItem:
    id: str
    name: str
    price: Decimal
    quantity: int

    def __post_init__(self):
        if self.quantity <= 0:
            raise DomainValidationException(f"商品数量必须大于0: {self.quantity}", field="quantity")
        if self.price < 0:
            raise DomainValidationException(f"商品单价不能为负: {self.price}", field="price")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    address: str
    city: str
    state: str
    zip: str


@dataclass(frozen=True)
class Order:
    """
    订单（提交给网关后不可变，不做持久化）

    金额字段由 PricingPolicy 计算：
    subtotal = Σ 单价 × 数量；total = subtotal + shipping_cost + tax
    """

    id: str
    items: tuple[LineItem, ...]
    shipping: ShippingAddress
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal

    def __post_init__(self):
        if not self.items:
            raise DomainValidationException("订单至少需要一个商品", field="items")
