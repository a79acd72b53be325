"""
Payment DTOs (Pydantic v2) used at application boundaries.

Wire format is camelCase (`transactionId`, `expiresAt`, ...); snake_case
field names are accepted on input too.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_serializer
from pydantic.alias_generators import to_camel

from domain.order.entity import LineItem, Order, ShippingAddress
from shared.timeutil import utc_isoformat


# 金额在 JSON 中输出为数字
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]

SessionStatus = Literal["pending", "processing", "success", "failed"]
ResultStatus = Literal["success", "failed"]


class CamelDTO(BaseModel):
    """Base DTO: camelCase aliases, datetimes serialized as UTC-Z."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @model_serializer(mode="wrap")
    def _serialize_model(self, handler):  # type: ignore[override]
        data = handler(self)
        if not isinstance(data, dict):
            return data
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = utc_isoformat(value)
        return data


class LineItemData(CamelDTO):
    id: str
    name: str
    price: Money = Field(ge=0)
    quantity: int = Field(gt=0)


class ShippingData(CamelDTO):
    name: str
    address: str
    city: str
    state: str
    zip: str


class OrderData(CamelDTO):
    id: str
    items: list[LineItemData] = Field(default_factory=list)
    shipping: ShippingData
    subtotal: Money
    shipping_cost: Money
    tax: Money
    total: Money

    @classmethod
    def from_order(cls, order: Order) -> "OrderData":
        return cls(
            id=order.id,
            items=[LineItemData(id=i.id, name=i.name, price=i.price, quantity=i.quantity) for i in order.items],
            shipping=ShippingData(
                name=order.shipping.name,
                address=order.shipping.address,
                city=order.shipping.city,
                state=order.shipping.state,
                zip=order.shipping.zip,
            ),
            subtotal=order.subtotal,
            shipping_cost=order.shipping_cost,
            tax=order.tax,
            total=order.total,
        )

    def to_order(self) -> Order:
        return Order(
            id=self.id,
            items=tuple(LineItem(id=i.id, name=i.name, price=i.price, quantity=i.quantity) for i in self.items),
            shipping=ShippingAddress(**self.shipping.model_dump()),
            subtotal=self.subtotal,
            shipping_cost=self.shipping_cost,
            tax=self.tax,
            total=self.total,
        )


class CheckoutSession(CamelDTO):
    transaction_id: str
    status: SessionStatus = "pending"
    payment_url: Optional[str] = None
    expires_at: datetime


class PaymentResult(CamelDTO):
    transaction_id: str
    status: ResultStatus
    amount: Money = Decimal("0")
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


class CreateSessionRequest(CamelDTO):
    # order 先按原始对象接收：缺失/无商品或字段不全一律返回 400 InvalidOrder，而不是 422
    order: Optional[dict[str, Any]] = None
    gateway: Optional[str] = None


class CaptureRequest(CamelDTO):
    transaction_id: Optional[str] = None
    gateway: Optional[str] = None


class RefundPaymentRequest(CamelDTO):
    transaction_id: Optional[str] = None
    amount: Optional[Money] = Field(default=None, ge=0)
    gateway: Optional[str] = None


class WebhookEvent(CamelDTO):
    # 网关可能以数字发送订单号/交易号；缺失或为 null 的 event 视为未识别事件
    event: Optional[str] = None
    transaction_id: Optional[str] = None
    order_id: Optional[str] = None
    amount: Optional[Money] = None
    reason: Optional[str] = None
    refund_amount: Optional[Money] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class WebhookAck(CamelDTO):
    success: bool = True
    event: Optional[str] = None
    handled: bool = True
