"""
结账流程状态机

collecting-shipping → collecting-payment → reviewing → submitting → {succeeded, failed}

failed 状态下允许重新提交（等价于回到 reviewing 再确认），每次提交都是全新的一次尝试。
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

from domain.common.exceptions import (
    CheckoutInProgressException,
    CheckoutStateException,
    CheckoutValidationException,
)
from domain.order.entity import ShippingAddress, validate_zip_code


class CheckoutStep(str, Enum):
    """结账步骤枚举"""
    COLLECTING_SHIPPING = "collecting-shipping"
    COLLECTING_PAYMENT = "collecting-payment"
    REVIEWING = "reviewing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ShippingForm:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""

    REQUIRED = ("first_name", "last_name", "email", "address", "city", "state", "zip")

    def missing_fields(self) -> list[str]:
        return [name for name in self.REQUIRED if not (getattr(self, name) or "").strip()]

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(
            name=f"{self.first_name} {self.last_name}",
            address=self.address,
            city=self.city,
            state=self.state,
            zip=self.zip,
        )


@dataclass
class PaymentForm:
    # 不做卡号格式/校验位检查：没有真实支付处理方接入
    card_number: str = ""
    expiry_date: str = ""
    cvv: str = ""
    card_name: str = ""

    def missing_fields(self) -> list[str]:
        return [f.name for f in fields(self) if not (getattr(self, f.name) or "").strip()]


class CheckoutFlow:
    """
    单次结账的状态机（单飞：提交中不允许再次提交）

    业务规则：
    1. 配送信息必填项非空，邮编为 5 位或 5+4 位
    2. 支付信息必填项非空
    3. 仅在 reviewing（或 failed 重试）时可以确认提交，确认不可撤回
    4. 校验失败时停留在当前步骤
    """

    def __init__(self) -> None:
        self.step: CheckoutStep = CheckoutStep.COLLECTING_SHIPPING
        self.shipping: Optional[ShippingForm] = None
        self.payment: Optional[PaymentForm] = None
        self.order_id: Optional[str] = None
        self.failure_reason: Optional[str] = None
        self.attempts: int = 0

    def _require(self, action: str, *allowed: CheckoutStep) -> None:
        if self.step not in allowed:
            raise CheckoutStateException(current=self.step.value, action=action)

    def submit_shipping(self, form: ShippingForm) -> None:
        self._require("submit shipping", CheckoutStep.COLLECTING_SHIPPING)
        missing = form.missing_fields()
        if missing:
            raise CheckoutValidationException(
                "Please fill in all required fields",
                step=self.step.value,
                field=missing[0],
                missing=missing,
            )
        if not validate_zip_code(form.zip):
            raise CheckoutValidationException(
                "Please enter a valid ZIP code",
                step=self.step.value,
                field="zip",
            )
        self.shipping = form
        self.step = CheckoutStep.COLLECTING_PAYMENT

    def submit_payment(self, form: PaymentForm) -> None:
        self._require("submit payment", CheckoutStep.COLLECTING_PAYMENT)
        missing = form.missing_fields()
        if missing:
            raise CheckoutValidationException(
                "Please fill in all payment information",
                step=self.step.value,
                field=missing[0],
                missing=missing,
            )
        self.payment = form
        self.step = CheckoutStep.REVIEWING

    def back(self) -> None:
        """返回上一步（只在收集/确认阶段可用）"""
        if self.step == CheckoutStep.COLLECTING_PAYMENT:
            self.step = CheckoutStep.COLLECTING_SHIPPING
        elif self.step in (CheckoutStep.REVIEWING, CheckoutStep.FAILED):
            self.step = CheckoutStep.COLLECTING_PAYMENT
        elif self.step == CheckoutStep.COLLECTING_SHIPPING:
            return
        else:
            raise CheckoutStateException(current=self.step.value, action="go back")

    def begin_submission(self) -> None:
        if self.step == CheckoutStep.SUBMITTING:
            raise CheckoutInProgressException()
        self._require("submit", CheckoutStep.REVIEWING, CheckoutStep.FAILED)
        self.step = CheckoutStep.SUBMITTING
        self.failure_reason = None
        self.attempts += 1

    def mark_succeeded(self, order_id: str) -> None:
        self._require("complete", CheckoutStep.SUBMITTING)
        self.order_id = order_id
        self.step = CheckoutStep.SUCCEEDED

    def mark_failed(self, reason: Optional[str] = None) -> None:
        self._require("fail", CheckoutStep.SUBMITTING)
        self.failure_reason = reason
        self.step = CheckoutStep.FAILED

    @property
    def can_submit(self) -> bool:
        return self.step in (CheckoutStep.REVIEWING, CheckoutStep.FAILED)
