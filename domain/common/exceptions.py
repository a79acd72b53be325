"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class CheckoutValidationException(DomainValidationException):
    """结账表单校验失败（停留在当前步骤）"""

    def __init__(self, message: str, *, step: str, field: str | None = None, missing: list[str] | None = None):
        details: dict = {"step": step}
        if missing:
            details["missing"] = missing
        super().__init__(message, field=field, details=details)
        self.error_type = "CheckoutValidationError"


class InvalidOrderException(BusinessException):
    def __init__(self, message: str = "Invalid order data", *, details: dict | None = None):
        super().__init__(
            code=BusinessCode.PARAM_ERROR,
            message=message,
            error_type="InvalidOrder",
            details=details,
            field="order",
        )


class MissingTransactionIdException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message="Transaction ID is required",
            error_type="MissingTransactionId",
            field="transactionId",
        )


class EmptyCartException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.CART_EMPTY,
            message="Cart is empty",
            error_type="EmptyCart",
        )


class CheckoutStateException(BusinessException):
    """状态机不允许的迁移"""

    def __init__(self, current: str, action: str):
        super().__init__(
            code=BusinessCode.CHECKOUT_STATE_ERROR,
            message=f"Cannot {action} while checkout is {current}",
            error_type="CheckoutStateError",
            details={"state": current, "action": action},
        )


class CheckoutInProgressException(CheckoutStateException):
    def __init__(self):
        super().__init__(current="submitting", action="submit")
        self.error_type = "CheckoutInProgress"


class CheckoutFailedException(BusinessException):
    """支付未完成：网关异常或扣款被拒。用户可重新提交。"""

    def __init__(self, message: str = "Failed to process payment. Please try again.", *, reason: str | None = None):
        super().__init__(
            code=PaymentCode.CHECKOUT_FAILED,
            message=message,
            error_type="CheckoutFailed",
            details={"retryable": True, "reason": reason},
        )

    @property
    def retryable(self) -> bool:
        return True
