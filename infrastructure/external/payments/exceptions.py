"""
Exceptions for payment gateways mapped to unified BusinessException variants.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentTransportError(BusinessException):
    """网关调用本身失败（非业务拒付）"""

    code_value: int = PaymentCode.SESSION_CREATION_FAILED
    error_name: str = "PaymentTransportError"

    def __init__(self, message: str, *, provider: str, status_code: int | None = None, details: Optional[dict] = None):
        full_details = {"provider": provider, "status_code": status_code}
        if details:
            full_details.update(details)
        super().__init__(
            code=self.code_value,
            message=message,
            error_type=self.error_name,
            details=full_details,
        )
        self.provider = provider
        self.status_code = status_code


class SessionCreationError(PaymentTransportError):
    code_value = PaymentCode.SESSION_CREATION_FAILED
    error_name = "SessionCreationError"


class CaptureError(PaymentTransportError):
    code_value = PaymentCode.CAPTURE_FAILED
    error_name = "CaptureError"


class RefundError(PaymentTransportError):
    code_value = PaymentCode.REFUND_FAILED
    error_name = "RefundError"


class UnknownGatewayException(BusinessException):
    def __init__(self, gateway: str):
        super().__init__(
            code=PaymentCode.UNKNOWN_GATEWAY,
            message="Unknown gateway",
            error_type="UnknownGatewayError",
            details={"gateway": gateway},
        )


class InvalidSignatureException(BusinessException):
    def __init__(self, gateway: str, reason: str = "Invalid signature"):
        super().__init__(
            code=PaymentCode.SIGNATURE_ERROR,
            message=reason,
            error_type="InvalidSignatureError",
            details={"gateway": gateway},
        )


class WebhookProcessingException(BusinessException):
    def __init__(self, message: str = "Webhook processing failed", *, details: Optional[dict] = None):
        super().__init__(
            code=PaymentCode.WEBHOOK_PROCESSING_ERROR,
            message=message,
            error_type="WebhookProcessingError",
            details=details,
        )
