"""
Payment specific codes and the webhook event table.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Gateway/transport errors (6xxxx)
    SESSION_CREATION_FAILED = 60000
    CAPTURE_FAILED = 60001
    REFUND_FAILED = 60002
    SIGNATURE_ERROR = 60003
    UNKNOWN_GATEWAY = 60004
    WEBHOOK_PROCESSING_ERROR = 60005

    # Checkout outcome (61xxx)
    CHECKOUT_FAILED = 61000


# Webhook 事件类型 → 订单状态动作
WEBHOOK_EVENT_ACTIONS = {
    "payment.completed": "mark_paid",
    "payment.captured": "mark_paid",
    "payment.failed": "mark_failed",
    "payment.refunded": "mark_refunded",
}
