"""Infrastructure adapter that implements the application OrderStatusSink
by emitting structured log lines.

There is no order store in this service; the log line is the record.
"""
from __future__ import annotations

from datetime import datetime, timezone

from application.dtos.payments import WebhookEvent
from application.ports.order_status import OrderStatusSink
from core.logging_config import get_logger


logger = get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LoggingOrderStatusSink(OrderStatusSink):
    async def mark_paid(self, event: WebhookEvent, *, gateway: str) -> None:
        logger.info(
            "order_marked_paid",
            transaction_id=event.transaction_id,
            order_id=event.order_id,
            amount=str(event.amount) if event.amount is not None else None,
            gateway=gateway,
            timestamp=_now(),
        )

    async def mark_failed(self, event: WebhookEvent, *, gateway: str) -> None:
        logger.info(
            "order_marked_failed",
            transaction_id=event.transaction_id,
            order_id=event.order_id,
            reason=event.reason,
            gateway=gateway,
            timestamp=_now(),
        )

    async def mark_refunded(self, event: WebhookEvent, *, gateway: str) -> None:
        logger.info(
            "order_marked_refunded",
            transaction_id=event.transaction_id,
            order_id=event.order_id,
            amount=str(event.refund_amount) if event.refund_amount is not None else None,
            gateway=gateway,
            timestamp=_now(),
        )
