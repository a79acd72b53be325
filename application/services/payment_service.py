"""
Application service behind the server-side payment endpoints.

The simulator for the requested gateway is injected from the composition
root (API layer). Every created session, capture and refund is recorded as a
structured log line; nothing else is persisted.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol

from pydantic import ValidationError

from application.dtos.payments import (
    CaptureRequest,
    CheckoutSession,
    CreateSessionRequest,
    OrderData,
    PaymentResult,
    RefundPaymentRequest,
)
from core.logging_config import get_logger
from domain.common.exceptions import InvalidOrderException, MissingTransactionIdException


logger = get_logger(__name__)


class GatewayBackend(Protocol):
    name: str

    async def create_session(self, order_id: str) -> CheckoutSession: ...

    async def capture(self, transaction_id: str) -> PaymentResult: ...

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult: ...


class PaymentService:
    def __init__(self, backend: GatewayBackend) -> None:
        self.backend = backend

    async def create_checkout_session(self, req: CreateSessionRequest) -> CheckoutSession:
        raw = req.order
        if not raw or not raw.get("items"):
            raise InvalidOrderException()
        try:
            order = OrderData.model_validate(raw)
        except ValidationError as exc:
            raise InvalidOrderException(details={"errors": exc.errors(include_url=False, include_context=False)}) from exc
        session = await self.backend.create_session(order.id)
        logger.info(
            "checkout_session_created",
            order_id=order.id,
            transaction_id=session.transaction_id,
            total=str(order.total),
            gateway=self.backend.name,
        )
        return session

    async def capture(self, req: CaptureRequest) -> PaymentResult:
        transaction_id = (req.transaction_id or "").strip()
        if not transaction_id:
            raise MissingTransactionIdException()
        result = await self.backend.capture(transaction_id)
        logger.info(
            "payment_capture",
            transaction_id=transaction_id,
            status=result.status,
            gateway=self.backend.name,
        )
        return result

    async def refund(self, req: RefundPaymentRequest) -> PaymentResult:
        transaction_id = (req.transaction_id or "").strip()
        if not transaction_id:
            raise MissingTransactionIdException()
        result = await self.backend.refund(transaction_id, req.amount)
        logger.info(
            "payment_refund",
            transaction_id=transaction_id,
            amount=str(result.amount),
            status=result.status,
            gateway=self.backend.name,
        )
        return result
