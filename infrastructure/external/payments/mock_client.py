"""
Mock adapter for development: calls the gateway simulator in-process.

No server boundary is involved, so capture never raises a transport error.
"""
from __future__ import annotations

import random
from decimal import Decimal
from typing import Optional

from application.dtos.payments import CheckoutSession, PaymentResult
from core.settings import PaymentSettings
from domain.order.entity import Order
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.simulator import GatewaySimulator


class MockClient(BasePaymentClient):
    provider = "mock"

    def __init__(self, *, settings: Optional[PaymentSettings] = None, rng: Optional[random.Random] = None):
        super().__init__(settings=settings)
        self._simulator = GatewaySimulator(
            self.provider,
            self.settings.mock,
            latency_scale=self.settings.latency_scale,
            rng=rng,
        )

    async def create_checkout_session(self, order: Order) -> CheckoutSession:  # type: ignore[override]
        session = await self._simulator.create_session(order.id)
        self._log("payment_session_created", order_id=order.id, transaction_id=session.transaction_id)
        return session

    async def capture(self, transaction_id: str) -> PaymentResult:  # type: ignore[override]
        result = await self._simulator.capture(transaction_id)
        self._log("payment_captured", transaction_id=transaction_id, status=result.status)
        return result

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult:  # type: ignore[override]
        result = await self._simulator.refund(transaction_id, amount if amount is not None else Decimal("0"))
        self._log("payment_refunded", transaction_id=transaction_id, amount=str(result.amount))
        return result
