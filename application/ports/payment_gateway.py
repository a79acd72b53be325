"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, runtime_checkable

from application.dtos.payments import CheckoutSession, PaymentResult
from domain.order.entity import Order


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the (simulated) payment processors.

    A declined capture is returned as ``PaymentResult(status="failed")``;
    exceptions are reserved for transport failures.
    """

    provider: str

    async def create_checkout_session(self, order: Order) -> CheckoutSession: ...

    async def capture(self, transaction_id: str) -> PaymentResult: ...

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult: ...
