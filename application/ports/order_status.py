"""
Order status port: where webhook outcomes are written.

Order management lives outside this service; adapters only need to accept
the three transitions.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from application.dtos.payments import WebhookEvent


@runtime_checkable
class OrderStatusSink(Protocol):
    async def mark_paid(self, event: WebhookEvent, *, gateway: str) -> None: ...

    async def mark_failed(self, event: WebhookEvent, *, gateway: str) -> None: ...

    async def mark_refunded(self, event: WebhookEvent, *, gateway: str) -> None: ...
