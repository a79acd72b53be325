"""
Server-side gateway simulation.

Stands in for the processor APIs: each gateway has its own latency, session
TTL, redirect URL and capture success probability (see core.settings).
The mock adapter calls this in-process; the proxied adapters reach it
through the /payments endpoints.
"""
from __future__ import annotations

import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from application.dtos.payments import CheckoutSession, PaymentResult
from core.logging_config import get_logger
from core.settings import DEFAULT_GATEWAY, KNOWN_GATEWAYS, GatewaySettings, PaymentSettings, payment_settings
from shared.ids import transaction_id as new_transaction_id


logger = get_logger(__name__)


def normalize_gateway_name(name: Optional[str]) -> str:
    """未识别的网关名一律回退到 mock（不抛异常）"""
    candidate = (name or DEFAULT_GATEWAY).strip().lower()
    if candidate in KNOWN_GATEWAYS:
        return candidate
    logger.warning("payment_gateway_unrecognized", requested=name, fallback=DEFAULT_GATEWAY)
    return DEFAULT_GATEWAY


class GatewaySimulator:
    def __init__(
        self,
        name: str,
        profile: GatewaySettings,
        *,
        latency_scale: float = 1.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.name = name
        self.profile = profile
        self.latency_scale = latency_scale
        self._rng = rng or random.Random()

    async def _delay(self, seconds: float) -> None:
        wait = seconds * self.latency_scale
        if wait > 0:
            await asyncio.sleep(wait)

    async def create_session(self, order_id: str) -> CheckoutSession:
        await self._delay(self.profile.session_latency)
        payment_url = None
        if self.profile.payment_url_template:
            payment_url = self.profile.payment_url_template.format(order_id=order_id)
        return CheckoutSession(
            transaction_id=new_transaction_id(self.profile.prefix, rng=self._rng),
            status="pending",
            payment_url=payment_url,
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=self.profile.session_ttl_minutes),
        )

    async def capture(self, transaction_id: str) -> PaymentResult:
        await self._delay(self.profile.capture_latency)
        approved = self._rng.random() < self.profile.success_rate
        # 金额不随扣款传递，保持为 0
        return PaymentResult(
            transaction_id=transaction_id,
            status="success" if approved else "failed",
            amount=Decimal("0"),
            message=f"{self.profile.label} capture completed",
        )

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult:
        await self._delay(self.profile.refund_latency)
        return PaymentResult(
            transaction_id=transaction_id,
            status="success",
            amount=amount if amount is not None else Decimal("0"),
            message=f"{self.profile.label} refund processed",
        )


def get_gateway_simulator(
    name: Optional[str] = None,
    *,
    settings: Optional[PaymentSettings] = None,
    rng: Optional[random.Random] = None,
) -> GatewaySimulator:
    cfg = settings or payment_settings
    resolved = normalize_gateway_name(name or cfg.gateway)
    return GatewaySimulator(
        resolved,
        cfg.gateway_settings(resolved),
        latency_scale=cfg.latency_scale,
        rng=rng,
    )
