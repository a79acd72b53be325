"""
Base payment clients implementing shared concerns: http, logging, error mapping.

`BasePaymentClient` holds the lazily created httpx client; `ProxiedPaymentClient`
routes the three gateway operations through the server endpoints that hold
the gateway credentials, so callers never see secret material.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from application.dtos.payments import CheckoutSession, OrderData, PaymentResult
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from core.settings import PaymentSettings, payment_settings
from domain.order.entity import Order
from infrastructure.external.payments.exceptions import (
    CaptureError,
    PaymentTransportError,
    RefundError,
    SessionCreationError,
)


logger = get_logger(__name__)


class BasePaymentClient(PaymentGateway):
    provider: str = "base"

    def __init__(
        self,
        *,
        settings: Optional[PaymentSettings] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or payment_settings
        self._base_url = base_url or self.settings.api_base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        cfg = self.settings.timeouts
        return httpx.Timeout(
            connect=cfg.connect,
            read=cfg.read,
            write=cfg.write,
            timeout=cfg.total,
        )

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self.timeouts,
                transport=self._transport,
            )
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    # Default implementations raise to force override where needed
    async def create_checkout_session(self, order: Order) -> CheckoutSession:  # type: ignore[override]
        raise NotImplementedError

    async def capture(self, transaction_id: str) -> PaymentResult:  # type: ignore[override]
        raise NotImplementedError

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult:  # type: ignore[override]
        raise NotImplementedError

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )


class ProxiedPaymentClient(BasePaymentClient):
    """经服务端接口代理的网关适配器（paymentcloud / easypay）"""

    CHECKOUT_PATH = "/payments/checkout"
    CAPTURE_PATH = "/payments/capture"
    REFUND_PATH = "/payments/refund"

    async def _post(self, path: str, payload: dict[str, Any], error_cls: type[PaymentTransportError]) -> dict[str, Any]:
        try:
            async with self.client() as http:
                resp = await http.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.error("payment_gateway_transport_failed", provider=self.provider, path=path, error=str(exc))
            raise error_cls(str(exc) or type(exc).__name__, provider=self.provider) from exc

        if not resp.is_success:
            logger.error("payment_gateway_bad_status", provider=self.provider, path=path, status_code=resp.status_code)
            raise error_cls(
                f"{self.provider} request to {path} failed",
                provider=self.provider,
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as exc:
            raise error_cls("Malformed gateway response", provider=self.provider, status_code=resp.status_code) from exc
        if not isinstance(body, dict):
            raise error_cls("Gateway response is not an object", provider=self.provider, status_code=resp.status_code)
        return body

    async def create_checkout_session(self, order: Order) -> CheckoutSession:  # type: ignore[override]
        payload = {
            "order": OrderData.from_order(order).model_dump(mode="json", by_alias=True),
            "gateway": self.provider,
        }
        data = await self._post(self.CHECKOUT_PATH, payload, SessionCreationError)
        try:
            session = CheckoutSession.model_validate(data)
        except ValidationError as exc:
            raise SessionCreationError("Malformed checkout session", provider=self.provider) from exc
        self._log("payment_session_received", order_id=order.id, transaction_id=session.transaction_id)
        return session

    async def capture(self, transaction_id: str) -> PaymentResult:  # type: ignore[override]
        data = await self._post(
            self.CAPTURE_PATH,
            {"transactionId": transaction_id, "gateway": self.provider},
            CaptureError,
        )
        try:
            result = PaymentResult.model_validate(data)
        except ValidationError as exc:
            raise CaptureError("Malformed capture result", provider=self.provider) from exc
        self._log("payment_capture_received", transaction_id=transaction_id, status=result.status)
        return result

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult:  # type: ignore[override]
        payload: dict[str, Any] = {"transactionId": transaction_id, "gateway": self.provider}
        if amount is not None:
            payload["amount"] = float(amount)
        data = await self._post(self.REFUND_PATH, payload, RefundError)
        try:
            result = PaymentResult.model_validate(data)
        except ValidationError as exc:
            raise RefundError("Malformed refund result", provider=self.provider) from exc
        if not result.succeeded:
            raise RefundError("Refund was not successful", provider=self.provider)
        self._log("payment_refund_received", transaction_id=transaction_id, amount=str(result.amount))
        return result
