"""
Application service for inbound gateway webhooks.

Order of work matters: the raw body is verified before it is parsed, and the
acknowledgement does not depend on the business outcome of the dispatch.
"""
from __future__ import annotations

import json
from typing import Mapping, Optional

from pydantic import ValidationError

from application.dtos.payments import WebhookAck, WebhookEvent
from application.ports.order_status import OrderStatusSink
from core.logging_config import get_logger
from core.settings import PaymentSettings, payment_settings
from infrastructure.external.payments.exceptions import (
    InvalidSignatureException,
    WebhookProcessingException,
)
from infrastructure.external.payments.signature import (
    UNVERIFIED_GATEWAYS,
    resolve_webhook_secret,
    verify_signature,
)
from shared.codes.payment_codes import WEBHOOK_EVENT_ACTIONS
from shared.headers import GATEWAY_HEADER, WEBHOOK_SIGNATURE_HEADER


logger = get_logger(__name__)


class WebhookService:
    def __init__(self, sink: OrderStatusSink, settings: Optional[PaymentSettings] = None) -> None:
        self.sink = sink
        self.settings = settings or payment_settings

    def verify(self, gateway: str, body: bytes, signature: Optional[str]) -> None:
        secret = resolve_webhook_secret(gateway, self.settings)
        if gateway in UNVERIFIED_GATEWAYS:
            logger.debug("webhook_signature_skipped", gateway=gateway)
            return
        if not verify_signature(body, signature, secret):
            logger.warning("webhook_signature_invalid", gateway=gateway, has_signature=bool(signature))
            raise InvalidSignatureException(gateway)

    @staticmethod
    def parse(body: bytes) -> WebhookEvent:
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            logger.error("webhook_parse_failed", error=str(exc))
            raise WebhookProcessingException() from exc
        if not isinstance(payload, dict):
            logger.error("webhook_parse_failed", error="body is not a JSON object")
            raise WebhookProcessingException()
        try:
            return WebhookEvent.model_validate(payload)
        except ValidationError as exc:
            logger.error("webhook_parse_failed", error=str(exc))
            raise WebhookProcessingException() from exc

    async def dispatch(self, event: WebhookEvent, gateway: str) -> bool:
        action = WEBHOOK_EVENT_ACTIONS.get(event.event)
        if action is None:
            logger.info("webhook_event_unhandled", event_type=event.event, gateway=gateway)
            return False
        await getattr(self.sink, action)(event, gateway=gateway)
        return True

    async def handle(self, headers: Mapping[str, str], body: bytes) -> WebhookAck:
        gateway = (headers.get(GATEWAY_HEADER) or "mock").strip().lower()
        signature = headers.get(WEBHOOK_SIGNATURE_HEADER)
        self.verify(gateway, body, signature)
        event = self.parse(body)
        handled = await self.dispatch(event, gateway)
        logger.info(
            "webhook_processed",
            gateway=gateway,
            event_type=event.event,
            transaction_id=event.transaction_id,
            handled=handled,
        )
        return WebhookAck(success=True, event=event.event or None, handled=handled)
