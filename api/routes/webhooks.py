"""
Inbound gateway webhooks.

The raw body is handed to the service untouched: the signature covers the
exact bytes the gateway sent.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_webhook_service
from application.dtos.payments import WebhookAck
from application.services.webhook_service import WebhookService


router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/payments", response_model=WebhookAck, summary="Payment gateway webhook")
async def payments_webhook(request: Request, service: WebhookService = Depends(get_webhook_service)):
    raw_body = await request.body()
    return await service.handle(request.headers, raw_body)
