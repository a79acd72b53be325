"""
Payments API routes.

Server side of the proxied gateways: checkout session creation, capture and
refund. Keep this thin: validation and logging live in PaymentService.
Success bodies are the DTOs themselves; errors use the response envelope.
"""
from __future__ import annotations

from fastapi import APIRouter

from api.dependencies import get_payment_service
from application.dtos.payments import (
    CaptureRequest,
    CheckoutSession,
    CreateSessionRequest,
    PaymentResult,
    RefundPaymentRequest,
)


router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("/checkout", response_model=CheckoutSession, summary="Create checkout session")
async def create_checkout_session(payload: CreateSessionRequest):
    service = get_payment_service(payload.gateway)
    return await service.create_checkout_session(payload)


@router.post("/capture", response_model=PaymentResult, summary="Capture payment")
async def capture_payment(payload: CaptureRequest):
    service = get_payment_service(payload.gateway)
    return await service.capture(payload)


@router.post("/refund", response_model=PaymentResult, summary="Refund payment")
async def refund_payment(payload: RefundPaymentRequest):
    service = get_payment_service(payload.gateway)
    return await service.refund(payload)
