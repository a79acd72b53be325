"""
Checkout orchestrator: drives one customer's checkout from the collected
forms to a captured payment.

Session creation is always awaited before capture is issued. A failed
attempt leaves nothing behind; resubmitting performs a brand new
session + capture pair with a new order id.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

from application.dtos.payments import CheckoutSession, PaymentResult
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger
from domain.cart.store import CartStore
from domain.checkout.flow import CheckoutFlow, PaymentForm, ShippingForm
from domain.common.exceptions import BusinessException, CheckoutFailedException, EmptyCartException
from domain.order.entity import Order, generate_order_id
from domain.order.pricing import PricingPolicy


logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutOutcome:
    order_id: str
    order: Order
    session: CheckoutSession
    result: PaymentResult


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        gateway: PaymentGateway,
        *,
        pricing: Optional[PricingPolicy] = None,
        capture_delay: float = 0.0,
        flow: Optional[CheckoutFlow] = None,
    ) -> None:
        self.cart = cart
        self.gateway = gateway
        self.pricing = pricing or PricingPolicy()
        self.capture_delay = capture_delay
        self.flow = flow or CheckoutFlow()

    def submit_shipping(self, form: ShippingForm) -> None:
        self.flow.submit_shipping(form)

    def submit_payment(self, form: PaymentForm) -> None:
        self.flow.submit_payment(form)

    def back(self) -> None:
        self.flow.back()

    def preview_order(self, order_id: str = "preview") -> Order:
        """按当前购物车与配送信息计算订单金额（不提交）"""
        if self.cart.is_empty:
            raise EmptyCartException()
        shipping = self.flow.shipping or ShippingForm()
        return self.pricing.build_order(order_id, self.cart.to_line_items(), shipping.to_address())

    async def place_order(self) -> CheckoutOutcome:
        if self.cart.is_empty:
            raise EmptyCartException()
        self.flow.begin_submission()

        order = self.preview_order(generate_order_id())
        logger.info(
            "checkout_submitted",
            order_id=order.id,
            provider=self.gateway.provider,
            total=str(order.total),
            attempt=self.flow.attempts,
        )
        try:
            session = await self.gateway.create_checkout_session(order)
            if self.capture_delay > 0:
                await asyncio.sleep(self.capture_delay)
            result = await self.gateway.capture(session.transaction_id)
        except asyncio.CancelledError:
            # 取消后允许重新提交
            self.flow.mark_failed("Checkout cancelled")
            logger.warning("checkout_cancelled", order_id=order.id, provider=self.gateway.provider)
            raise
        except Exception as exc:
            message = exc.message if isinstance(exc, BusinessException) else str(exc)
            self.flow.mark_failed(message)
            logger.warning(
                "checkout_gateway_error",
                order_id=order.id,
                provider=self.gateway.provider,
                error_type=type(exc).__name__,
                error=message,
            )
            raise CheckoutFailedException(reason=message) from exc

        if not result.succeeded:
            reason = result.message or "Payment failed"
            self.flow.mark_failed(reason)
            logger.info(
                "checkout_payment_declined",
                order_id=order.id,
                transaction_id=session.transaction_id,
                provider=self.gateway.provider,
            )
            raise CheckoutFailedException(reason="Payment failed")

        self.cart.clear()
        self.flow.mark_succeeded(order.id)
        logger.info(
            "checkout_succeeded",
            order_id=order.id,
            transaction_id=session.transaction_id,
            provider=self.gateway.provider,
        )
        return CheckoutOutcome(order_id=order.id, order=order, session=session, result=result)
