"""
API依赖项 - 服务装配（组合根）
"""
from typing import Optional

from fastapi import Depends

from application.ports.order_status import OrderStatusSink
from application.services.checkout_service import CheckoutOrchestrator
from application.services.payment_service import PaymentService
from application.services.webhook_service import WebhookService
from core.settings import DEFAULT_GATEWAY, CheckoutSettings, checkout_settings
from domain.cart.store import CartStore
from domain.order.pricing import PricingPolicy
from infrastructure.adapters.order_status_log import LoggingOrderStatusSink
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.simulator import get_gateway_simulator


def get_payment_service(gateway: Optional[str] = None) -> PaymentService:
    """服务端接口：请求体未指定网关时按 mock 处理"""
    return PaymentService(backend=get_gateway_simulator(gateway or DEFAULT_GATEWAY))


async def get_order_status_sink() -> OrderStatusSink:
    return LoggingOrderStatusSink()


async def get_webhook_service(sink: OrderStatusSink = Depends(get_order_status_sink)) -> WebhookService:
    return WebhookService(sink=sink)


def build_checkout_orchestrator(
    cart: CartStore,
    provider: Optional[str] = None,
    *,
    settings: Optional[CheckoutSettings] = None,
    **gateway_kwargs,
) -> CheckoutOrchestrator:
    """客户端结账编排器：网关由 PAYMENT__GATEWAY 决定，金额规则由 CHECKOUT__* 决定"""
    cfg = settings or checkout_settings
    pricing = PricingPolicy(
        free_shipping_threshold=cfg.free_shipping_threshold,
        flat_shipping=cfg.flat_shipping,
        tax_rate=cfg.tax_rate,
    )
    return CheckoutOrchestrator(
        cart,
        get_payment_gateway(provider, **gateway_kwargs),
        pricing=pricing,
        capture_delay=cfg.capture_delay_seconds,
    )
