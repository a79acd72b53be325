"""
Factory for payment gateway clients.
"""
from __future__ import annotations

from typing import Optional

from core.settings import payment_settings
from application.ports.payment_gateway import PaymentGateway
from infrastructure.external.payments.simulator import normalize_gateway_name


def get_payment_gateway(provider: Optional[str] = None, **kwargs) -> PaymentGateway:
    """按配置选择网关适配器；未识别的名称回退到 mock，从不抛异常。

    kwargs 透传给适配器构造函数（settings / transport / base_url / rng）。
    """
    name = normalize_gateway_name(provider or payment_settings.gateway)
    if name == "paymentcloud":
        from .paymentcloud_client import PaymentCloudClient
        kwargs.pop("rng", None)
        return PaymentCloudClient(**kwargs)
    if name == "easypay":
        from .easypay_client import EasyPayClient
        kwargs.pop("rng", None)
        return EasyPayClient(**kwargs)
    from .mock_client import MockClient
    kwargs.pop("transport", None)
    kwargs.pop("base_url", None)
    return MockClient(**kwargs)
