"""
Payment/checkout settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings: `PAYMENT__*` drives gateway selection,
simulation and webhook secrets, `CHECKOUT__*` drives pricing.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, model_validator


KNOWN_GATEWAYS = ("mock", "paymentcloud", "easypay")
DEFAULT_GATEWAY = "mock"


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 10.0
    write: float = 10.0
    total: float = 15.0


class WebhookSettings(BaseModel):
    # 为 true 时非 mock 网关必须显式配置 webhook 密钥，否则启动失败
    require_secrets: bool = False


class GatewaySettings(BaseModel):
    """单个网关的 webhook 密钥与模拟参数（默认值即 mock 网关）"""
    prefix: str = "mock"
    session_ttl_minutes: int = 15
    success_rate: float = 0.9
    session_latency: float = 0.8
    capture_latency: float = 1.0
    refund_latency: float = 0.5
    payment_url_template: Optional[str] = None
    label: str = "Mock"

    webhook_secret: Optional[str] = None
    dev_webhook_secret: str = "mock_webhook_secret"

    def resolved_webhook_secret(self) -> str:
        return self.webhook_secret or self.dev_webhook_secret


class PaymentCloudSettings(GatewaySettings):
    prefix: str = "pc"
    label: str = "PaymentCloud"
    session_ttl_minutes: int = 15
    success_rate: float = 0.95
    session_latency: float = 1.5
    capture_latency: float = 2.0
    refund_latency: float = 1.0
    payment_url_template: Optional[str] = "https://secure.paymentcloud.com/checkout/{order_id}"
    dev_webhook_secret: str = "pc_webhook_secret_dev"


class EasyPaySettings(GatewaySettings):
    prefix: str = "ep"
    label: str = "EasyPayDirect"
    session_ttl_minutes: int = 10
    success_rate: float = 0.92
    session_latency: float = 1.2
    capture_latency: float = 1.5
    refund_latency: float = 1.0
    payment_url_template: Optional[str] = "https://checkout.easypay.com/pay/{order_id}"
    dev_webhook_secret: str = "ep_webhook_secret_dev"


class PaymentSettings(BaseSettings):
    gateway: str = Field(default=DEFAULT_GATEWAY)
    # 代理型适配器（paymentcloud/easypay）访问服务端接口的地址
    api_base_url: str = "http://localhost:8000/api/v1"
    # 所有模拟延迟的倍率，0 表示不等待
    latency_scale: float = 1.0
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    mock: GatewaySettings = Field(default_factory=GatewaySettings)
    paymentcloud: PaymentCloudSettings = Field(default_factory=PaymentCloudSettings)
    easypay: EasyPaySettings = Field(default_factory=EasyPaySettings)

    model_config = SettingsConfigDict(
        env_prefix="PAYMENT__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def _validate_webhook_secrets(self):
        if not self.webhook.require_secrets:
            return self
        missing = [name for name in ("paymentcloud", "easypay") if not getattr(self, name).webhook_secret]
        if missing:
            raise ValueError(
                "Webhook 密钥未配置: "
                + ", ".join(f"PAYMENT__{name.upper()}__WEBHOOK_SECRET" for name in missing)
            )
        return self

    def gateway_settings(self, name: str) -> Optional[GatewaySettings]:
        if name not in KNOWN_GATEWAYS:
            return None
        return getattr(self, name)


class CheckoutSettings(BaseSettings):
    free_shipping_threshold: Decimal = Decimal("75.00")
    flat_shipping: Decimal = Decimal("9.99")
    tax_rate: Decimal = Decimal("0.0875")
    # 创建会话后、扣款前的等待（模拟用户在网关页面完成支付）
    capture_delay_seconds: float = 2.0

    model_config = SettingsConfigDict(
        env_prefix="CHECKOUT__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


payment_settings = PaymentSettings()
checkout_settings = CheckoutSettings()
