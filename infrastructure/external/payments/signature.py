"""
Webhook signature helpers: hex(HMAC-SHA256(secret, raw_body)).
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from core.settings import PaymentSettings, payment_settings
from infrastructure.external.payments.exceptions import UnknownGatewayException


# 仅开发环境：mock 网关跳过验签
UNVERIFIED_GATEWAYS = frozenset({"mock"})


def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_signature(body: bytes, signature: Optional[str], secret: str) -> bool:
    """常量时间比较；缺失或非十六进制的签名直接判定失败"""
    if not signature:
        return False
    try:
        provided = bytes.fromhex(signature.strip())
    except ValueError:
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return hmac.compare_digest(provided, expected)


def resolve_webhook_secret(gateway: str, settings: Optional[PaymentSettings] = None) -> str:
    """按网关名查找共享密钥；未配置时使用开发默认值"""
    cfg = settings or payment_settings
    profile = cfg.gateway_settings(gateway)
    if profile is None:
        raise UnknownGatewayException(gateway)
    return profile.resolved_webhook_secret()
