"""
EasyPayDirect adapter (sessions expire after 10 minutes).
"""
from __future__ import annotations

from infrastructure.external.payments.base import ProxiedPaymentClient


class EasyPayClient(ProxiedPaymentClient):
    provider = "easypay"
