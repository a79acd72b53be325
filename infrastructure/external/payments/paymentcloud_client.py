"""
PaymentCloud adapter.

Gateway secrets stay on the server; this client only talks to the
service's own /payments endpoints.
"""
from __future__ import annotations

from infrastructure.external.payments.base import ProxiedPaymentClient


class PaymentCloudClient(ProxiedPaymentClient):
    provider = "paymentcloud"
