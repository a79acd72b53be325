"""Pytest bootstrap configuration.

Ensure environment variables are set before test collection and module
imports that depend on application settings.
"""
import os

# Simulated gateway latency and the pre-capture pause are disabled in tests
os.environ.setdefault("PAYMENT__LATENCY_SCALE", "0")
os.environ.setdefault("CHECKOUT__CAPTURE_DELAY_SECONDS", "0")
os.environ.setdefault("PAYMENT__API_BASE_URL", "http://testserver/api/v1")

import pytest


class RecordingSink:
    """OrderStatusSink test double that records each call."""

    def __init__(self):
        self.calls = []

    async def mark_paid(self, event, *, gateway):
        self.calls.append(("mark_paid", event, gateway))

    async def mark_failed(self, event, *, gateway):
        self.calls.append(("mark_failed", event, gateway))

    async def mark_refunded(self, event, *, gateway):
        self.calls.append(("mark_refunded", event, gateway))


@pytest.fixture
def app():
    from main import app as _app
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def sink(app):
    from api.dependencies import get_order_status_sink
    recording = RecordingSink()
    app.dependency_overrides[get_order_status_sink] = lambda: recording
    return recording


@pytest.fixture
def asgi_transport(app):
    import httpx
    return httpx.ASGITransport(app=app)


@pytest.fixture
def order():
    from decimal import Decimal
    from domain.order.entity import LineItem, ShippingAddress, generate_order_id
    from domain.order.pricing import PricingPolicy

    items = [
        LineItem(id="p-1", name="Blue Dream 3.5g", price=Decimal("30.00"), quantity=2),
        LineItem(id="p-2", name="Sleep Gummies", price=Decimal("40.00"), quantity=1),
    ]
    shipping = ShippingAddress(name="Ada Lovelace", address="1 Main St", city="Beverly Hills", state="CA", zip="90210")
    return PricingPolicy().build_order(generate_order_id(), items, shipping)
