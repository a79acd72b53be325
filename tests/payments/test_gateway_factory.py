import re

import pytest

from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.payments.easypay_client import EasyPayClient
from infrastructure.external.payments.mock_client import MockClient
from infrastructure.external.payments.paymentcloud_client import PaymentCloudClient


@pytest.mark.parametrize(
    "name, cls",
    [
        ("mock", MockClient),
        ("paymentcloud", PaymentCloudClient),
        ("easypay", EasyPayClient),
        ("EasyPay", EasyPayClient),
    ],
)
def test_factory_maps_names(name, cls):
    assert isinstance(get_payment_gateway(name), cls)


@pytest.mark.parametrize("name", ["stripe", "", "  ", "paypal", "MOCKX"])
def test_factory_falls_back_to_mock(name):
    gw = get_payment_gateway(name)
    assert isinstance(gw, MockClient)
    assert gw.provider == "mock"


def test_factory_reads_configured_gateway(monkeypatch):
    from core.settings import payment_settings

    monkeypatch.setattr(payment_settings, "gateway", "paymentcloud")
    assert isinstance(get_payment_gateway(), PaymentCloudClient)
    monkeypatch.setattr(payment_settings, "gateway", "unheard-of")
    assert isinstance(get_payment_gateway(), MockClient)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, prefix",
    [("mock", "mock"), ("paymentcloud", "pc"), ("easypay", "ep")],
)
async def test_every_gateway_creates_pending_session(name, prefix, order, asgi_transport):
    gw = get_payment_gateway(name, transport=asgi_transport)
    try:
        session = await gw.create_checkout_session(order)
    finally:
        await gw.aclose()
    assert session.status == "pending"
    assert re.fullmatch(rf"{prefix}_\d+_[0-9a-z]{{9}}", session.transaction_id)


@pytest.mark.asyncio
async def test_proxied_session_carries_redirect_url(order, asgi_transport):
    gw = get_payment_gateway("paymentcloud", transport=asgi_transport)
    session = await gw.create_checkout_session(order)
    await gw.aclose()
    assert session.payment_url == f"https://secure.paymentcloud.com/checkout/{order.id}"


@pytest.mark.asyncio
async def test_mock_session_has_no_redirect_url(order):
    session = await get_payment_gateway("mock").create_checkout_session(order)
    assert session.payment_url is None
