import asyncio
import random
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from api.dependencies import build_checkout_orchestrator
from application.dtos.payments import CheckoutSession, PaymentResult
from application.services.checkout_service import CheckoutOrchestrator
from core.settings import PaymentSettings
from domain.cart.store import CartStore
from domain.checkout.flow import CheckoutStep
from domain.common.exceptions import CheckoutFailedException, CheckoutInProgressException, EmptyCartException
from infrastructure.external.payments.exceptions import SessionCreationError
from infrastructure.external.payments.mock_client import MockClient


class ScriptedGateway:
    """Gateway double returning capture statuses from a script."""

    provider = "scripted"

    def __init__(self, statuses, *, session_error=None):
        self.statuses = list(statuses)
        self.session_error = session_error
        self.calls = []
        self._n = 0

    async def create_checkout_session(self, order):
        self._n += 1
        self.calls.append(("session", order.id))
        if self.session_error is not None:
            raise self.session_error
        return CheckoutSession(
            transaction_id=f"scr_{self._n}",
            status="pending",
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=15),
        )

    async def capture(self, transaction_id):
        self.calls.append(("capture", transaction_id))
        return PaymentResult(transaction_id=transaction_id, status=self.statuses.pop(0), amount=Decimal("0"))

    async def refund(self, transaction_id, amount=None):
        return PaymentResult(transaction_id=transaction_id, status="success", amount=amount or Decimal("0"))


class HangingGateway(ScriptedGateway):
    """Session creation blocks until the caller cancels."""

    def __init__(self, statuses):
        super().__init__(statuses)
        self.hang = True
        self.entered = asyncio.Event()

    async def create_checkout_session(self, order):
        if self.hang:
            self.entered.set()
            await asyncio.Event().wait()
        return await super().create_checkout_session(order)


def filled_cart() -> CartStore:
    cart = CartStore()
    cart.add_item("p-1", "Blue Dream 3.5g", Decimal("30.00"), 2)
    cart.add_item("p-2", "Sleep Gummies", Decimal("40.00"))
    return cart


class ApprovingRandom(random.Random):
    """Every capture draw falls under the success rate."""

    def random(self):
        return 0.0


@pytest.mark.asyncio
async def test_end_to_end_with_mock_gateway(ready):
    cart = filled_cart()
    gateway = MockClient(settings=PaymentSettings(latency_scale=0), rng=ApprovingRandom(7))
    orchestrator = ready(CheckoutOrchestrator(cart, gateway))

    preview = orchestrator.preview_order()
    assert preview.subtotal == Decimal("100.00")
    assert preview.shipping_cost == Decimal("0")
    assert preview.tax == Decimal("8.75")
    assert preview.total == Decimal("108.75")

    outcome = await orchestrator.place_order()
    assert outcome.result.status == "success"
    assert re.fullmatch(r"ORD-\d+-[A-Z0-9]{9}", outcome.order_id)
    assert outcome.order.total == Decimal("108.75")
    assert outcome.session.transaction_id.startswith("mock_")
    assert cart.is_empty
    assert orchestrator.flow.step is CheckoutStep.SUCCEEDED
    assert orchestrator.flow.order_id == outcome.order_id


@pytest.mark.asyncio
async def test_session_precedes_capture(ready):
    gateway = ScriptedGateway(["success"])
    await ready(CheckoutOrchestrator(filled_cart(), gateway)).place_order()
    assert [c[0] for c in gateway.calls] == ["session", "capture"]
    assert gateway.calls[1][1] == "scr_1"


@pytest.mark.asyncio
async def test_declined_capture_is_retryable_and_retry_is_fresh(ready):
    cart = filled_cart()
    gateway = ScriptedGateway(["failed", "success"])
    orchestrator = ready(CheckoutOrchestrator(cart, gateway))

    with pytest.raises(CheckoutFailedException) as ei:
        await orchestrator.place_order()
    assert ei.value.retryable
    assert ei.value.details["retryable"] is True
    assert orchestrator.flow.step is CheckoutStep.FAILED
    assert not cart.is_empty
    assert orchestrator.flow.order_id is None

    outcome = await orchestrator.place_order()
    assert [c[0] for c in gateway.calls] == ["session", "capture", "session", "capture"]
    assert gateway.calls[2][1] != gateway.calls[0][1]
    assert gateway.calls[3][1] == "scr_2"
    assert outcome.order_id == gateway.calls[2][1]
    assert cart.is_empty


@pytest.mark.asyncio
async def test_two_failures_each_run_a_full_attempt(ready):
    gateway = ScriptedGateway(["failed", "failed"])
    orchestrator = ready(CheckoutOrchestrator(filled_cart(), gateway))
    for _ in range(2):
        with pytest.raises(CheckoutFailedException):
            await orchestrator.place_order()
    assert [c[0] for c in gateway.calls] == ["session", "capture", "session", "capture"]
    assert orchestrator.flow.attempts == 2


@pytest.mark.asyncio
async def test_session_error_skips_capture(ready):
    error = SessionCreationError("down", provider="scripted", status_code=502)
    gateway = ScriptedGateway([], session_error=error)
    orchestrator = ready(CheckoutOrchestrator(filled_cart(), gateway))
    with pytest.raises(CheckoutFailedException) as ei:
        await orchestrator.place_order()
    assert ei.value.__cause__ is error
    assert [c[0] for c in gateway.calls] == ["session"]
    assert orchestrator.flow.step is CheckoutStep.FAILED


@pytest.mark.asyncio
async def test_empty_cart_is_refused(ready):
    orchestrator = ready(CheckoutOrchestrator(filled_cart(), ScriptedGateway([])))
    orchestrator.cart.clear()
    with pytest.raises(EmptyCartException):
        await orchestrator.place_order()
    assert orchestrator.flow.step is CheckoutStep.REVIEWING


@pytest.mark.asyncio
async def test_submitting_twice_is_rejected(ready):
    orchestrator = ready(CheckoutOrchestrator(filled_cart(), ScriptedGateway(["success"])))
    orchestrator.flow.begin_submission()
    with pytest.raises(CheckoutInProgressException):
        await orchestrator.place_order()


@pytest.mark.asyncio
async def test_built_orchestrator_uses_configured_pricing(asgi_transport, ready):
    cart = CartStore()
    cart.add_item("p-3", "Pre-roll", Decimal("20.00"))
    orchestrator = build_checkout_orchestrator(cart, "paymentcloud", transport=asgi_transport)
    assert orchestrator.gateway.provider == "paymentcloud"
    assert orchestrator.capture_delay == 0
    ready(orchestrator)
    preview = orchestrator.preview_order()
    assert preview.shipping_cost == Decimal("9.99")
    assert preview.tax == Decimal("1.75")
    assert preview.total == Decimal("31.74")
    try:
        outcome = await orchestrator.place_order()
    except CheckoutFailedException:
        assert orchestrator.flow.step is CheckoutStep.FAILED
    else:
        assert outcome.session.transaction_id.startswith("pc_")
        assert cart.is_empty


@pytest.mark.asyncio
async def test_cancelled_submission_can_be_resubmitted(ready):
    cart = filled_cart()
    gateway = HangingGateway(["success"])
    orchestrator = ready(CheckoutOrchestrator(cart, gateway))

    task = asyncio.create_task(orchestrator.place_order())
    await gateway.entered.wait()
    assert orchestrator.flow.step is CheckoutStep.SUBMITTING
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert orchestrator.flow.step is CheckoutStep.FAILED
    assert not cart.is_empty

    gateway.hang = False
    outcome = await orchestrator.place_order()
    assert outcome.result.status == "success"
    assert orchestrator.flow.step is CheckoutStep.SUCCEEDED
