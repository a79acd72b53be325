import json

import pytest
import structlog

from api.dependencies import get_order_status_sink
from infrastructure.external.payments.signature import compute_signature, verify_signature

WEBHOOK_URL = "/api/v1/webhooks/payments"
PC_SECRET = "pc_webhook_secret_dev"


def _body(**fields) -> bytes:
    payload = {"event": "payment.completed", "transactionId": "pc_1_abc", "orderId": "ORD-1", "amount": 108.75}
    payload.update(fields)
    return json.dumps(payload, separators=(",", ":")).encode()


def _post(client, body: bytes, *, gateway: str | None = "paymentcloud", signature: str | None = None):
    headers = {"content-type": "application/json"}
    if gateway is not None:
        headers["x-gateway"] = gateway
    if signature is not None:
        headers["x-webhook-signature"] = signature
    return client.post(WEBHOOK_URL, content=body, headers=headers)


def test_compute_signature_is_hex_hmac_sha256():
    # RFC 4231 test case 2
    assert compute_signature("Jefe", b"what do ya want for nothing?") == (
        "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"
    )


def test_verify_signature_rejects_garbage():
    body = b"{}"
    assert verify_signature(body, compute_signature("s", body), "s")
    assert not verify_signature(body, None, "s")
    assert not verify_signature(body, "", "s")
    assert not verify_signature(body, "not-hex", "s")
    assert not verify_signature(body, compute_signature("s", body)[:-2], "s")


def test_valid_signature_is_accepted(client, sink):
    body = _body()
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert [c[0] for c in sink.calls] == ["mark_paid"]
    _, event, gateway = sink.calls[0]
    assert gateway == "paymentcloud"
    assert event.order_id == "ORD-1"


def test_single_byte_body_mutation_is_rejected(client, sink):
    body = _body()
    signature = compute_signature(PC_SECRET, body)
    for i in range(0, len(body), 7):
        mutated = bytearray(body)
        mutated[i] ^= 0x01
        resp = _post(client, bytes(mutated), signature=signature)
        assert resp.status_code == 401, i
    assert sink.calls == []


def test_single_char_signature_mutation_is_rejected(client, sink):
    body = _body()
    signature = compute_signature(PC_SECRET, body)
    for i in range(0, len(signature), 5):
        replacement = "0" if signature[i] != "0" else "1"
        mutated = signature[:i] + replacement + signature[i + 1:]
        resp = _post(client, body, signature=mutated)
        assert resp.status_code == 401
        assert resp.json()["error"]["type"] == "InvalidSignatureError"
    assert sink.calls == []


@pytest.mark.parametrize("gateway", ["paymentcloud", "easypay"])
def test_missing_signature_is_rejected_for_real_gateways(client, sink, gateway):
    assert _post(client, _body(), gateway=gateway).status_code == 401
    assert _post(client, _body(), gateway=gateway, signature="deadbeef").status_code == 401


def test_easypay_uses_its_own_secret(client, sink):
    body = _body(transactionId="ep_1_abc")
    assert _post(client, body, gateway="easypay", signature=compute_signature(PC_SECRET, body)).status_code == 401
    resp = _post(client, body, gateway="easypay", signature=compute_signature("ep_webhook_secret_dev", body))
    assert resp.status_code == 200


def test_mock_gateway_skips_verification(client, sink):
    resp = _post(client, _body(), gateway="mock", signature="bogus")
    assert resp.status_code == 200
    # x-gateway defaults to mock
    assert _post(client, _body(), gateway=None).status_code == 200
    assert len(sink.calls) == 2


def test_unknown_gateway_is_rejected(client, sink):
    resp = _post(client, _body(), gateway="stripe", signature="00")
    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "UnknownGatewayError"


def test_unparseable_body_is_processing_error(client, sink):
    body = b"{not json"
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 500
    assert resp.json()["error"]["type"] == "WebhookProcessingError"


@pytest.mark.parametrize(
    "event, action",
    [
        ("payment.completed", "mark_paid"),
        ("payment.captured", "mark_paid"),
        ("payment.failed", "mark_failed"),
        ("payment.refunded", "mark_refunded"),
    ],
)
def test_event_dispatch(client, sink, event, action):
    body = _body(event=event, reason="card_declined", refundAmount=10)
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 200
    assert [c[0] for c in sink.calls] == [action]


def test_unrecognized_event_is_acknowledged(client, sink):
    body = _body(event="payment.disputed")
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "event": "payment.disputed", "handled": False}
    assert sink.calls == []


def test_refund_event_fields_are_parsed(client, sink):
    body = _body(event="payment.refunded", refundAmount=25.5)
    _post(client, body, signature=compute_signature(PC_SECRET, body))
    _, event, _ = sink.calls[0]
    assert float(event.refund_amount) == 25.5


def test_numeric_ids_are_accepted_as_strings(client, sink):
    body = _body(orderId=12345, transactionId=987)
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 200
    _, event, _ = sink.calls[0]
    assert event.order_id == "12345"
    assert event.transaction_id == "987"


@pytest.mark.parametrize("payload", [{"event": None}, {}, {"orderId": "ORD-1"}])
def test_event_missing_or_null_is_acknowledged(client, sink, payload):
    resp = _post(client, json.dumps(payload).encode(), gateway="mock")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "event": None, "handled": False}
    assert sink.calls == []


@pytest.mark.parametrize("body", [b"[1]", b'"payment.completed"', b"null", b"\xff\xfe"])
def test_non_object_body_is_processing_error(client, sink, body):
    resp = _post(client, body, signature=compute_signature(PC_SECRET, body))
    assert resp.status_code == 500
    assert resp.json()["error"]["type"] == "WebhookProcessingError"
    assert sink.calls == []


def test_gateway_header_is_bound_to_log_context(app, client):
    seen = {}

    class ContextSink:
        async def mark_paid(self, event, *, gateway):
            seen.update(structlog.contextvars.get_contextvars())

    app.dependency_overrides[get_order_status_sink] = lambda: ContextSink()
    resp = _post(client, _body(), gateway="Mock")
    assert resp.status_code == 200
    assert seen["gateway"] == "mock"
    assert seen["request_id"] == resp.headers["X-Request-ID"]
