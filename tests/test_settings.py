import pytest
from pydantic import ValidationError

from core.settings import CheckoutSettings, PaymentSettings


def test_gateway_profiles_have_defaults():
    cfg = PaymentSettings(latency_scale=0)
    assert cfg.gateway_settings("mock").prefix == "mock"
    assert cfg.gateway_settings("paymentcloud").success_rate == 0.95
    assert cfg.gateway_settings("easypay").session_ttl_minutes == 10
    assert cfg.gateway_settings("stripe") is None


def test_nested_env_override_keeps_profile_defaults(monkeypatch):
    monkeypatch.setenv("PAYMENT__EASYPAY__WEBHOOK_SECRET", "ep_live_secret")
    monkeypatch.setenv("PAYMENT__GATEWAY", "easypay")
    cfg = PaymentSettings()
    assert cfg.gateway == "easypay"
    assert cfg.easypay.webhook_secret == "ep_live_secret"
    assert cfg.easypay.resolved_webhook_secret() == "ep_live_secret"
    assert cfg.easypay.prefix == "ep"
    assert cfg.paymentcloud.resolved_webhook_secret() == "pc_webhook_secret_dev"


def test_require_secrets_rejects_missing(monkeypatch):
    monkeypatch.delenv("PAYMENT__PAYMENTCLOUD__WEBHOOK_SECRET", raising=False)
    monkeypatch.delenv("PAYMENT__EASYPAY__WEBHOOK_SECRET", raising=False)
    with pytest.raises(ValidationError) as ei:
        PaymentSettings(webhook={"require_secrets": True}, paymentcloud={"webhook_secret": "pc"})
    assert "PAYMENT__EASYPAY__WEBHOOK_SECRET" in str(ei.value)


def test_require_secrets_accepts_configured():
    cfg = PaymentSettings(
        webhook={"require_secrets": True},
        paymentcloud={"webhook_secret": "pc"},
        easypay={"webhook_secret": "ep"},
    )
    assert cfg.paymentcloud.resolved_webhook_secret() == "pc"


def test_checkout_settings_from_env(monkeypatch):
    monkeypatch.setenv("CHECKOUT__TAX_RATE", "0.05")
    cfg = CheckoutSettings()
    assert str(cfg.tax_rate) == "0.05"
    assert cfg.capture_delay_seconds == 0


def test_gateway_profile_holds_only_webhook_and_simulation_fields():
    cfg = PaymentSettings(latency_scale=0)
    assert set(cfg.paymentcloud.model_dump()) == {
        "prefix",
        "session_ttl_minutes",
        "success_rate",
        "session_latency",
        "capture_latency",
        "refund_latency",
        "payment_url_template",
        "label",
        "webhook_secret",
        "dev_webhook_secret",
    }
