import pytest

from domain.checkout.flow import PaymentForm, ShippingForm


@pytest.fixture
def shipping_form():
    def _make(**overrides) -> ShippingForm:
        data = dict(
            first_name="Ada", last_name="Lovelace", email="ada@example.com",
            address="1 Main St", city="Beverly Hills", state="CA", zip="90210",
        )
        data.update(overrides)
        return ShippingForm(**data)
    return _make


@pytest.fixture
def payment_form():
    def _make(**overrides) -> PaymentForm:
        data = dict(card_number="4111 1111 1111 1111", expiry_date="12/30", cvv="123", card_name="Ada Lovelace")
        data.update(overrides)
        return PaymentForm(**data)
    return _make


@pytest.fixture
def ready(shipping_form, payment_form):
    """Advance an orchestrator to the review step."""
    def _ready(orchestrator):
        orchestrator.submit_shipping(shipping_form())
        orchestrator.submit_payment(payment_form())
        return orchestrator
    return _ready
