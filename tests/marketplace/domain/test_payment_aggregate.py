import pytest

from marketplace.errors import InvalidTransition
from marketplace.payment.events import PaymentCancelled, PaymentFailed, PaymentInitiated, PaymentSucceeded
from marketplace.payment.payment import Payment, PaymentStatus
from marketplace.pricing.engine import allocate, quote
from marketplace.pricing.settings import PricingMode, PricingSettings


def _payment(reference="PAY-REF-1"):
    cart = [
        {"vendor_id": "ven-1", "product_id": "jollof", "quantity": 2, "unit_price": 1500},
        {"vendor_id": "ven-2", "product_id": "suya", "quantity": 1, "unit_price": 2000},
    ]
    price_quote = quote(cart, "Amarata", settings=PricingSettings(mode=PricingMode.LANDMARK))
    return Payment.initiate(
        user_id="cust-1",
        payment_reference=reference,
        price_quote=price_quote,
        intents=allocate(price_quote),
        delivery_details={"address": "12 Azikoro Road"},
    )


class TestInitiate:
    def test_copies_quote_amounts(self):
        payment = _payment()
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.subtotal == 5000.0
        assert payment.delivery_fee == 1500.0
        assert payment.tax_amount == 375.0
        assert payment.total_amount == 6875.0
        assert payment.delivery_zone == "Amarata"
        assert isinstance(payment._events[-1], PaymentInitiated)
        assert payment._events[-1].order_count == 2

    def test_carries_order_intents(self):
        intents = _payment().order_intents()
        assert [i["vendor_id"] for i in intents] == ["ven-1", "ven-2"]
        assert sum(i["total_price"] for i in intents) == pytest.approx(6875.0)

    def test_delivery_address(self):
        assert _payment().delivery_address() == "12 Azikoro Road"


class TestTransitions:
    def test_success_once(self):
        payment = _payment()
        assert payment.mark_success() is True
        assert payment.verified_at is not None
        assert isinstance(payment._events[-1], PaymentSucceeded)
        payment._events.clear()
        assert payment.mark_success() is False
        assert payment._events == []

    def test_failed_payment_can_still_succeed(self):
        payment = _payment()
        assert payment.mark_failed("Card declined") is True
        assert isinstance(payment._events[-1], PaymentFailed)
        assert payment.mark_success() is True
        assert payment.status == PaymentStatus.SUCCESS.value
        assert payment.failure_reason is None

    def test_repeated_failure_is_ignored(self):
        payment = _payment()
        payment.mark_failed()
        payment._events.clear()
        assert payment.mark_failed("again") is False
        assert payment._events == []

    def test_failure_after_success_is_ignored(self):
        payment = _payment()
        payment.mark_success()
        assert payment.mark_failed() is False
        assert payment.status == PaymentStatus.SUCCESS.value

    def test_cancel_pending(self):
        payment = _payment()
        payment.cancel()
        assert payment.status == PaymentStatus.CANCELLED.value
        assert isinstance(payment._events[-1], PaymentCancelled)

    def test_cannot_cancel_successful_payment(self):
        payment = _payment()
        payment.mark_success()
        with pytest.raises(InvalidTransition):
            payment.cancel()
