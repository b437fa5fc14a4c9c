import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from marketplace.errors import InvalidTransition
from marketplace.order.order import OrderStatus
from marketplace.order.placement import orders_for_reference
from marketplace.payment.cancellation import CancelPayment
from marketplace.payment.lookup import get_payment
from marketplace.payment.payment import PaymentStatus
from marketplace.payment.verification import VerifyPayment
from marketplace.payout.ledger import vendor_payout_amount
from marketplace.payout.vendor_payout import VendorPayout, VendorPayoutStatus


def _verify(reference, **kwargs):
    return current_domain.process(VerifyPayment(payment_reference=reference, **kwargs), asynchronous=False)


def _payouts():
    return current_domain.repository_for(VendorPayout)._dao.query.all().items


class TestCheckout:
    def test_opens_pending_payment_with_quote(self, checkout, cart_line):
        result = checkout(lines=[cart_line(quantity=2)])
        assert result["subtotal"] == 5000.0
        assert result["delivery_fee"] == 1000.0
        assert result["vat_amount"] == 375.0
        assert result["total"] == 6375.0
        assert result["authorization_url"].startswith("https://checkout.fake-gateway.test/")

        payment = get_payment(result["payment_reference"])
        assert payment.status == PaymentStatus.PENDING.value
        assert payment.total_amount == 6375.0

    def test_no_orders_until_verified(self, checkout):
        result = checkout()
        assert orders_for_reference(result["payment_reference"]) == []

    def test_reference_must_be_unique(self, checkout):
        checkout(reference="PAY-DUP")
        with pytest.raises(ValidationError) as exc:
            checkout(reference="PAY-DUP")
        assert "payment_reference" in exc.value.messages

    def test_gateway_receives_charge(self, checkout, gateway):
        result = checkout()
        (call,) = gateway.calls
        assert call["reference"] == result["payment_reference"]
        assert call["amount"] == result["total"]


class TestVerification:
    def test_success_materializes_paid_orders_and_payouts(self, checkout, cart_line):
        result = checkout(lines=[cart_line(vendor_id="ven-A"), cart_line(vendor_id="ven-B", unit_price=1500.0)])
        outcome = _verify(result["payment_reference"], verified=True)
        assert outcome == {"status": "success", "processed": True, "orders": 2, "payouts": 2}

        orders = orders_for_reference(result["payment_reference"])
        assert {o.status for o in orders} == {OrderStatus.PAID.value}
        assert sum(o.total_price for o in orders) == pytest.approx(result["total"])

        payouts = {p.order_id: p for p in _payouts()}
        for order in orders:
            payout = payouts[str(order.id)]
            assert payout.status == VendorPayoutStatus.PENDING.value
            assert payout.payout_amount == vendor_payout_amount(order.total_price)
            assert payout.released_at is None

    def test_reverification_is_a_no_op(self, checkout):
        result = checkout()
        _verify(result["payment_reference"], verified=True)
        again = _verify(result["payment_reference"], verified=True)
        assert again == {"status": "success", "processed": False, "orders": 0, "payouts": 0}
        assert len(orders_for_reference(result["payment_reference"])) == 1
        assert len(_payouts()) == 1

    def test_failed_payment_can_be_retried(self, checkout):
        result = checkout()
        failed = _verify(result["payment_reference"], verified=False, failure_reason="Card declined")
        assert failed["status"] == PaymentStatus.FAILED.value
        assert get_payment(result["payment_reference"]).failure_reason == "Card declined"
        assert orders_for_reference(result["payment_reference"]) == []

        succeeded = _verify(result["payment_reference"], verified=True)
        assert succeeded["status"] == PaymentStatus.SUCCESS.value
        assert succeeded["orders"] == 1

    def test_gateway_decides_when_caller_does_not(self, checkout, gateway):
        result = checkout()
        gateway.configure(should_succeed=False, failure_reason="Insufficient funds")
        assert _verify(result["payment_reference"])["status"] == PaymentStatus.FAILED.value
        assert get_payment(result["payment_reference"]).failure_reason == "Insufficient funds"

        gateway.configure(should_succeed=True)
        assert _verify(result["payment_reference"])["status"] == PaymentStatus.SUCCESS.value

    def test_unknown_reference(self):
        from protean.exceptions import ObjectNotFoundError

        with pytest.raises(ObjectNotFoundError):
            _verify("PAY-NOPE", verified=True)


class TestCancelPayment:
    def test_cancelled_payment_cannot_succeed(self, checkout):
        result = checkout()
        current_domain.process(CancelPayment(payment_reference=result["payment_reference"]), asynchronous=False)
        assert get_payment(result["payment_reference"]).status == PaymentStatus.CANCELLED.value

        with pytest.raises(InvalidTransition):
            _verify(result["payment_reference"], verified=True)
        assert orders_for_reference(result["payment_reference"]) == []
