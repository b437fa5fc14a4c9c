import hashlib
import hmac
from unittest.mock import MagicMock

import pytest
import requests
from protean.exceptions import ConfigurationError

from marketplace.payment.gateway import get_gateway, reset_gateway, set_gateway
from marketplace.payment.gateway.fake_adapter import FakeGateway
from marketplace.payment.gateway.paystack_adapter import PaystackGateway


def _response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body or {}
    return response


class TestFactory:
    def test_fake_by_default(self):
        assert isinstance(get_gateway(), FakeGateway)
        assert get_gateway() is get_gateway()

    def test_paystack_needs_a_secret(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "paystack")
        with pytest.raises(ConfigurationError):
            get_gateway()

    def test_paystack_from_environment(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_GATEWAY", "Paystack")
        monkeypatch.setenv("PAYSTACK_SECRET_KEY", "sk_test_123")
        gateway = get_gateway()
        assert isinstance(gateway, PaystackGateway)
        assert gateway.session.headers["Authorization"] == "Bearer sk_test_123"

    def test_override_and_reset(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom
        reset_gateway()
        assert get_gateway() is not custom


class TestPaystack:
    @pytest.fixture()
    def paystack(self):
        gateway = PaystackGateway("sk_test_123", base_url="https://paystack.test/")
        gateway.session = MagicMock()
        return gateway

    def test_initialize_sends_kobo(self, paystack):
        paystack.session.post.return_value = _response(
            body={
                "status": True,
                "data": {"reference": "PAY-1", "authorization_url": "https://pay.test/abc", "access_code": "abc"},
            }
        )
        result = paystack.initialize_transaction("PAY-1", 6875.0, email="ada@example.com")
        assert result.success
        assert result.authorization_url == "https://pay.test/abc"

        args, kwargs = paystack.session.post.call_args
        assert args[0] == "https://paystack.test/transaction/initialize"
        assert kwargs["json"]["amount"] == 687500

    def test_initialize_rejected(self, paystack):
        paystack.session.post.return_value = _response(400, {"status": False, "message": "Invalid key"})
        result = paystack.initialize_transaction("PAY-1", 100.0)
        assert not result.success
        assert result.failure_reason == "Invalid key"

    def test_verify_success(self, paystack):
        paystack.session.get.return_value = _response(
            body={"status": True, "data": {"status": "success", "amount": 687500}}
        )
        result = paystack.verify_transaction("PAY-1")
        assert result.verified
        assert result.amount == 6875.0

    def test_abandoned_charge_is_not_verified(self, paystack):
        paystack.session.get.return_value = _response(body={"status": True, "data": {"status": "abandoned"}})
        result = paystack.verify_transaction("PAY-1")
        assert not result.verified
        assert result.failure_reason == "abandoned"

    def test_network_errors_never_verify(self, paystack):
        paystack.session.get.side_effect = requests.ConnectionError("connection reset")
        result = paystack.verify_transaction("PAY-1")
        assert not result.verified
        assert "connection reset" in result.failure_reason


class TestWebhookSignature:
    BODY = b'{"event":"charge.success","data":{"reference":"PAY-1"}}'

    def test_paystack_signs_with_hmac_sha512(self):
        expected = hmac.new(b"sk_test_123", self.BODY, hashlib.sha512).hexdigest()
        assert PaystackGateway("sk_test_123").verify_webhook_signature(self.BODY, expected)

    def test_paystack_rejects_other_keys_and_blank_signatures(self):
        other = hmac.new(b"sk_test_other", self.BODY, hashlib.sha512).hexdigest()
        gateway = PaystackGateway("sk_test_123")
        assert not gateway.verify_webhook_signature(self.BODY, other)
        assert not gateway.verify_webhook_signature(self.BODY, "")

    def test_fake_accepts_only_the_test_signature(self):
        gateway = FakeGateway()
        assert gateway.verify_webhook_signature(self.BODY, "test-signature")
        assert not gateway.verify_webhook_signature(self.BODY, "anything-else")
