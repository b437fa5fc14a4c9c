"""Payment gateway factory.

``PAYMENT_GATEWAY=paystack`` (with ``PAYSTACK_SECRET_KEY``) selects the
Paystack adapter; anything else uses the in-memory fake.
"""

import os

from protean.exceptions import ConfigurationError

from marketplace.payment.gateway.fake_adapter import FakeGateway
from marketplace.payment.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _from_environment() -> PaymentGateway:
    if os.getenv("PAYMENT_GATEWAY", "fake").lower() == "paystack":
        from marketplace.payment.gateway.paystack_adapter import PaystackGateway

        secret_key = os.getenv("PAYSTACK_SECRET_KEY")
        if not secret_key:
            raise ConfigurationError("PAYSTACK_SECRET_KEY is required when PAYMENT_GATEWAY=paystack")
        return PaystackGateway(secret_key)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _from_environment()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active gateway (tests, local tooling)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
