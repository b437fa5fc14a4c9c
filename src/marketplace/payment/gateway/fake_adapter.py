"""Configurable in-memory payment gateway for development and tests."""

from uuid import uuid4

from marketplace.payment.gateway.port import InitializationResult, PaymentGateway, VerificationResult

FAKE_WEBHOOK_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Transaction was not completed"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Transaction was not completed") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def initialize_transaction(self, reference: str, amount: float, email: str | None = None) -> InitializationResult:
        self.calls.append({"method": "initialize_transaction", "reference": reference, "amount": amount})
        access_code = f"fake_{uuid4().hex[:10]}"
        return InitializationResult(
            success=True,
            reference=reference,
            authorization_url=f"https://checkout.fake-gateway.test/{access_code}",
            access_code=access_code,
        )

    def verify_transaction(self, reference: str) -> VerificationResult:
        self.calls.append({"method": "verify_transaction", "reference": reference})
        if self.should_succeed:
            return VerificationResult(verified=True, reference=reference, gateway_status="success")
        return VerificationResult(
            verified=False,
            reference=reference,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:  # noqa: ARG002
        return signature == FAKE_WEBHOOK_SIGNATURE

    def reset(self) -> None:
        self.calls.clear()
        self.should_succeed = True
        self.failure_reason = "Transaction was not completed"
