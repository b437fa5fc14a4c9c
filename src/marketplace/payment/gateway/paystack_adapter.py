"""Paystack gateway adapter.

Amounts are sent in kobo (the minor unit). Network and HTTP errors are
reported as unverified results rather than raised, so a flaky provider can
never mark a payment successful. Webhooks are authenticated by an HMAC-SHA512
of the raw body, keyed with the secret key.
"""

import hashlib
import hmac

import requests
import structlog

from marketplace.payment.gateway.port import InitializationResult, PaymentGateway, VerificationResult

logger = structlog.get_logger(__name__)

PAYSTACK_BASE_URL = "https://api.paystack.co"


def webhook_signature(secret_key: str, payload: bytes) -> str:
    """Hex HMAC-SHA512 of the raw webhook body, as sent in ``x-paystack-signature``."""
    return hmac.new(secret_key.strip().encode(), payload, hashlib.sha512).hexdigest()


class PaystackGateway(PaymentGateway):
    def __init__(self, secret_key: str, base_url: str = PAYSTACK_BASE_URL, timeout: float = 10.0) -> None:
        self.secret_key = secret_key.strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.secret_key}",
                "Content-Type": "application/json",
            }
        )

    def initialize_transaction(self, reference: str, amount: float, email: str | None = None) -> InitializationResult:
        payload = {"reference": reference, "amount": int(round(amount * 100)), "email": email}
        try:
            response = self.session.post(
                f"{self.base_url}/transaction/initialize",
                json=payload,
                timeout=self.timeout,
            )
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Paystack initialize failed", reference=reference, error=str(exc))
            return InitializationResult(success=False, reference=reference, failure_reason=str(exc))

        if not response.ok or not body.get("status"):
            return InitializationResult(
                success=False,
                reference=reference,
                failure_reason=body.get("message", f"HTTP {response.status_code}"),
            )
        data = body.get("data") or {}
        return InitializationResult(
            success=True,
            reference=data.get("reference", reference),
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
        )

    def verify_transaction(self, reference: str) -> VerificationResult:
        try:
            response = self.session.get(
                f"{self.base_url}/transaction/verify/{reference}",
                timeout=self.timeout,
            )
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Paystack verify failed", reference=reference, error=str(exc))
            return VerificationResult(verified=False, reference=reference, failure_reason=str(exc))

        data = body.get("data") or {}
        gateway_status = data.get("status")
        verified = response.ok and bool(body.get("status")) and gateway_status == "success"
        amount = data.get("amount")
        return VerificationResult(
            verified=verified,
            reference=reference,
            amount=amount / 100 if isinstance(amount, int | float) else None,
            gateway_status=gateway_status,
            failure_reason=None if verified else body.get("message") or gateway_status or "Verification failed",
        )

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        if not signature:
            return False
        return hmac.compare_digest(webhook_signature(self.secret_key, payload), signature)
