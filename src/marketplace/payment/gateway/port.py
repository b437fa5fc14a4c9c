"""Payment gateway port (abstract interface).

The engine only needs two things from a payment provider: a checkout URL for
a new payment reference, and a verdict on whether that reference was paid.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class InitializationResult:
    success: bool
    reference: str
    authorization_url: str | None = None
    access_code: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class VerificationResult:
    verified: bool
    reference: str
    amount: float | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    @abstractmethod
    def initialize_transaction(self, reference: str, amount: float, email: str | None = None) -> InitializationResult:
        """Open a hosted checkout for ``reference``."""
        ...

    @abstractmethod
    def verify_transaction(self, reference: str) -> VerificationResult:
        """Ask the provider whether ``reference`` was paid."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Check that a webhook body was signed by the provider."""
        ...
