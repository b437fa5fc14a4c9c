"""Payment aggregate (CQRS): one checkout, settled by one provider charge.

The payment carries the order intents of its checkout in ``pending_orders``.
Orders only materialize once the provider verifies the charge.

State Machine:
    PENDING → SUCCESS
    PENDING → FAILED → SUCCESS     (customer retried and the charge went through)
    {PENDING, FAILED} → CANCELLED

SUCCESS and CANCELLED are terminal.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition
from marketplace.payment.events import (
    PaymentCancelled,
    PaymentFailed,
    PaymentInitiated,
    PaymentSucceeded,
)
from marketplace.pricing.engine import money


class PaymentStatus(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.CANCELLED},
    PaymentStatus.FAILED: {PaymentStatus.SUCCESS, PaymentStatus.CANCELLED},
    PaymentStatus.SUCCESS: set(),  # terminal
    PaymentStatus.CANCELLED: set(),  # terminal
}


@marketplace.aggregate
class Payment:
    user_id = Identifier(required=True)
    payment_reference = String(required=True, unique=True, max_length=100)
    subtotal = Float(required=True, min_value=0.0)
    delivery_fee = Float(default=0.0)
    tax_amount = Float(default=0.0)
    commission_amount = Float(default=0.0)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    pending_orders = Text()  # JSON list of order intents
    delivery_details = Text()  # JSON object
    delivery_zone = String(max_length=100)
    pricing_mode = String(max_length=20)
    order_type = String(max_length=20)
    failure_reason = String(max_length=500)
    verified_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def initiate(cls, user_id, payment_reference, price_quote, intents, delivery_details=None, order_type=None):
        """Open a pending payment for a priced checkout."""
        now = datetime.now(UTC)
        payment = cls(
            user_id=user_id,
            payment_reference=payment_reference,
            subtotal=price_quote.subtotal,
            delivery_fee=price_quote.delivery_fee,
            tax_amount=price_quote.vat_amount,
            commission_amount=price_quote.commission_amount,
            total_amount=price_quote.total,
            pending_orders=json.dumps([intent.to_dict() for intent in intents]),
            delivery_details=json.dumps(delivery_details or {}),
            delivery_zone=price_quote.delivery_zone,
            pricing_mode=price_quote.pricing_mode,
            order_type=order_type,
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=str(payment.id),
                payment_reference=payment_reference,
                customer_id=user_id,
                total_amount=price_quote.total,
                order_count=len(intents),
                initiated_at=now,
            )
        )
        return payment

    @classmethod
    def for_orders(cls, user_id, payment_reference, intents, delivery_address=None, order_type=None):
        """Open a pending payment covering orders placed directly under ``payment_reference``.

        ``intents`` are the order intent dicts the orders were built from; the
        payment's amounts are their sums.
        """
        now = datetime.now(UTC)
        subtotal = sum((money(intent["subtotal"]) for intent in intents), Decimal(0))
        delivery_fee = sum((money(intent.get("delivery_fee") or 0) for intent in intents), Decimal(0))
        vat = sum((money(intent.get("vat_amount") or 0) for intent in intents), Decimal(0))
        total = sum((money(intent["total_price"]) for intent in intents), Decimal(0))
        zones = {intent.get("delivery_zone") for intent in intents} - {None}
        payment = cls(
            user_id=user_id,
            payment_reference=payment_reference,
            subtotal=float(subtotal),
            delivery_fee=float(delivery_fee),
            tax_amount=float(vat),
            total_amount=float(total),
            pending_orders=json.dumps(intents),
            delivery_details=json.dumps({"address": delivery_address} if delivery_address else {}),
            delivery_zone=zones.pop() if len(zones) == 1 else None,
            order_type=order_type,
            status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=str(payment.id),
                payment_reference=payment_reference,
                customer_id=user_id,
                total_amount=float(total),
                order_count=len(intents),
                initiated_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------
    def order_intents(self) -> list[dict]:
        return json.loads(self.pending_orders) if self.pending_orders else []

    def delivery_details_dict(self) -> dict:
        return json.loads(self.delivery_details) if self.delivery_details else {}

    def delivery_address(self) -> str | None:
        details = self.delivery_details_dict()
        return details.get("address") or details.get("delivery_address") or None

    @property
    def is_successful(self) -> bool:
        return self.status == PaymentStatus.SUCCESS.value

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target: PaymentStatus) -> None:
        current = PaymentStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def mark_success(self) -> bool:
        """Record a verified charge. Returns False if the payment already succeeded."""
        if self.is_successful:
            return False
        self._assert_can_transition(PaymentStatus.SUCCESS)
        now = datetime.now(UTC)
        self.status = PaymentStatus.SUCCESS.value
        self.failure_reason = None
        self.verified_at = now
        self.updated_at = now
        self.raise_(
            PaymentSucceeded(
                payment_id=str(self.id),
                payment_reference=self.payment_reference,
                customer_id=str(self.user_id),
                total_amount=self.total_amount,
                verified_at=now,
            )
        )
        return True

    def mark_failed(self, reason: str | None = None) -> bool:
        """Record a failed verification. Repeats and late failures are ignored."""
        current = PaymentStatus(self.status)
        if current != PaymentStatus.PENDING:
            return False
        now = datetime.now(UTC)
        self.status = PaymentStatus.FAILED.value
        self.failure_reason = reason or "Payment verification failed"
        self.updated_at = now
        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                payment_reference=self.payment_reference,
                customer_id=str(self.user_id),
                reason=self.failure_reason,
                failed_at=now,
            )
        )
        return True

    def cancel(self) -> None:
        self._assert_can_transition(PaymentStatus.CANCELLED)
        now = datetime.now(UTC)
        self.status = PaymentStatus.CANCELLED.value
        self.updated_at = now
        self.raise_(
            PaymentCancelled(
                payment_id=str(self.id),
                payment_reference=self.payment_reference,
                customer_id=str(self.user_id),
                cancelled_at=now,
            )
        )
