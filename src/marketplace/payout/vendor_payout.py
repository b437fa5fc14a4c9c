"""VendorPayout aggregate: what the platform owes a vendor for one order.

Exactly one payout exists per (payment, order) pair: ``payout_key`` is unique
and doubles as the idempotency key when a payment-success event is delivered
more than once.

State Machine:
    PENDING → COMPLETED
    PENDING → FAILED → COMPLETED   (settlement retried)

``released_at`` is stamped when the order completes; only released payouts
are settled.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition
from marketplace.payout.events import VendorPayoutCreated, VendorPayoutReleased, VendorPayoutSettled


class VendorPayoutStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    VendorPayoutStatus.PENDING: {VendorPayoutStatus.COMPLETED, VendorPayoutStatus.FAILED},
    VendorPayoutStatus.FAILED: {VendorPayoutStatus.COMPLETED},
    VendorPayoutStatus.COMPLETED: set(),
}


def payout_key(payment_id, order_id) -> str:
    return f"{payment_id}:{order_id}"


@marketplace.aggregate
class VendorPayout:
    vendor_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payout_key = String(required=True, unique=True, max_length=255)
    payout_amount = Float(required=True, min_value=0.0)
    status = String(choices=VendorPayoutStatus, default=VendorPayoutStatus.PENDING.value)
    released_at = DateTime()
    payout_reference = String(max_length=255)
    failure_reason = String(max_length=500)
    completed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, vendor_id, payment_id, order_id, payout_amount):
        now = datetime.now(UTC)
        payout = cls(
            vendor_id=vendor_id,
            payment_id=payment_id,
            order_id=order_id,
            payout_key=payout_key(payment_id, order_id),
            payout_amount=payout_amount,
            status=VendorPayoutStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payout.raise_(
            VendorPayoutCreated(
                payout_id=str(payout.id),
                vendor_id=vendor_id,
                payment_id=payment_id,
                order_id=order_id,
                payout_amount=payout_amount,
                created_at=now,
            )
        )
        return payout

    def release(self) -> bool:
        """Mark the payout as earned. Returns False if it was already released."""
        if self.released_at is not None:
            return False
        now = datetime.now(UTC)
        self.released_at = now
        self.updated_at = now
        self.raise_(
            VendorPayoutReleased(
                payout_id=str(self.id),
                vendor_id=str(self.vendor_id),
                order_id=str(self.order_id),
                payout_amount=self.payout_amount,
                released_at=now,
            )
        )
        return True

    def settle(self, succeeded: bool, payout_reference=None, failure_reason=None) -> None:
        target = VendorPayoutStatus.COMPLETED if succeeded else VendorPayoutStatus.FAILED
        current = VendorPayoutStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})
        if self.released_at is None:
            raise InvalidTransition({"released_at": ["Payout has not been released; the order is not complete"]})

        now = datetime.now(UTC)
        self.status = target.value
        self.payout_reference = payout_reference
        self.failure_reason = None if succeeded else (failure_reason or "Settlement failed")
        if succeeded:
            self.completed_at = now
        self.updated_at = now
        self.raise_(
            VendorPayoutSettled(
                payout_id=str(self.id),
                vendor_id=str(self.vendor_id),
                order_id=str(self.order_id),
                status=self.status,
                payout_reference=payout_reference,
                failure_reason=self.failure_reason,
                settled_at=now,
            )
        )
