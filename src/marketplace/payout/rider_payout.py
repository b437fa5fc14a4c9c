"""RiderPayout aggregate: a rider's earnings for one ISO week.

One row per (rider, week_start), enforced by the unique ``period_key``.
Recomputing a week updates a pending row in place and never touches a paid one.
"""

from datetime import UTC, date, datetime, timedelta
from enum import Enum

from protean.fields import Date, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition
from marketplace.payout.events import RiderPayoutComputed, RiderPayoutPaid


class RiderPayoutStatus(Enum):
    PENDING = "pending"
    PAID = "paid"


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the ISO week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def period_key(rider_id, week_start: date) -> str:
    return f"{rider_id}:{week_start.isoformat()}"


@marketplace.aggregate
class RiderPayout:
    rider_id = Identifier(required=True)
    week_start = Date(required=True)
    week_end = Date(required=True)
    period_key = String(required=True, unique=True, max_length=255)
    total_deliveries = Integer(default=0, min_value=0)
    amount_per_delivery = Float(required=True, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    status = String(choices=RiderPayoutStatus, default=RiderPayoutStatus.PENDING.value)
    payout_reference = String(max_length=255)
    paid_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def compute(cls, rider_id, week_start: date, deliveries: int, rate: float):
        week_start, week_end = week_bounds(week_start)
        now = datetime.now(UTC)
        payout = cls(
            rider_id=rider_id,
            week_start=week_start,
            week_end=week_end,
            period_key=period_key(rider_id, week_start),
            total_deliveries=deliveries,
            amount_per_delivery=rate,
            total_amount=round(deliveries * rate, 2),
            status=RiderPayoutStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        payout._raise_computed(now, revised=False)
        return payout

    @property
    def is_paid(self) -> bool:
        return self.status == RiderPayoutStatus.PAID.value

    def revise(self, deliveries: int, rate: float) -> bool:
        """Bring a pending payout up to date. Returns True if anything changed."""
        if self.is_paid:
            return False
        total = round(deliveries * rate, 2)
        if deliveries == self.total_deliveries and total == self.total_amount:
            return False

        now = datetime.now(UTC)
        self.total_deliveries = deliveries
        self.amount_per_delivery = rate
        self.total_amount = total
        self.updated_at = now
        self._raise_computed(now, revised=True)
        return True

    def mark_paid(self, payout_reference=None) -> None:
        if self.is_paid:
            raise InvalidTransition({"status": [f"Rider payout {self.id} is already paid"]})
        now = datetime.now(UTC)
        self.status = RiderPayoutStatus.PAID.value
        self.payout_reference = payout_reference
        self.paid_at = now
        self.updated_at = now
        self.raise_(
            RiderPayoutPaid(
                payout_id=str(self.id),
                rider_id=str(self.rider_id),
                total_amount=self.total_amount,
                payout_reference=payout_reference,
                paid_at=now,
            )
        )

    def _raise_computed(self, now, revised: bool) -> None:
        self.raise_(
            RiderPayoutComputed(
                payout_id=str(self.id),
                rider_id=str(self.rider_id),
                week_start=self.week_start,
                week_end=self.week_end,
                total_deliveries=self.total_deliveries,
                total_amount=self.total_amount,
                revised=revised,
                computed_at=now,
            )
        )
