"""Weekly rider payout batch.

Counts Delivered tasks per rider whose ``delivered_at`` falls inside one ISO
week and upserts one RiderPayout per rider. Safe to re-run: unchanged rows
stay untouched, pending rows are revised, paid rows are never modified.
"""

from collections import Counter
from datetime import UTC, date, datetime, time, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Float
from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask, TaskStatus
from marketplace.domain import marketplace
from marketplace.payout.rider_payout import RiderPayout, period_key, week_bounds
from marketplace.pricing.settings import load_settings

logger = structlog.get_logger(__name__)

_PAGE_SIZE = 200


def delivered_tasks(start: datetime, end: datetime):
    """Yield Delivered tasks with ``start <= delivered_at < end``, one page at a time."""
    repo = current_domain.repository_for(DeliveryTask)
    offset = 0
    while True:
        page = (
            repo._dao.query.filter(
                status=TaskStatus.DELIVERED.value,
                delivered_at__gte=start,
                delivered_at__lt=end,
            )
            .order_by("delivered_at")
            .offset(offset)
            .limit(_PAGE_SIZE)
            .all()
        )
        yield from page.items
        if len(page.items) < _PAGE_SIZE:
            return
        offset += _PAGE_SIZE


def count_deliveries(week_start: date) -> Counter:
    """Delivered tasks per rider for the ISO week starting ``week_start``."""
    start = datetime.combine(week_start, time.min, tzinfo=UTC)
    end = start + timedelta(days=7)
    counts: Counter = Counter()
    for task in delivered_tasks(start, end):
        if task.rider_id:
            counts[str(task.rider_id)] += 1
    return counts


@marketplace.command(part_of="RiderPayout")
class ComputeRiderPayouts:
    week_start = Date(required=True)
    as_of = Date()  # Defaults to today (UTC)
    rate = Float()  # Defaults to MARKETPLACE_RIDER_RATE


@marketplace.command_handler(part_of=RiderPayout)
class RiderPayoutBatchHandler:
    @handle(ComputeRiderPayouts)
    def compute_rider_payouts(self, command):
        week_start, week_end = week_bounds(command.week_start)
        today = command.as_of or datetime.now(UTC).date()
        if today <= week_end:
            raise ValidationError({"week_start": [f"Week {week_start.isoformat()} has not ended yet"]})

        rate = command.rate if command.rate is not None else load_settings().rider_rate_per_delivery
        repo = current_domain.repository_for(RiderPayout)
        summary = {"created": 0, "revised": 0, "unchanged": 0, "paid_skipped": 0}

        for rider_id, deliveries in sorted(count_deliveries(week_start).items()):
            existing = repo._dao.query.filter(period_key=period_key(rider_id, week_start)).all()
            if not existing.items:
                repo.add(RiderPayout.compute(rider_id, week_start, deliveries, rate))
                summary["created"] += 1
                continue

            payout = existing.first
            if payout.is_paid:
                summary["paid_skipped"] += 1
            elif payout.revise(deliveries, rate):
                repo.add(payout)
                summary["revised"] += 1
            else:
                summary["unchanged"] += 1

        logger.info("Rider payouts computed", week_start=week_start.isoformat(), **summary)
        return summary
