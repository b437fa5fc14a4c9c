"""Vendor payout bookkeeping used inside other units of work.

``record_vendor_payouts`` runs in the same unit of work that marks a payment
successful; ``release_vendor_payout`` runs in the one that completes an order.
Neither opens its own transaction.
"""

from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.errors import DuplicatePayoutSuppressed
from marketplace.payout.vendor_payout import VendorPayout, payout_key
from marketplace.pricing.engine import money
from marketplace.pricing.settings import load_settings

logger = structlog.get_logger(__name__)


def vendor_payout_amount(total_price, vendor_share: float | None = None) -> float:
    """Vendor's share of an order total, rounded to the cent."""
    if vendor_share is None:
        vendor_share = load_settings().vendor_share
    return float(money(Decimal(str(total_price)) * Decimal(str(vendor_share))))


def _existing(key):
    repo = current_domain.repository_for(VendorPayout)
    results = repo._dao.query.filter(payout_key=key).all()
    return results.first if results.items else None


def _record_one(payment_id, order, vendor_share) -> VendorPayout:
    key = payout_key(payment_id, order.id)
    if _existing(key) is not None:
        raise DuplicatePayoutSuppressed({"payout_key": [f"Payout {key} already recorded"]})

    payout = VendorPayout.create(
        vendor_id=str(order.vendor_id),
        payment_id=str(payment_id),
        order_id=str(order.id),
        payout_amount=vendor_payout_amount(order.total_price, vendor_share),
    )
    try:
        current_domain.repository_for(VendorPayout).add(payout)
    except ValidationError as exc:
        # Unique constraint on payout_key rejected a concurrent insert
        if "payout_key" in (exc.messages or {}):
            raise DuplicatePayoutSuppressed({"payout_key": [f"Payout {key} already recorded"]}) from exc
        raise
    return payout


def record_vendor_payouts(payment_id, orders) -> dict:
    """Create one pending VendorPayout per order, suppressing duplicates.

    Returns:
        dict with ``created`` (list of payouts) and ``suppressed`` (count).
    """
    vendor_share = load_settings().vendor_share
    created, suppressed = [], 0
    for order in orders:
        try:
            created.append(_record_one(payment_id, order, vendor_share))
        except DuplicatePayoutSuppressed:
            suppressed += 1
            logger.info(
                "Duplicate vendor payout suppressed",
                payment_id=str(payment_id),
                order_id=str(order.id),
            )

    logger.info(
        "Vendor payouts recorded",
        payment_id=str(payment_id),
        created=len(created),
        suppressed=suppressed,
    )
    return {"created": created, "suppressed": suppressed}


def release_vendor_payout(order_id) -> VendorPayout | None:
    """Stamp the order's payout as released, if it has one."""
    repo = current_domain.repository_for(VendorPayout)
    results = repo._dao.query.filter(order_id=str(order_id)).all()
    if not results.items:
        logger.warning("No vendor payout found for completed order", order_id=str(order_id))
        return None

    payout = results.first
    if payout.release():
        repo.add(payout)
        logger.info("Vendor payout released", payout_id=str(payout.id), order_id=str(order_id))
    return payout
