"""Out-of-band settlement of vendor and rider payouts: commands and handlers."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.payout.rider_payout import RiderPayout
from marketplace.payout.vendor_payout import VendorPayout

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="VendorPayout")
class SettleVendorPayout:
    payout_id = Identifier(required=True)
    succeeded = Boolean(required=True)
    payout_reference = String(max_length=255)
    failure_reason = String(max_length=500)


@marketplace.command(part_of="RiderPayout")
class MarkRiderPayoutPaid:
    payout_id = Identifier(required=True)
    payout_reference = String(max_length=255)


@marketplace.command_handler(part_of=VendorPayout)
class VendorPayoutSettlementHandler:
    @handle(SettleVendorPayout)
    def settle_vendor_payout(self, command):
        repo = current_domain.repository_for(VendorPayout)
        payout = repo.get(command.payout_id)
        payout.settle(
            succeeded=command.succeeded,
            payout_reference=command.payout_reference,
            failure_reason=command.failure_reason,
        )
        repo.add(payout)
        logger.info(
            "Vendor payout settled",
            payout_id=command.payout_id,
            status=payout.status,
            payout_reference=command.payout_reference,
        )


@marketplace.command_handler(part_of=RiderPayout)
class RiderPayoutSettlementHandler:
    @handle(MarkRiderPayoutPaid)
    def mark_rider_payout_paid(self, command):
        repo = current_domain.repository_for(RiderPayout)
        payout = repo.get(command.payout_id)
        payout.mark_paid(command.payout_reference)
        repo.add(payout)
        logger.info("Rider payout paid", payout_id=command.payout_id, rider_id=str(payout.rider_id))
