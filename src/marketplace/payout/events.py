"""Domain events for the VendorPayout and RiderPayout aggregates."""

from protean.fields import Boolean, Date, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="VendorPayout")
class VendorPayoutCreated:
    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payout_amount = Float(required=True)
    created_at = DateTime(required=True)


@marketplace.event(part_of="VendorPayout")
class VendorPayoutReleased:
    """The order completed, so the payout may now be settled."""

    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payout_amount = Float(required=True)
    released_at = DateTime(required=True)


@marketplace.event(part_of="VendorPayout")
class VendorPayoutSettled:
    __version__ = 1

    payout_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    order_id = Identifier(required=True)
    status = String(required=True)
    payout_reference = String()
    failure_reason = String()
    settled_at = DateTime(required=True)


@marketplace.event(part_of="RiderPayout")
class RiderPayoutComputed:
    __version__ = 1

    payout_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    week_start = Date(required=True)
    week_end = Date(required=True)
    total_deliveries = Integer(required=True)
    total_amount = Float(required=True)
    revised = Boolean(default=False)
    computed_at = DateTime(required=True)


@marketplace.event(part_of="RiderPayout")
class RiderPayoutPaid:
    __version__ = 1

    payout_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    total_amount = Float(required=True)
    payout_reference = String()
    paid_at = DateTime(required=True)
