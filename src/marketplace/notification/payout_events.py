"""Notifications reacting to VendorPayout and RiderPayout events."""

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.helpers import contain_fan_out, notify
from marketplace.notification.notification import Audience, Notification, NotificationType
from marketplace.notification.payloads import RiderPayoutPayload, VendorPayoutPayload
from marketplace.payout.events import RiderPayoutComputed, VendorPayoutCreated


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::vendor_payout")
class VendorPayoutNotificationHandler:
    @handle(VendorPayoutCreated)
    @contain_fan_out
    def on_vendor_payout_created(self, event: VendorPayoutCreated) -> None:
        notify(
            event.vendor_id,
            Audience.VENDOR.value,
            NotificationType.PAYOUT_PENDING.value,
            event.payout_id,
            VendorPayoutPayload(
                payout_id=str(event.payout_id),
                order_id=str(event.order_id),
                payment_id=str(event.payment_id),
                payout_amount=event.payout_amount,
            ),
        )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::rider_payout")
class RiderPayoutNotificationHandler:
    @handle(RiderPayoutComputed)
    @contain_fan_out
    def on_rider_payout_computed(self, event: RiderPayoutComputed) -> None:
        # A revised payout keeps its id, so the rider is told once per week
        notify(
            event.rider_id,
            Audience.RIDER.value,
            NotificationType.RIDER_PAYOUT.value,
            event.payout_id,
            RiderPayoutPayload(
                payout_id=str(event.payout_id),
                week_start=str(event.week_start),
                week_end=str(event.week_end),
                total_deliveries=event.total_deliveries,
                total_amount=event.total_amount,
            ),
        )
