"""Payout and payment templates."""

from marketplace.notification.notification import NotificationChannel, NotificationType
from marketplace.notification.payloads import PaymentPayload, RiderPayoutPayload, VendorPayoutPayload


class PayoutPendingTemplate:
    notification_type = NotificationType.PAYOUT_PENDING.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(payload: VendorPayoutPayload) -> dict:
        return {
            "title": "Payout pending",
            "message": (
                f"₦{payload.payout_amount:,.2f} for order {payload.order_id} will be paid out "
                "once the order is completed."
            ),
        }


class RiderPayoutTemplate:
    notification_type = NotificationType.RIDER_PAYOUT.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: RiderPayoutPayload) -> dict:
        return {
            "title": "Weekly earnings ready",
            "message": (
                f"You completed {payload.total_deliveries} deliveries between {payload.week_start} "
                f"and {payload.week_end}. Your payout is ₦{payload.total_amount:,.2f}."
            ),
        }


class PaymentFailedTemplate:
    notification_type = NotificationType.PAYMENT_FAILED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: PaymentPayload) -> dict:
        reason = f" ({payload.reason})" if payload.reason else ""
        return {
            "title": "Payment failed",
            "message": f"We could not confirm payment {payload.payment_reference}{reason}. You can try again.",
        }
