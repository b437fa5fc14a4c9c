"""Order lifecycle templates: vendor, customer and admin messages."""

from marketplace.notification.notification import NotificationChannel, NotificationType
from marketplace.notification.payloads import OrderPayload


def _naira(amount) -> str:
    return f"₦{amount:,.2f}" if amount is not None else "your order total"


class NewOrderTemplate:
    notification_type = NotificationType.NEW_ORDER.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        return {
            "title": "New paid order",
            "message": (
                f"Order {payload.order_id} has been paid ({_naira(payload.total_price)}). "
                "Accept or reject it from your dashboard."
            ),
        }


class OrderAcceptedTemplate:
    notification_type = NotificationType.ORDER_ACCEPTED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        return {
            "title": "Order accepted",
            "message": f"The vendor accepted order {payload.order_id} and is preparing it.",
        }


class OrderRejectedTemplate:
    notification_type = NotificationType.ORDER_REJECTED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        reason = f" Reason: {payload.reason}" if payload.reason else ""
        return {
            "title": "Order rejected",
            "message": f"The vendor rejected order {payload.order_id}.{reason}",
        }


class OrderConfirmedTemplate:
    notification_type = NotificationType.ORDER_CONFIRMED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        return {
            "title": "Order ready",
            "message": f"Order {payload.order_id} is ready and waiting for pickup.",
        }


class OrderCompletedTemplate:
    notification_type = NotificationType.ORDER_COMPLETED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        return {
            "title": "Order completed",
            "message": f"Order {payload.order_id} is complete. Thank you for your purchase!",
        }


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        reason = f" Reason: {payload.reason}" if payload.reason else ""
        return {
            "title": "Order cancelled",
            "message": f"Order {payload.order_id} was cancelled.{reason}",
        }


class OrderAlertTemplate:
    """Admin-facing alert for rejected and cancelled orders. In-app only."""

    notification_type = NotificationType.ORDER_ALERT.value
    default_channels = [NotificationChannel.IN_APP.value]

    @staticmethod
    def render(payload: OrderPayload) -> dict:
        reason = f": {payload.reason}" if payload.reason else ""
        return {
            "title": f"Order {payload.status or 'closed'}",
            "message": (
                f"Order {payload.order_id} (vendor {payload.vendor_id}, "
                f"{_naira(payload.total_price)}) was {(payload.status or 'closed').lower()}{reason}"
            ),
        }
