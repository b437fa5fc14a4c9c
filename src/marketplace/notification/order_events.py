"""Notifications reacting to Order events.

Paid orders alert the vendor. Every later transition tells the customer.
Rejections and cancellations also alert each platform admin, and a
cancellation is sent to the vendor as well.
"""

import structlog
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.helpers import contain_fan_out, notify, notify_admins
from marketplace.notification.notification import Audience, Notification, NotificationType
from marketplace.notification.payloads import OrderPayload
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderCompleted,
    OrderConfirmed,
    OrderPaid,
    OrderRejected,
)

logger = structlog.get_logger(__name__)


def _payload(event, status=None, reason=None) -> OrderPayload:
    return OrderPayload(
        order_id=str(event.order_id),
        vendor_id=str(event.vendor_id),
        customer_id=str(event.customer_id),
        payment_reference=event.payment_reference,
        total_price=getattr(event, "total_price", None),
        status=status,
        reason=reason,
    )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::order")
class OrderNotificationHandler:
    @handle(OrderPaid)
    @contain_fan_out
    def on_order_paid(self, event: OrderPaid) -> None:
        notify(
            event.vendor_id,
            Audience.VENDOR.value,
            NotificationType.NEW_ORDER.value,
            event.order_id,
            _payload(event, status="Paid"),
        )

    @handle(OrderAccepted)
    @contain_fan_out
    def on_order_accepted(self, event: OrderAccepted) -> None:
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.ORDER_ACCEPTED.value,
            event.order_id,
            _payload(event, status="Accepted"),
        )

    @handle(OrderRejected)
    @contain_fan_out
    def on_order_rejected(self, event: OrderRejected) -> None:
        payload = _payload(event, status="Rejected", reason=event.reason)
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.ORDER_REJECTED.value,
            event.order_id,
            payload,
        )
        notify_admins(NotificationType.ORDER_ALERT.value, event.order_id, payload)

    @handle(OrderConfirmed)
    @contain_fan_out
    def on_order_confirmed(self, event: OrderConfirmed) -> None:
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.ORDER_CONFIRMED.value,
            event.order_id,
            _payload(event, status="Confirmed"),
        )

    @handle(OrderCompleted)
    @contain_fan_out
    def on_order_completed(self, event: OrderCompleted) -> None:
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.ORDER_COMPLETED.value,
            event.order_id,
            _payload(event, status="Completed"),
        )

    @handle(OrderCancelled)
    @contain_fan_out
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        payload = _payload(event, status="Cancelled", reason=event.reason)
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.ORDER_CANCELLED.value,
            event.order_id,
            payload,
        )
        notify(
            event.vendor_id,
            Audience.VENDOR.value,
            NotificationType.ORDER_CANCELLED.value,
            event.order_id,
            payload,
        )
        notify_admins(NotificationType.ORDER_ALERT.value, event.order_id, payload)
        logger.info(
            "Cancellation notifications sent",
            order_id=str(event.order_id),
            cancelled_by=event.cancelled_by,
            previous_status=event.previous_status,
        )
