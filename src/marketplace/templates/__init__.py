"""Template registry: maps NotificationType to template classes.

Each template knows its default channels and how to render a title and
message from a typed payload.
"""

from marketplace.notification.notification import NotificationType
from marketplace.templates.delivery_updates import (
    DeliveryAssignedTemplate,
    DeliveryCompletedTemplate,
    DeliveryPickupTemplate,
    DeliveryRouteAssignedTemplate,
    NewTaskTemplate,
)
from marketplace.templates.order_updates import (
    NewOrderTemplate,
    OrderAcceptedTemplate,
    OrderAlertTemplate,
    OrderCancelledTemplate,
    OrderCompletedTemplate,
    OrderConfirmedTemplate,
    OrderRejectedTemplate,
)
from marketplace.templates.payouts import (
    PaymentFailedTemplate,
    PayoutPendingTemplate,
    RiderPayoutTemplate,
)

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.NEW_ORDER.value: NewOrderTemplate,
    NotificationType.ORDER_ACCEPTED.value: OrderAcceptedTemplate,
    NotificationType.ORDER_REJECTED.value: OrderRejectedTemplate,
    NotificationType.ORDER_CONFIRMED.value: OrderConfirmedTemplate,
    NotificationType.ORDER_COMPLETED.value: OrderCompletedTemplate,
    NotificationType.ORDER_CANCELLED.value: OrderCancelledTemplate,
    NotificationType.ORDER_ALERT.value: OrderAlertTemplate,
    NotificationType.NEW_TASK.value: NewTaskTemplate,
    NotificationType.DELIVERY_ASSIGNED.value: DeliveryAssignedTemplate,
    NotificationType.DELIVERY_ROUTE_ASSIGNED.value: DeliveryRouteAssignedTemplate,
    NotificationType.DELIVERY_PICKUP.value: DeliveryPickupTemplate,
    NotificationType.DELIVERY_COMPLETED.value: DeliveryCompletedTemplate,
    NotificationType.PAYOUT_PENDING.value: PayoutPendingTemplate,
    NotificationType.RIDER_PAYOUT.value: RiderPayoutTemplate,
    NotificationType.PAYMENT_FAILED.value: PaymentFailedTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
