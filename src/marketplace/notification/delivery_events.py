"""Notifications reacting to DeliveryTask events.

A new task is announced to every approved, available rider in the vendor's
location. Assignment, pickup and delivery are reported to the vendor and
the customer. The claiming rider gets one route notification per claim,
however many stops the claim covers.
"""

import structlog
from protean.utils.mixins import handle

from marketplace.delivery.events import (
    DeliveryTaskAssigned,
    DeliveryTaskCreated,
    DeliveryTaskDelivered,
    DeliveryTaskPickedUp,
)
from marketplace.directory.rider import riders_in_zone
from marketplace.domain import marketplace
from marketplace.notification.helpers import contain_fan_out, notify
from marketplace.notification.notification import Audience, Notification, NotificationType
from marketplace.notification.payloads import RoutePayload, TaskPayload

logger = structlog.get_logger(__name__)


def _payload(event, vendor_location=None) -> TaskPayload:
    rider_id = getattr(event, "rider_id", None)
    return TaskPayload(
        task_id=str(event.task_id),
        order_id=str(event.order_id),
        vendor_id=str(event.vendor_id),
        vendor_location=vendor_location,
        rider_id=str(rider_id) if rider_id else None,
    )


def _notify_vendor_and_customer(event, notification_type: str) -> None:
    payload = _payload(event)
    notify(event.vendor_id, Audience.VENDOR.value, notification_type, event.task_id, payload)
    notify(event.customer_id, Audience.CUSTOMER.value, notification_type, event.task_id, payload)


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::delivery_task")
class DeliveryNotificationHandler:
    @handle(DeliveryTaskCreated)
    @contain_fan_out
    def on_task_created(self, event: DeliveryTaskCreated) -> None:
        riders = riders_in_zone(event.vendor_location)
        payload = _payload(event, vendor_location=event.vendor_location)
        for rider in riders:
            notify(
                rider.rider_id,
                Audience.RIDER.value,
                NotificationType.NEW_TASK.value,
                event.task_id,
                payload,
            )
        logger.info(
            "New task announced to riders",
            task_id=str(event.task_id),
            vendor_location=event.vendor_location,
            riders=len(riders),
        )

    @handle(DeliveryTaskAssigned)
    @contain_fan_out
    def on_task_assigned(self, event: DeliveryTaskAssigned) -> None:
        _notify_vendor_and_customer(event, NotificationType.DELIVERY_ASSIGNED.value)

        # One route notification per claim: the first stop of a group, or a lone task
        if event.pickup_sequence not in (None, 1):
            return
        route_id = event.payment_reference if event.stop_count > 1 else event.task_id
        notify(
            event.rider_id,
            Audience.RIDER.value,
            NotificationType.DELIVERY_ROUTE_ASSIGNED.value,
            route_id,
            RoutePayload(
                task_id=str(event.task_id),
                rider_id=str(event.rider_id),
                payment_reference=event.payment_reference,
                stop_count=event.stop_count,
            ),
        )

    @handle(DeliveryTaskPickedUp)
    @contain_fan_out
    def on_task_picked_up(self, event: DeliveryTaskPickedUp) -> None:
        _notify_vendor_and_customer(event, NotificationType.DELIVERY_PICKUP.value)

    @handle(DeliveryTaskDelivered)
    @contain_fan_out
    def on_task_delivered(self, event: DeliveryTaskDelivered) -> None:
        _notify_vendor_and_customer(event, NotificationType.DELIVERY_COMPLETED.value)
