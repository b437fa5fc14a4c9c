"""Delivery dispatch templates: riders, vendors and customers."""

from marketplace.notification.notification import NotificationChannel, NotificationType
from marketplace.notification.payloads import RoutePayload, TaskPayload


class NewTaskTemplate:
    notification_type = NotificationType.NEW_TASK.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: TaskPayload) -> dict:
        return {
            "title": "New delivery available",
            "message": f"A new delivery is waiting for pickup in {payload.vendor_location}. Claim it before someone else does.",
        }


class DeliveryAssignedTemplate:
    notification_type = NotificationType.DELIVERY_ASSIGNED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: TaskPayload) -> dict:
        return {
            "title": "Rider assigned",
            "message": f"A rider has been assigned to order {payload.order_id}.",
        }


class DeliveryRouteAssignedTemplate:
    notification_type = NotificationType.DELIVERY_ROUTE_ASSIGNED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: RoutePayload) -> dict:
        if payload.stop_count > 1:
            message = f"You have a {payload.stop_count}-stop route. Pick up the stops in order."
        else:
            message = "You have a new delivery. Head to the vendor for pickup."
        return {"title": "Delivery assigned to you", "message": message}


class DeliveryPickupTemplate:
    notification_type = NotificationType.DELIVERY_PICKUP.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: TaskPayload) -> dict:
        return {
            "title": "Order picked up",
            "message": f"Order {payload.order_id} has been picked up and is on its way.",
        }


class DeliveryCompletedTemplate:
    notification_type = NotificationType.DELIVERY_COMPLETED.value
    default_channels = [NotificationChannel.IN_APP.value, NotificationChannel.PUSH.value]

    @staticmethod
    def render(payload: TaskPayload) -> dict:
        return {
            "title": "Order delivered",
            "message": f"Order {payload.order_id} has been delivered.",
        }
