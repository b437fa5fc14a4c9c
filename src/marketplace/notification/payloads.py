"""Typed notification payloads.

A notification stores its payload as ``{"type": <notification type>, "data": {...}}``.
The tag selects the value object, so readers get a typed payload back
instead of a loose dict.
"""

import json

from protean.fields import Float, Integer, String
from protean.utils.reflection import fields

from marketplace.domain import marketplace
from marketplace.notification.notification import NotificationType


@marketplace.value_object
class OrderPayload:
    order_id = String(required=True, max_length=50)
    vendor_id = String(required=True, max_length=50)
    customer_id = String(required=True, max_length=50)
    payment_reference = String(max_length=100)
    total_price = Float()
    status = String(max_length=20)
    reason = String(max_length=500)


@marketplace.value_object
class TaskPayload:
    task_id = String(required=True, max_length=50)
    order_id = String(required=True, max_length=50)
    vendor_id = String(required=True, max_length=50)
    vendor_location = String(max_length=255)
    rider_id = String(max_length=50)


@marketplace.value_object
class RoutePayload:
    """Sent once to the rider who claimed a (possibly multi-stop) group."""

    task_id = String(required=True, max_length=50)
    rider_id = String(required=True, max_length=50)
    payment_reference = String(max_length=100)
    stop_count = Integer(default=1, min_value=1)


@marketplace.value_object
class VendorPayoutPayload:
    payout_id = String(required=True, max_length=50)
    order_id = String(required=True, max_length=50)
    payment_id = String(required=True, max_length=50)
    payout_amount = Float(required=True)


@marketplace.value_object
class RiderPayoutPayload:
    payout_id = String(required=True, max_length=50)
    week_start = String(required=True, max_length=10)
    week_end = String(required=True, max_length=10)
    total_deliveries = Integer(required=True, min_value=0)
    total_amount = Float(required=True)


@marketplace.value_object
class PaymentPayload:
    payment_id = String(required=True, max_length=50)
    payment_reference = String(required=True, max_length=100)
    reason = String(max_length=500)


PAYLOAD_TYPES: dict[str, type] = {
    NotificationType.NEW_ORDER.value: OrderPayload,
    NotificationType.ORDER_ACCEPTED.value: OrderPayload,
    NotificationType.ORDER_REJECTED.value: OrderPayload,
    NotificationType.ORDER_CONFIRMED.value: OrderPayload,
    NotificationType.ORDER_COMPLETED.value: OrderPayload,
    NotificationType.ORDER_CANCELLED.value: OrderPayload,
    NotificationType.ORDER_ALERT.value: OrderPayload,
    NotificationType.NEW_TASK.value: TaskPayload,
    NotificationType.DELIVERY_ASSIGNED.value: TaskPayload,
    NotificationType.DELIVERY_PICKUP.value: TaskPayload,
    NotificationType.DELIVERY_COMPLETED.value: TaskPayload,
    NotificationType.DELIVERY_ROUTE_ASSIGNED.value: RoutePayload,
    NotificationType.PAYOUT_PENDING.value: VendorPayoutPayload,
    NotificationType.RIDER_PAYOUT.value: RiderPayoutPayload,
    NotificationType.PAYMENT_FAILED.value: PaymentPayload,
}


def encode_payload(notification_type: str, payload) -> str:
    expected = PAYLOAD_TYPES.get(notification_type)
    if expected is None:
        raise ValueError(f"No payload registered for notification type: {notification_type}")
    if not isinstance(payload, expected):
        raise TypeError(f"{notification_type} expects {expected.__name__}, got {type(payload).__name__}")
    return json.dumps({"type": notification_type, "data": payload.to_dict()})


def decode_payload(raw: str | None):
    if not raw:
        return None
    document = json.loads(raw)
    payload_cls = PAYLOAD_TYPES.get(document.get("type"))
    if payload_cls is None:
        raise ValueError(f"Unknown payload type: {document.get('type')}")
    known = fields(payload_cls)
    return payload_cls(**{k: v for k, v in document.get("data", {}).items() if k in known})
