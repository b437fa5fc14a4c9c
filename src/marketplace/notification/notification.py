"""Notification aggregate (CQRS): one in-app message to one recipient.

Notifications are created reactively from order, delivery, payout and
payment events. Every notification is addressed to exactly one of
``user_id`` (customers, riders and admins) or ``vendor_id`` (vendors), and
carries a typed payload whose tag is the notification type.

``dedup_key`` (``type:entity_id:recipient``) is unique, so the same
transition never notifies the same recipient twice, however many times
the source event is delivered.

Push delivery:
    PENDING → SENT
    PENDING → FAILED

Read state is independent of push delivery.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.notification.events import (
    NotificationCreated,
    NotificationFailed,
    NotificationRead,
    NotificationSent,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    NEW_ORDER = "new_order"
    PAYOUT_PENDING = "payout_pending"
    ORDER_ACCEPTED = "order_accepted"
    ORDER_REJECTED = "order_rejected"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_COMPLETED = "order_completed"
    ORDER_CANCELLED = "order_cancelled"
    ORDER_ALERT = "order_alert"
    NEW_TASK = "new_task"
    DELIVERY_ASSIGNED = "delivery_assigned"
    DELIVERY_ROUTE_ASSIGNED = "delivery_route_assigned"
    DELIVERY_PICKUP = "delivery_pickup"
    DELIVERY_COMPLETED = "delivery_completed"
    RIDER_PAYOUT = "rider_payout"
    PAYMENT_FAILED = "payment_failed"


class Audience(Enum):
    CUSTOMER = "Customer"
    VENDOR = "Vendor"
    RIDER = "Rider"
    ADMIN = "Admin"


class NotificationChannel(Enum):
    IN_APP = "InApp"  # the notification row itself
    PUSH = "Push"


class DeliveryStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Notification:
    # Recipient: exactly one of these is set
    user_id: Identifier()
    vendor_id: Identifier()
    audience: String(choices=Audience, required=True)

    notification_type: String(choices=NotificationType, required=True)
    title: String(max_length=200)
    message: Text(required=True)
    payload_json: Text()  # {"type": ..., "data": {...}}
    dedup_key: String(required=True, unique=True, max_length=300)

    is_read: Boolean(default=False)
    read_at: DateTime()

    status: String(choices=DeliveryStatus, default=DeliveryStatus.PENDING.value)
    failure_reason: String(max_length=500)
    sent_at: DateTime()

    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def addressed_to_exactly_one_recipient(self):
        if bool(self.user_id) == bool(self.vendor_id):
            raise ValidationError({"recipient": ["A notification needs exactly one of user_id or vendor_id"]})

    @classmethod
    def create(cls, recipient_id, audience, notification_type, message, dedup_key, title=None, payload_json=None):
        now = datetime.now(UTC)
        to_vendor = audience == Audience.VENDOR.value
        notification = cls(
            user_id=None if to_vendor else recipient_id,
            vendor_id=recipient_id if to_vendor else None,
            audience=audience,
            notification_type=notification_type,
            title=title,
            message=message,
            payload_json=payload_json,
            dedup_key=dedup_key,
            is_read=False,
            status=DeliveryStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                audience=audience,
                notification_type=notification_type,
                title=title,
                created_at=now,
            )
        )
        return notification

    @property
    def recipient_id(self) -> str:
        return str(self.vendor_id or self.user_id)

    def payload(self):
        """Decode ``payload_json`` into its typed payload, or None if there is none."""
        from marketplace.notification.payloads import decode_payload

        return decode_payload(self.payload_json)

    # -------------------------------------------------------------------
    # Push delivery
    # -------------------------------------------------------------------
    def _assert_pending(self, target: DeliveryStatus) -> None:
        if self.status != DeliveryStatus.PENDING.value:
            raise ValidationError({"status": [f"Cannot transition from {self.status} to {target.value}"]})

    def mark_sent(self) -> None:
        self._assert_pending(DeliveryStatus.SENT)
        now = datetime.now(UTC)
        self.status = DeliveryStatus.SENT.value
        self.sent_at = now
        self.updated_at = now
        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                recipient_id=self.recipient_id,
                sent_at=now,
            )
        )

    def mark_failed(self, reason: str) -> None:
        self._assert_pending(DeliveryStatus.FAILED)
        now = datetime.now(UTC)
        self.status = DeliveryStatus.FAILED.value
        self.failure_reason = reason
        self.updated_at = now
        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                recipient_id=self.recipient_id,
                reason=reason,
                failed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Read state
    # -------------------------------------------------------------------
    def mark_read(self) -> bool:
        """Mark as read. Returns False if it already was."""
        if self.is_read:
            return False
        now = datetime.now(UTC)
        self.is_read = True
        self.read_at = now
        self.updated_at = now
        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                recipient_id=self.recipient_id,
                read_at=now,
            )
        )
        return True
