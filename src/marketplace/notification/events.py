"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Notification")
class NotificationCreated:
    """A notification was recorded and queued for push delivery."""

    __version__ = 1

    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)
    audience = String(required=True)
    notification_type = String(required=True)
    title = String()
    created_at = DateTime(required=True)


@marketplace.event(part_of="Notification")
class NotificationSent:
    __version__ = 1

    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)
    sent_at = DateTime(required=True)


@marketplace.event(part_of="Notification")
class NotificationFailed:
    __version__ = 1

    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)
    reason = String(required=True)
    failed_at = DateTime(required=True)


@marketplace.event(part_of="Notification")
class NotificationRead:
    __version__ = 1

    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)
    read_at = DateTime(required=True)
