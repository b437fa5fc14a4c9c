"""Internal dispatch handler: pushes notifications once they are recorded.

Reacts to NotificationCreated and delivers through the push adapter when
the template lists the push channel. A delivery failure marks the
notification Failed; it never reaches the transition that caused it.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.channel import get_channel
from marketplace.domain import marketplace
from marketplace.errors import NotificationDeliveryFailed
from marketplace.notification.events import NotificationCreated
from marketplace.notification.helpers import contain_fan_out
from marketplace.notification.notification import (
    DeliveryStatus,
    Notification,
    NotificationChannel,
)
from marketplace.templates import get_template

logger = structlog.get_logger(__name__)


def push(notification: Notification) -> dict:
    """Send ``notification`` through the push adapter.

    Raises:
        NotificationDeliveryFailed: when the adapter reports a failure or errors out.
    """
    adapter = get_channel(NotificationChannel.PUSH.value)
    try:
        result = adapter.send(
            recipient_id=notification.recipient_id,
            audience=notification.audience,
            title=notification.title or "",
            body=notification.message,
            data={
                "notification_id": str(notification.id),
                "type": notification.notification_type,
            },
        )
    except Exception as exc:
        raise NotificationDeliveryFailed(str(exc)) from exc

    if result.get("status") != "sent":
        raise NotificationDeliveryFailed(result.get("error") or "Unknown push error")
    return result


@marketplace.event_handler(part_of=Notification)
class NotificationDispatcher:
    @handle(NotificationCreated)
    @contain_fan_out
    def on_notification_created(self, event: NotificationCreated) -> None:
        repo = current_domain.repository_for(Notification)
        try:
            notification = repo.get(event.notification_id)
        except ObjectNotFoundError:
            logger.error("Notification not found for dispatch", notification_id=str(event.notification_id))
            return

        if notification.status != DeliveryStatus.PENDING.value:
            logger.info(
                "Notification not pending, skipping dispatch",
                notification_id=str(notification.id),
                status=notification.status,
            )
            return

        channels = get_template(notification.notification_type).default_channels
        if NotificationChannel.PUSH.value in channels:
            try:
                push(notification)
            except NotificationDeliveryFailed as exc:
                reason = exc.messages.get("_entity", [str(exc)])[0]
                notification.mark_failed(reason)
                logger.error(
                    "Push delivery failed",
                    notification_id=str(notification.id),
                    recipient_id=notification.recipient_id,
                    error=reason,
                )
                repo.add(notification)
                return

        notification.mark_sent()
        repo.add(notification)
