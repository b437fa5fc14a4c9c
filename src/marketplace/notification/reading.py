"""Recipient-facing reads: unread lists and read receipts."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import UnauthorizedActor
from marketplace.notification.notification import Notification

logger = structlog.get_logger(__name__)


def unread_notifications(recipient_id) -> list[Notification]:
    """Unread notifications addressed to ``recipient_id``, newest first."""
    dao = current_domain.repository_for(Notification)._dao
    rows = dao.query.filter(user_id=recipient_id, is_read=False).all().items
    rows += dao.query.filter(vendor_id=recipient_id, is_read=False).all().items
    return sorted(rows, key=lambda n: n.created_at, reverse=True)


@marketplace.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    recipient_id = Identifier(required=True)


@marketplace.command(part_of="Notification")
class MarkAllNotificationsRead:
    recipient_id = Identifier(required=True)


@marketplace.command_handler(part_of=Notification)
class NotificationReadHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        if notification.recipient_id != str(command.recipient_id):
            raise UnauthorizedActor({"recipient_id": ["Only the recipient can mark a notification read"]})
        if notification.mark_read():
            repo.add(notification)
        return str(notification.id)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        count = 0
        for notification in unread_notifications(command.recipient_id):
            notification.mark_read()
            repo.add(notification)
            count += 1
        logger.info("Notifications marked read", recipient_id=str(command.recipient_id), count=count)
        return count
