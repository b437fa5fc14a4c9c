"""Shared helpers for notification event handlers.

The common pattern: build the dedup key, skip if the recipient was already
told about this transition, render the template, create the Notification.

Fan-out runs after the triggering transition has committed. A failure to
record one notification is logged as ``NotificationDeliveryFailed`` and never
reaches the caller of the transition or the remaining recipients.
"""

import functools

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.directory.admin import admin_ids
from marketplace.errors import NotificationDeliveryFailed
from marketplace.notification.notification import Audience, Notification
from marketplace.notification.payloads import encode_payload
from marketplace.templates import get_template

logger = structlog.get_logger(__name__)


def dedup_key(notification_type: str, entity_id, recipient_id) -> str:
    return f"{notification_type}:{entity_id}:{recipient_id}"


def already_notified(key: str) -> bool:
    repo = current_domain.repository_for(Notification)
    return repo._dao.query.filter(dedup_key=key).all().total > 0


def log_fan_out_failure(exc: Exception, **context) -> NotificationDeliveryFailed:
    failure = NotificationDeliveryFailed({"notification": [f"{type(exc).__name__}: {exc}"]})
    logger.error(
        "Notification fan-out failed",
        kind=failure.kind,
        error=str(exc),
        error_type=type(exc).__name__,
        **context,
    )
    return failure


def contain_fan_out(fn):
    """Handler method decorator: log a failure instead of raising it."""

    @functools.wraps(fn)
    def wrapper(handler, event):
        try:
            return fn(handler, event)
        except Exception as exc:
            log_fan_out_failure(
                exc,
                handler=f"{type(handler).__name__}.{fn.__name__}",
                event=type(event).__name__,
            )
            return None

    return wrapper


def _create(recipient_id, audience: str, notification_type: str, entity_id, payload, key: str) -> str | None:
    payload_json = encode_payload(notification_type, payload)
    rendered = get_template(notification_type).render(payload)
    notification = Notification.create(
        recipient_id=str(recipient_id),
        audience=audience,
        notification_type=notification_type,
        title=rendered["title"],
        message=rendered["message"],
        dedup_key=key,
        payload_json=payload_json,
    )

    try:
        current_domain.repository_for(Notification).add(notification)
    except ValidationError as exc:
        # Lost a race with a concurrent delivery of the same event
        if "dedup_key" not in (exc.messages or {}):
            raise
        logger.info("Duplicate notification suppressed", dedup_key=key)
        return None

    logger.info(
        "Notification created",
        notification_id=str(notification.id),
        recipient_id=str(recipient_id),
        audience=audience,
        notification_type=notification_type,
    )
    return str(notification.id)


def notify(recipient_id, audience: str, notification_type: str, entity_id, payload) -> str | None:
    """Create one notification for ``recipient_id`` unless it already exists.

    Returns:
        The new notification id, or None when it was suppressed as a duplicate
        or could not be recorded.
    """
    if not recipient_id:
        logger.warning(
            "Notification has no recipient, skipping",
            notification_type=notification_type,
            entity_id=str(entity_id),
        )
        return None

    key = dedup_key(notification_type, entity_id, recipient_id)
    try:
        if already_notified(key):
            logger.info("Duplicate notification suppressed", dedup_key=key)
            return None
        return _create(recipient_id, audience, notification_type, entity_id, payload, key)
    except Exception as exc:
        log_fan_out_failure(exc, dedup_key=key, recipient_id=str(recipient_id), notification_type=notification_type)
        return None


def notify_admins(notification_type: str, entity_id, payload) -> list[str]:
    """Create one notification per platform admin."""
    created = []
    for admin_id in admin_ids():
        notification_id = notify(admin_id, Audience.ADMIN.value, notification_type, entity_id, payload)
        if notification_id:
            created.append(notification_id)
    return created
