"""Notifications reacting to Payment events."""

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.helpers import contain_fan_out, notify
from marketplace.notification.notification import Audience, Notification, NotificationType
from marketplace.notification.payloads import PaymentPayload
from marketplace.payment.events import PaymentFailed


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::payment")
class PaymentNotificationHandler:
    @handle(PaymentFailed)
    @contain_fan_out
    def on_payment_failed(self, event: PaymentFailed) -> None:
        notify(
            event.customer_id,
            Audience.CUSTOMER.value,
            NotificationType.PAYMENT_FAILED.value,
            event.payment_id,
            PaymentPayload(
                payment_id=str(event.payment_id),
                payment_reference=event.payment_reference,
                reason=event.reason,
            ),
        )
