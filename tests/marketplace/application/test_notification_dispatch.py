from unittest.mock import patch

import pytest
from protean import current_domain

from marketplace.errors import UnauthorizedActor
from marketplace.notification.helpers import notify
from marketplace.notification.notification import Audience, DeliveryStatus, Notification, NotificationType
from marketplace.notification.payloads import OrderPayload, VendorPayoutPayload
from marketplace.notification.reading import MarkAllNotificationsRead, MarkNotificationRead, unread_notifications


def _order_payload(order_id="ord-1"):
    return OrderPayload(order_id=order_id, vendor_id="ven-1", customer_id="cust-1")


def _notify_customer(order_id="ord-1", notification_type=NotificationType.ORDER_ACCEPTED.value):
    return notify("cust-1", Audience.CUSTOMER.value, notification_type, order_id, _order_payload(order_id))


def _get(notification_id):
    return current_domain.repository_for(Notification).get(notification_id)


class TestPushDispatch:
    def test_push_channel_templates_are_pushed_and_marked_sent(self, push_adapter):
        notification_id = _notify_customer()
        notification = _get(notification_id)
        assert notification.status == DeliveryStatus.SENT.value
        assert notification.sent_at is not None

        (pushed,) = push_adapter.pushes_to("cust-1")
        assert pushed["title"] == notification.title
        assert pushed["audience"] == Audience.CUSTOMER.value
        assert pushed["data"] == {
            "notification_id": notification_id,
            "type": NotificationType.ORDER_ACCEPTED.value,
        }

    def test_in_app_templates_skip_push(self, push_adapter):
        notification_id = notify(
            "ven-1",
            Audience.VENDOR.value,
            NotificationType.PAYOUT_PENDING.value,
            "vp-1",
            VendorPayoutPayload(payout_id="vp-1", order_id="ord-1", payment_id="pay-1", payout_amount=100.0),
        )
        assert _get(notification_id).status == DeliveryStatus.SENT.value
        assert push_adapter.sent_pushes == []

    def test_push_failure_marks_failed_without_raising(self, push_adapter):
        push_adapter.configure(should_succeed=False, failure_reason="Device token expired")
        notification_id = _notify_customer()
        notification = _get(notification_id)
        assert notification.status == DeliveryStatus.FAILED.value
        assert notification.failure_reason == "Device token expired"

    def test_adapter_errors_are_contained(self, push_adapter):
        with patch.object(push_adapter, "send", side_effect=ConnectionError("push service down")):
            notification_id = _notify_customer()
        assert _get(notification_id).failure_reason == "push service down"

    def test_failed_push_still_shows_in_app(self, push_adapter):
        push_adapter.configure(should_succeed=False)
        notification_id = _notify_customer()
        assert [str(n.id) for n in unread_notifications("cust-1")] == [notification_id]

    def test_source_transition_survives_push_failure(self, push_adapter, paid_orders, notifications):
        push_adapter.configure(should_succeed=False)
        (order,) = paid_orders()
        assert order.status == "Paid"
        (new_order,) = notifications("ven-001", NotificationType.NEW_ORDER.value)
        assert new_order.status == DeliveryStatus.FAILED.value


class TestReading:
    def test_unread_is_newest_first(self):
        first = _notify_customer("ord-1")
        second = _notify_customer("ord-2")
        assert [str(n.id) for n in unread_notifications("cust-1")] == [second, first]

    def test_vendor_notifications_are_listed_by_vendor_id(self):
        notify("ven-1", Audience.VENDOR.value, NotificationType.NEW_ORDER.value, "ord-1", _order_payload())
        (row,) = unread_notifications("ven-1")
        assert row.vendor_id == "ven-1"

    def test_recipient_marks_read(self):
        notification_id = _notify_customer()
        result = current_domain.process(
            MarkNotificationRead(notification_id=notification_id, recipient_id="cust-1"), asynchronous=False
        )
        assert result == notification_id
        assert _get(notification_id).is_read is True
        assert unread_notifications("cust-1") == []

    def test_only_recipient_marks_read(self):
        notification_id = _notify_customer()
        with pytest.raises(UnauthorizedActor):
            current_domain.process(
                MarkNotificationRead(notification_id=notification_id, recipient_id="cust-2"), asynchronous=False
            )
        assert _get(notification_id).is_read is False

    def test_mark_all_read(self):
        _notify_customer("ord-1")
        _notify_customer("ord-2")
        notify("cust-2", Audience.CUSTOMER.value, NotificationType.ORDER_ACCEPTED.value, "ord-3", _order_payload("ord-3"))

        marked = current_domain.process(MarkAllNotificationsRead(recipient_id="cust-1"), asynchronous=False)
        assert marked == 2
        assert unread_notifications("cust-1") == []
        assert len(unread_notifications("cust-2")) == 1
