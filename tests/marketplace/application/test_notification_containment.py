"""Notification failures never surface to the transition that caused them."""

from unittest.mock import patch

from protean import current_domain

from marketplace.notification import helpers
from marketplace.notification.notification import Audience, NotificationType
from marketplace.notification.payloads import OrderPayload
from marketplace.order.cancellation import CancelOrder
from marketplace.order.order import ActorRole, Order, OrderStatus
from marketplace.order.status import SetOrderStatus


def _accept(order):
    return current_domain.process(
        SetOrderStatus(order_id=str(order.id), vendor_id=str(order.vendor_id), target=OrderStatus.ACCEPTED.value),
        asynchronous=False,
    )


class TestHandlerFailures:
    def test_vendor_decision_succeeds_when_fan_out_raises(self, paid_orders, notifications):
        (order,) = paid_orders()

        with patch(
            "marketplace.notification.order_events.notify",
            side_effect=RuntimeError("notification store down"),
        ):
            assert _accept(order) == OrderStatus.ACCEPTED.value

        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.ACCEPTED.value
        assert notifications("cust-001", NotificationType.ORDER_ACCEPTED.value) == []

    def test_failed_fan_out_is_logged_as_delivery_failure(self, paid_orders):
        (order,) = paid_orders()

        with (
            patch("marketplace.notification.order_events.notify", side_effect=RuntimeError("boom")),
            patch.object(helpers, "logger") as logger,
        ):
            _accept(order)

        (message,) = logger.error.call_args.args
        assert message == "Notification fan-out failed"
        assert logger.error.call_args.kwargs["kind"] == "NotificationDeliveryFailed"
        assert logger.error.call_args.kwargs["handler"] == "OrderNotificationHandler.on_order_accepted"

    def test_order_moves_on_after_a_failed_fan_out(self, paid_orders):
        (order,) = paid_orders()
        with patch("marketplace.notification.order_events.notify", side_effect=RuntimeError("boom")):
            _accept(order)

        confirmed = current_domain.process(
            SetOrderStatus(order_id=str(order.id), vendor_id=str(order.vendor_id), target=OrderStatus.CONFIRMED.value),
            asynchronous=False,
        )
        assert confirmed == OrderStatus.CONFIRMED.value


class TestPerRecipientFailures:
    def test_other_recipients_are_still_told(self, paid_orders, notifications, admin):
        (order,) = paid_orders()
        create = helpers._create

        def failing_for_customer(recipient_id, *args, **kwargs):
            if recipient_id == "cust-001":
                raise RuntimeError("row lock timeout")
            return create(recipient_id, *args, **kwargs)

        with patch.object(helpers, "_create", side_effect=failing_for_customer):
            current_domain.process(
                CancelOrder(order_id=str(order.id), actor_role=ActorRole.CUSTOMER.value, actor_id="cust-001"),
                asynchronous=False,
            )

        assert current_domain.repository_for(Order).get(order.id).status == OrderStatus.CANCELLED.value
        assert notifications("cust-001", NotificationType.ORDER_CANCELLED.value) == []
        assert notifications("ven-001", NotificationType.ORDER_CANCELLED.value)
        assert notifications(admin, NotificationType.ORDER_ALERT.value)

    def test_template_errors_are_contained(self, notifications):
        payload = OrderPayload(order_id="ord-1", vendor_id="ven-1", customer_id="cust-1")
        with patch.object(helpers, "get_template", side_effect=KeyError("order_accepted")):
            result = helpers.notify(
                "cust-1", Audience.CUSTOMER.value, NotificationType.ORDER_ACCEPTED.value, "ord-1", payload
            )

        assert result is None
        assert notifications("cust-1") == []
