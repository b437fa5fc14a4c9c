"""Vendor-facing order status changes: command and handler.

Only the owning vendor may move its order. ``Completed`` is reserved for
pickup orders here; orders with a delivery task complete when the rider
delivers.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask
from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition, OrderAlreadyTerminal, UnauthorizedActor
from marketplace.order.order import Order, OrderStatus
from marketplace.payout.ledger import release_vendor_payout

logger = structlog.get_logger(__name__)

VENDOR_TARGETS = {
    OrderStatus.ACCEPTED,
    OrderStatus.REJECTED,
    OrderStatus.CONFIRMED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
}


def has_delivery_task(order_id) -> bool:
    repo = current_domain.repository_for(DeliveryTask)
    return bool(repo._dao.query.filter(order_id=str(order_id)).all().items)


@marketplace.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    target = String(required=True, choices=OrderStatus)
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(SetOrderStatus)
    def set_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if str(order.vendor_id) != str(command.vendor_id):
            raise UnauthorizedActor({"vendor_id": ["Only the vendor who owns this order can change its status"]})

        target = OrderStatus(command.target)
        if target not in VENDOR_TARGETS:
            if order.is_terminal:
                raise OrderAlreadyTerminal({"status": [f"Order {order.id} is already {order.status}"]})
            raise InvalidTransition({"status": [f"Vendors cannot set an order to {target.value}"]})

        if target == OrderStatus.COMPLETED and not order.is_terminal and has_delivery_task(order.id):
            raise InvalidTransition(
                {"status": ["Orders with a delivery task are completed by the rider on delivery"]}
            )

        previous = order.status
        order.transition_to(target, reason=command.reason)
        repo.add(order)

        if target == OrderStatus.COMPLETED:
            release_vendor_payout(order.id)

        logger.info(
            "Order status changed by vendor",
            order_id=command.order_id,
            vendor_id=command.vendor_id,
            from_status=previous,
            to_status=order.status,
        )
        return order.status
