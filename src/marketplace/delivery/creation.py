"""Delivery task creation: vendor-initiated once the order is accepted."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask
from marketplace.directory.vendor import find_vendor
from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition, OrderAlreadyTerminal, UnauthorizedActor
from marketplace.order.order import DISPATCHABLE_STATUSES, Order, OrderStatus

logger = structlog.get_logger(__name__)


def task_for_order(order_id) -> DeliveryTask | None:
    repo = current_domain.repository_for(DeliveryTask)
    results = repo._dao.query.filter(order_id=str(order_id)).all()
    return results.first if results.items else None


@marketplace.command(part_of="DeliveryTask")
class CreateDeliveryTask:
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    pickup_address = Text()
    delivery_address = Text()


@marketplace.command_handler(part_of=DeliveryTask)
class CreateDeliveryTaskHandler:
    @handle(CreateDeliveryTask)
    def create_delivery_task(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if str(order.vendor_id) != str(command.vendor_id):
            raise UnauthorizedActor({"vendor_id": ["Only the vendor who owns this order can request delivery"]})
        if order.is_terminal:
            raise OrderAlreadyTerminal({"order_id": [f"Order {order.id} is already {order.status}"]})
        if OrderStatus(order.status) not in DISPATCHABLE_STATUSES:
            raise InvalidTransition({"order_id": [f"Order must be Accepted before delivery; it is {order.status}"]})
        if task_for_order(order.id) is not None:
            raise ValidationError({"order_id": [f"A delivery task already exists for order {order.id}"]})

        vendor = find_vendor(command.vendor_id)
        if vendor is None:
            raise ValidationError({"vendor_id": ["Vendor has no profile location; cannot dispatch"]})

        task = DeliveryTask.create(
            order_id=str(order.id),
            vendor_id=str(order.vendor_id),
            vendor_location=vendor.location,
            customer_id=str(order.user_id),
            payment_reference=order.payment_reference,
            pickup_address=command.pickup_address or vendor.address,
            delivery_address=command.delivery_address or order.delivery_address,
        )
        current_domain.repository_for(DeliveryTask).add(task)

        logger.info(
            "Delivery task created",
            task_id=str(task.id),
            order_id=str(order.id),
            vendor_location=task.vendor_location,
        )
        return str(task.id)
