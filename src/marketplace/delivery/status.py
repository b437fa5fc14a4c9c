"""Rider-facing task status changes: pickup and delivery.

Delivering a task completes its order and releases the vendor payout in the
same unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask, TaskStatus
from marketplace.delivery.queries import tasks_for_reference
from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition, OrderAlreadyTerminal
from marketplace.order.order import Order, OrderStatus
from marketplace.payout.ledger import release_vendor_payout

logger = structlog.get_logger(__name__)

_FROZEN_ORDER_STATUSES = {OrderStatus.CANCELLED.value, OrderStatus.REJECTED.value}
_PICKED = {TaskStatus.PICKED_UP.value, TaskStatus.DELIVERED.value}


def assert_pickup_order(task: DeliveryTask) -> None:
    """Earlier stops in a multi-stop group must be picked up first."""
    if not task.pickup_sequence or task.pickup_sequence <= 1:
        return
    for other in tasks_for_reference(task.payment_reference):
        if (
            str(other.rider_id) == str(task.rider_id)
            and other.pickup_sequence is not None
            and other.pickup_sequence < task.pickup_sequence
            and other.status not in _PICKED
        ):
            raise InvalidTransition(
                {"pickup_sequence": [f"Pick up stop {other.pickup_sequence} before stop {task.pickup_sequence}"]}
            )


@marketplace.command(part_of="DeliveryTask")
class SetTaskStatus:
    task_id = Identifier(required=True)
    rider_id = Identifier(required=True)
    target = String(required=True, choices=TaskStatus)


@marketplace.command_handler(part_of=DeliveryTask)
class TaskStatusHandler:
    @handle(SetTaskStatus)
    def set_task_status(self, command):
        repo = current_domain.repository_for(DeliveryTask)
        task = repo.get(command.task_id)
        task.assert_assigned_to(command.rider_id)

        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(task.order_id)
        if order.status in _FROZEN_ORDER_STATUSES:
            raise OrderAlreadyTerminal({"order_id": [f"Order {order.id} is {order.status}; delivery is frozen"]})

        target = TaskStatus(command.target)
        if target == TaskStatus.PICKED_UP:
            assert_pickup_order(task)
            task.mark_picked_up(command.rider_id)
            repo.add(task)
        elif target == TaskStatus.DELIVERED:
            task.mark_delivered(command.rider_id)
            repo.add(task)
            order.complete(via="delivery")
            order_repo.add(order)
            release_vendor_payout(order.id)
        else:
            raise InvalidTransition({"status": [f"Riders cannot set a task to {target.value}"]})

        logger.info(
            "Delivery task status changed",
            task_id=command.task_id,
            rider_id=command.rider_id,
            status=task.status,
        )
        return task.status
