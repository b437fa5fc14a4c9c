"""Rider claim: the single-assignment step of dispatch.

The claim is a conditional write: the aggregate accepts it only while the
task is Pending with no rider, and the unit of work rejects a stale version
at commit. A rejected claim is retried against the fresh task, so the
losing rider gets ``TaskAlreadyClaimed`` either way.

Claiming one task of a multi-stop checkout claims the whole group for the
same rider, numbered in pickup order.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask
from marketplace.delivery.queries import claimable_group, order_is_open
from marketplace.directory.rider import get_rider
from marketplace.domain import marketplace
from marketplace.errors import OrderAlreadyTerminal, TaskAlreadyClaimed

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="DeliveryTask")
class ClaimDeliveryTask:
    task_id = Identifier(required=True)
    rider_id = Identifier(required=True)


@marketplace.command_handler(part_of=DeliveryTask)
class ClaimDeliveryTaskHandler:
    @handle(ClaimDeliveryTask)
    def claim_delivery_task(self, command):
        repo = current_domain.repository_for(DeliveryTask)
        task = repo.get(command.task_id)

        rider = get_rider(command.rider_id)
        rider.assert_can_serve(task.vendor_location)

        if not order_is_open(task.order_id):
            raise OrderAlreadyTerminal({"order_id": [f"Order {task.order_id} is no longer open"]})
        if not task.is_claimable:
            raise TaskAlreadyClaimed({"task_id": [f"Delivery task {task.id} has already been claimed"]})

        group = claimable_group(task)
        multi_stop = len(group) > 1
        for sequence, member in enumerate(group, start=1):
            member.claim(
                command.rider_id,
                pickup_sequence=sequence if multi_stop else None,
                stop_count=len(group),
            )
            repo.add(member)

        logger.info(
            "Delivery claimed",
            task_id=command.task_id,
            rider_id=command.rider_id,
            stops=len(group),
        )
        return [str(member.id) for member in group]
