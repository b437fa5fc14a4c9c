"""Read-side helpers for dispatch: what a rider may see, and task groups."""

from protean.utils.globals import current_domain

from marketplace.delivery.delivery_task import DeliveryTask, TaskStatus
from marketplace.directory.locations import same_location
from marketplace.directory.rider import find_rider
from marketplace.order.order import Order


def order_is_open(order_id) -> bool:
    order = current_domain.repository_for(Order).get(order_id)
    return not order.is_terminal


def available_tasks(rider_id) -> list[DeliveryTask]:
    """Pending, unclaimed tasks in the rider's location, oldest first.

    Unknown or unapproved riders see nothing.
    """
    rider = find_rider(rider_id)
    if rider is None or not rider.is_approved:
        return []

    repo = current_domain.repository_for(DeliveryTask)
    pending = repo._dao.query.filter(status=TaskStatus.PENDING.value).order_by("created_at").all().items
    return [
        task
        for task in pending
        if not task.rider_id and same_location(task.vendor_location, rider.location) and order_is_open(task.order_id)
    ]


def tasks_for_reference(payment_reference) -> list[DeliveryTask]:
    if not payment_reference:
        return []
    repo = current_domain.repository_for(DeliveryTask)
    return repo._dao.query.filter(payment_reference=payment_reference).order_by("created_at").all().items


def claimable_group(task: DeliveryTask) -> list[DeliveryTask]:
    """The task plus every other claimable task in its multi-stop group.

    A group is the set of tasks from one checkout (same payment reference)
    in the same location. Ordered by creation time.
    """
    siblings = [
        other
        for other in tasks_for_reference(task.payment_reference)
        if str(other.id) != str(task.id)
        and other.is_claimable
        and same_location(other.vendor_location, task.vendor_location)
        and order_is_open(other.order_id)
    ]
    return sorted([task, *siblings], key=lambda t: t.created_at)
