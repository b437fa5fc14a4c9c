"""DeliveryTask aggregate (CQRS): moving one order from vendor to customer.

State Machine:
    PENDING → ASSIGNED → PICKED_UP → DELIVERED

A task is created by the vendor once its order is Accepted or Confirmed, and
carries the vendor's location as it was at that moment. A rider claims a
Pending task only if nobody else has; the claim sets ``rider_id`` and the
Assigned status together. ``rider_id`` is set if and only if the task has
left Pending.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from marketplace.delivery.events import (
    DeliveryTaskAssigned,
    DeliveryTaskCreated,
    DeliveryTaskDelivered,
    DeliveryTaskPickedUp,
)
from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition, TaskAlreadyClaimed, UnauthorizedActor


class TaskStatus(Enum):
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    PICKED_UP = "PickedUp"
    DELIVERED = "Delivered"


_VALID_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.ASSIGNED},
    TaskStatus.ASSIGNED: {TaskStatus.PICKED_UP},
    TaskStatus.PICKED_UP: {TaskStatus.DELIVERED},
    TaskStatus.DELIVERED: set(),  # terminal
}


@marketplace.aggregate
class DeliveryTask:
    order_id = Identifier(required=True, unique=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier()
    rider_id = Identifier()
    vendor_location = String(required=True, max_length=50)
    pickup_address = Text()
    delivery_address = Text()
    payment_reference = String(max_length=100)
    pickup_sequence = Integer()
    status = String(choices=TaskStatus, default=TaskStatus.PENDING.value)
    created_at = DateTime()
    assigned_at = DateTime()
    picked_up_at = DateTime()
    delivered_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def rider_present_iff_claimed(self):
        pending = self.status == TaskStatus.PENDING.value
        if pending and self.rider_id:
            raise ValidationError({"rider_id": ["A pending task cannot have a rider"]})
        if not pending and not self.rider_id:
            raise ValidationError({"rider_id": [f"A {self.status} task must have a rider"]})

    @classmethod
    def create(
        cls,
        order_id,
        vendor_id,
        vendor_location,
        customer_id=None,
        payment_reference=None,
        pickup_address=None,
        delivery_address=None,
    ):
        now = datetime.now(UTC)
        task = cls(
            order_id=order_id,
            vendor_id=vendor_id,
            customer_id=customer_id,
            vendor_location=vendor_location,
            payment_reference=payment_reference,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            status=TaskStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        task.raise_(
            DeliveryTaskCreated(
                task_id=str(task.id),
                order_id=order_id,
                vendor_id=vendor_id,
                customer_id=customer_id,
                vendor_location=vendor_location,
                payment_reference=payment_reference,
                created_at=now,
            )
        )
        return task

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    @property
    def is_claimable(self) -> bool:
        return self.status == TaskStatus.PENDING.value and not self.rider_id

    def _assert_can_transition(self, target: TaskStatus) -> None:
        current = TaskStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def assert_assigned_to(self, rider_id) -> None:
        if str(self.rider_id) != str(rider_id):
            raise UnauthorizedActor({"rider_id": ["Only the assigned rider can update this delivery"]})

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def claim(self, rider_id, pickup_sequence: int | None = None, stop_count: int = 1) -> None:
        """Assign the task to ``rider_id``. Succeeds only while Pending and unclaimed."""
        if not self.is_claimable:
            raise TaskAlreadyClaimed({"task_id": [f"Delivery task {self.id} has already been claimed"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.rider_id = rider_id
            self.status = TaskStatus.ASSIGNED.value
        self.assigned_at = now
        self.pickup_sequence = pickup_sequence
        self.updated_at = now
        self.raise_(
            DeliveryTaskAssigned(
                task_id=str(self.id),
                order_id=str(self.order_id),
                vendor_id=str(self.vendor_id),
                customer_id=self.customer_id,
                rider_id=rider_id,
                payment_reference=self.payment_reference,
                pickup_sequence=pickup_sequence,
                stop_count=stop_count,
                assigned_at=now,
            )
        )

    def mark_picked_up(self, rider_id) -> None:
        self.assert_assigned_to(rider_id)
        self._assert_can_transition(TaskStatus.PICKED_UP)
        now = datetime.now(UTC)
        self.status = TaskStatus.PICKED_UP.value
        self.picked_up_at = now
        self.updated_at = now
        self.raise_(
            DeliveryTaskPickedUp(
                task_id=str(self.id),
                order_id=str(self.order_id),
                vendor_id=str(self.vendor_id),
                customer_id=self.customer_id,
                rider_id=str(self.rider_id),
                picked_up_at=now,
            )
        )

    def mark_delivered(self, rider_id) -> None:
        self.assert_assigned_to(rider_id)
        self._assert_can_transition(TaskStatus.DELIVERED)
        now = datetime.now(UTC)
        self.status = TaskStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = now
        self.raise_(
            DeliveryTaskDelivered(
                task_id=str(self.id),
                order_id=str(self.order_id),
                vendor_id=str(self.vendor_id),
                customer_id=self.customer_id,
                rider_id=str(self.rider_id),
                delivered_at=now,
            )
        )
