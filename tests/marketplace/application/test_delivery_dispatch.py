import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from marketplace.delivery.claim import ClaimDeliveryTask
from marketplace.delivery.creation import CreateDeliveryTask
from marketplace.delivery.delivery_task import DeliveryTask, TaskStatus
from marketplace.delivery.queries import available_tasks
from marketplace.delivery.status import SetTaskStatus
from marketplace.errors import (
    InvalidTransition,
    OrderAlreadyTerminal,
    RiderNotEligible,
    TaskAlreadyClaimed,
    UnauthorizedActor,
)
from marketplace.order.cancellation import CancelOrder
from marketplace.order.order import ActorRole, Order, OrderStatus
from marketplace.order.status import SetOrderStatus
from marketplace.payout.vendor_payout import VendorPayout


def _claim(task_id, rider_id):
    return current_domain.process(ClaimDeliveryTask(task_id=str(task_id), rider_id=rider_id), asynchronous=False)


def _progress(task_id, rider_id, target):
    return current_domain.process(
        SetTaskStatus(task_id=str(task_id), rider_id=rider_id, target=target.value),
        asynchronous=False,
    )


def _task(task_id):
    return current_domain.repository_for(DeliveryTask).get(task_id)


class TestCreateTask:
    def test_task_inherits_vendor_location_and_addresses(self, open_task):
        task = open_task(location="Amassoma")
        assert task.status == TaskStatus.PENDING.value
        assert task.vendor_location == "Amassoma"
        assert task.pickup_address == "12 Mbiama Road"
        assert task.delivery_address == "5 Azikoro Road"
        assert task.customer_id == "cust-001"

    def test_order_must_be_accepted(self, make_vendor, paid_orders):
        make_vendor()
        (order,) = paid_orders()
        with pytest.raises(InvalidTransition):
            current_domain.process(CreateDeliveryTask(order_id=str(order.id), vendor_id="ven-001"), asynchronous=False)

    def test_only_owner_requests_delivery(self, accepted_order):
        order = accepted_order()
        with pytest.raises(UnauthorizedActor):
            current_domain.process(CreateDeliveryTask(order_id=str(order.id), vendor_id="ven-999"), asynchronous=False)

    def test_one_task_per_order(self, open_task):
        task = open_task()
        with pytest.raises(ValidationError):
            current_domain.process(CreateDeliveryTask(order_id=task.order_id, vendor_id="ven-001"), asynchronous=False)

    def test_vendor_needs_a_profile(self, paid_orders):
        (order,) = paid_orders()
        current_domain.process(
            SetOrderStatus(order_id=str(order.id), vendor_id="ven-001", target=OrderStatus.ACCEPTED.value),
            asynchronous=False,
        )
        with pytest.raises(ValidationError) as exc:
            current_domain.process(CreateDeliveryTask(order_id=str(order.id), vendor_id="ven-001"), asynchronous=False)
        assert "vendor_id" in exc.value.messages


class TestAvailableTasks:
    def test_riders_see_tasks_in_their_location(self, open_task, make_rider):
        task = open_task(location="Yenagoa")
        make_rider("rider-yen", location="yenagoa")
        make_rider("rider-ama", location="Amassoma")
        assert [t.id for t in available_tasks("rider-yen")] == [task.id]
        assert available_tasks("rider-ama") == []

    def test_unapproved_and_unknown_riders_see_nothing(self, open_task, make_rider):
        open_task()
        make_rider("rider-new", approved=False)
        assert available_tasks("rider-new") == []
        assert available_tasks("rider-ghost") == []

    def test_claimed_tasks_disappear(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        make_rider("rider-2")
        _claim(task.id, "rider-1")
        assert available_tasks("rider-2") == []

    def test_cancelled_orders_disappear(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        current_domain.process(
            CancelOrder(order_id=task.order_id, actor_role=ActorRole.CUSTOMER.value, actor_id="cust-001"),
            asynchronous=False,
        )
        assert available_tasks("rider-1") == []


class TestClaim:
    def test_first_claim_wins(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        make_rider("rider-2")
        assert _claim(task.id, "rider-1") == [str(task.id)]

        with pytest.raises(TaskAlreadyClaimed):
            _claim(task.id, "rider-2")

        claimed = _task(task.id)
        assert claimed.rider_id == "rider-1"
        assert claimed.status == TaskStatus.ASSIGNED.value

    def test_rider_from_another_zone(self, open_task, make_rider):
        task = open_task(location="Yenagoa")
        make_rider("rider-otu", location="Otuoke")
        with pytest.raises(RiderNotEligible):
            _claim(task.id, "rider-otu")

    def test_unapproved_rider(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-new", approved=False)
        with pytest.raises(RiderNotEligible):
            _claim(task.id, "rider-new")

    def test_unregistered_rider(self, open_task):
        task = open_task()
        with pytest.raises(RiderNotEligible):
            _claim(task.id, "rider-ghost")

    def test_cancelled_order_cannot_be_claimed(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        current_domain.process(
            CancelOrder(order_id=task.order_id, actor_role=ActorRole.CUSTOMER.value, actor_id="cust-001"),
            asynchronous=False,
        )
        with pytest.raises(OrderAlreadyTerminal):
            _claim(task.id, "rider-1")


@pytest.fixture()
def two_stop_checkout(make_vendor, paid_orders, cart_line):
    """One checkout from two Yenagoa vendors, both accepted with tasks."""
    make_vendor("ven-A")
    make_vendor("ven-B")
    orders = paid_orders(lines=[cart_line(vendor_id="ven-A"), cart_line(vendor_id="ven-B")])
    task_ids = []
    for order in orders:
        current_domain.process(
            SetOrderStatus(order_id=str(order.id), vendor_id=order.vendor_id, target=OrderStatus.ACCEPTED.value),
            asynchronous=False,
        )
        task_ids.append(
            current_domain.process(
                CreateDeliveryTask(order_id=str(order.id), vendor_id=order.vendor_id),
                asynchronous=False,
            )
        )
    return task_ids


class TestMultiStop:
    def test_claiming_one_stop_claims_the_group(self, two_stop_checkout, make_rider):
        first, second = two_stop_checkout
        make_rider("rider-1")
        assert _claim(second, "rider-1") == [first, second]
        assert _task(first).pickup_sequence == 1
        assert _task(second).pickup_sequence == 2
        assert {_task(t).rider_id for t in (first, second)} == {"rider-1"}

    def test_stops_are_picked_up_in_order(self, two_stop_checkout, make_rider):
        first, second = two_stop_checkout
        make_rider("rider-1")
        _claim(first, "rider-1")

        with pytest.raises(InvalidTransition):
            _progress(second, "rider-1", TaskStatus.PICKED_UP)

        _progress(first, "rider-1", TaskStatus.PICKED_UP)
        assert _progress(second, "rider-1", TaskStatus.PICKED_UP) == TaskStatus.PICKED_UP.value

    def test_other_location_is_not_grouped(self, make_vendor, make_rider, paid_orders, cart_line):
        make_vendor("ven-A", location="Yenagoa")
        make_vendor("ven-B", location="Amassoma")
        task_ids = []
        for order in paid_orders(lines=[cart_line(vendor_id="ven-A"), cart_line(vendor_id="ven-B")]):
            current_domain.process(
                SetOrderStatus(order_id=str(order.id), vendor_id=order.vendor_id, target=OrderStatus.ACCEPTED.value),
                asynchronous=False,
            )
            task_ids.append(
                current_domain.process(
                    CreateDeliveryTask(order_id=str(order.id), vendor_id=order.vendor_id), asynchronous=False
                )
            )
        make_rider("rider-1")
        assert _claim(task_ids[0], "rider-1") == [task_ids[0]]
        assert _task(task_ids[1]).status == TaskStatus.PENDING.value


class TestDelivery:
    def test_delivery_completes_order_and_releases_payout(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        _claim(task.id, "rider-1")
        _progress(task.id, "rider-1", TaskStatus.PICKED_UP)
        assert _progress(task.id, "rider-1", TaskStatus.DELIVERED) == TaskStatus.DELIVERED.value

        delivered = _task(task.id)
        assert delivered.delivered_at is not None
        order = current_domain.repository_for(Order).get(task.order_id)
        assert order.status == OrderStatus.COMPLETED.value
        payout = current_domain.repository_for(VendorPayout)._dao.query.filter(order_id=task.order_id).all().first
        assert payout.released_at is not None

    def test_only_the_assigned_rider_progresses(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        make_rider("rider-2")
        _claim(task.id, "rider-1")
        with pytest.raises(UnauthorizedActor):
            _progress(task.id, "rider-2", TaskStatus.PICKED_UP)

    def test_riders_cannot_reset_a_task(self, open_task, make_rider):
        task = open_task()
        make_rider("rider-1")
        _claim(task.id, "rider-1")
        with pytest.raises(InvalidTransition):
            _progress(task.id, "rider-1", TaskStatus.PENDING)

    def test_cancelled_order_freezes_delivery(self, open_task, make_rider, admin):
        task = open_task()
        make_rider("rider-1")
        _claim(task.id, "rider-1")
        current_domain.process(
            CancelOrder(order_id=task.order_id, actor_role=ActorRole.ADMIN.value, actor_id=admin),
            asynchronous=False,
        )
        with pytest.raises(OrderAlreadyTerminal):
            _progress(task.id, "rider-1", TaskStatus.PICKED_UP)
        assert _task(task.id).status == TaskStatus.ASSIGNED.value
