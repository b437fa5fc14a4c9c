"""BDD tests for delivery claims."""

from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from marketplace.delivery.claim import ClaimDeliveryTask
from marketplace.delivery.delivery_task import DeliveryTask, TaskStatus
from marketplace.delivery.status import SetTaskStatus
from marketplace.order.order import Order
from marketplace.payout.vendor_payout import VendorPayout

scenarios("features/delivery_claim.feature")


def _reload(task):
    return current_domain.repository_for(DeliveryTask).get(task.id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('an accepted order from a vendor in "{location}" with a delivery task'),
    target_fixture="task",
)
def task_in_location(open_task, location):
    return open_task(location=location)


@given(parsers.cfparse('an approved rider "{rider_id}" in "{location}"'))
def approved_rider(make_rider, rider_id, location):
    make_rider(rider_id, location=location)


@given(parsers.cfparse('a pending rider "{rider_id}" in "{location}"'))
def pending_rider(make_rider, rider_id, location):
    make_rider(rider_id, location=location, approved=False)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{rider_id}" claims the task'))
def rider_claims(task, rider_id, error):
    try:
        current_domain.process(ClaimDeliveryTask(task_id=str(task.id), rider_id=rider_id), asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('"{rider_id}" marks the task "{status}"'))
def rider_marks(task, rider_id, status):
    current_domain.process(
        SetTaskStatus(task_id=str(task.id), rider_id=rider_id, target=status),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the task is "{status}" to "{rider_id}"'))
def task_assigned_to(task, status, rider_id):
    current = _reload(task)
    assert current.status == status
    assert current.rider_id == rider_id


@then("the task is still open")
def task_still_open(task):
    current = _reload(task)
    assert current.status == TaskStatus.PENDING.value
    assert current.rider_id is None


@then(parsers.cfparse('the order is "{status}"'))
def order_status_is(task, status):
    assert current_domain.repository_for(Order).get(task.order_id).status == status


@then("the vendor payout is released")
def payout_released(task):
    payout = current_domain.repository_for(VendorPayout)._dao.query.filter(order_id=task.order_id).all().first
    assert payout.released_at is not None
