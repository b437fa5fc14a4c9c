import json

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def gateway():
    from marketplace.payment.gateway import get_gateway

    return get_gateway()


@pytest.fixture()
def push_adapter():
    from marketplace.channel import get_channel
    from marketplace.notification.notification import NotificationChannel

    return get_channel(NotificationChannel.PUSH.value)


# ---------------------------------------------------------------------------
# Directory factories
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_vendor():
    from marketplace.directory.vendor import RegisterVendor

    def _make(vendor_id="ven-001", location="Yenagoa", business_name=None, address="12 Mbiama Road"):
        current_domain.process(
            RegisterVendor(
                vendor_id=vendor_id,
                business_name=business_name or f"Kitchen {vendor_id}",
                location=location,
                address=address,
            ),
            asynchronous=False,
        )
        return vendor_id

    return _make


@pytest.fixture()
def make_rider():
    from marketplace.directory.rider import RegisterRider, RiderApproval, SetRiderApproval

    def _make(rider_id="rider-001", location="Yenagoa", approved=True):
        current_domain.process(
            RegisterRider(rider_id=rider_id, name=f"Rider {rider_id}", location=location),
            asynchronous=False,
        )
        if approved:
            current_domain.process(
                SetRiderApproval(rider_id=rider_id, approval=RiderApproval.APPROVED.value),
                asynchronous=False,
            )
        return rider_id

    return _make


# ---------------------------------------------------------------------------
# Checkout factories
# ---------------------------------------------------------------------------
def cart_line(vendor_id="ven-001", product_id="jollof", quantity=1, unit_price=2500.0):
    return {"vendor_id": vendor_id, "product_id": product_id, "quantity": quantity, "unit_price": unit_price}


@pytest.fixture()
def checkout():
    """Open a pending payment; returns the handler's result dict."""
    from marketplace.payment.checkout import InitiateCheckout

    def _checkout(lines=None, zone="Amarata", user_id="cust-001", reference=None, address="5 Azikoro Road"):
        return current_domain.process(
            InitiateCheckout(
                user_id=user_id,
                zone_or_landmark=zone,
                cart_lines=json.dumps(lines or [cart_line()]),
                delivery_details=json.dumps({"address": address}),
                payment_reference=reference,
            ),
            asynchronous=False,
        )

    return _checkout


@pytest.fixture()
def paid_orders(checkout):
    """Check out and verify; returns the paid orders for the reference."""
    from marketplace.order.placement import orders_for_reference
    from marketplace.payment.verification import VerifyPayment

    def _paid(lines=None, **kwargs):
        result = checkout(lines=lines, **kwargs)
        current_domain.process(
            VerifyPayment(payment_reference=result["payment_reference"], verified=True),
            asynchronous=False,
        )
        return orders_for_reference(result["payment_reference"])

    return _paid


@pytest.fixture()
def accepted_order(make_vendor, paid_orders):
    """A single paid order, accepted by its vendor."""
    from marketplace.order.order import Order, OrderStatus
    from marketplace.order.status import SetOrderStatus

    def _accepted(vendor_id="ven-001", location="Yenagoa", user_id="cust-001"):
        make_vendor(vendor_id=vendor_id, location=location)
        (order,) = paid_orders(lines=[cart_line(vendor_id=vendor_id)], user_id=user_id)
        current_domain.process(
            SetOrderStatus(order_id=str(order.id), vendor_id=vendor_id, target=OrderStatus.ACCEPTED.value),
            asynchronous=False,
        )
        return current_domain.repository_for(Order).get(order.id)

    return _accepted


@pytest.fixture()
def open_task(accepted_order):
    """An accepted order with a Pending delivery task."""
    from marketplace.delivery.creation import CreateDeliveryTask
    from marketplace.delivery.delivery_task import DeliveryTask

    def _open(vendor_id="ven-001", location="Yenagoa", user_id="cust-001"):
        order = accepted_order(vendor_id=vendor_id, location=location, user_id=user_id)
        task_id = current_domain.process(
            CreateDeliveryTask(order_id=str(order.id), vendor_id=vendor_id),
            asynchronous=False,
        )
        return current_domain.repository_for(DeliveryTask).get(task_id)

    return _open
