"""Signed provider webhooks are the push path from Pending to Paid."""

import json
from unittest.mock import MagicMock

import pytest
from protean import current_domain

from marketplace.order.order import Order, OrderStatus
from marketplace.payment.gateway import set_gateway
from marketplace.payment.gateway.paystack_adapter import PaystackGateway, webhook_signature
from marketplace.payment.lookup import get_payment

SECRET = "sk_test_marketplace"


@pytest.fixture()
def paystack():
    gateway = PaystackGateway(SECRET)
    gateway.session = MagicMock()
    gateway.session.post.return_value.ok = True
    gateway.session.post.return_value.json.return_value = {
        "status": True,
        "data": {"authorization_url": "https://checkout.paystack.test/abc", "access_code": "abc"},
    }
    set_gateway(gateway)
    return gateway


def _checkout(client):
    response = client.post(
        "/checkout",
        json={
            "user_id": "cust-hook-1",
            "zone_or_landmark": "Amarata",
            "cart_lines": [{"vendor_id": "ven-hook-1", "product_id": "jollof", "quantity": 1, "unit_price": 2500}],
        },
    )
    assert response.status_code == 201
    return response.json()["payment_reference"]


def _deliver(client, event, signature: str | None = None, secret: str = SECRET):
    raw = json.dumps(event).encode()
    headers = {"Content-Type": "application/json"}
    if signature is None:
        signature = webhook_signature(secret, raw)
    if signature:
        headers["x-paystack-signature"] = signature
    return client.post("/payments/webhook", content=raw, headers=headers)


def _orders(reference):
    return current_domain.repository_for(Order)._dao.query.filter(payment_reference=reference).all().items


def test_signed_charge_success_settles_the_payment(client, paystack):
    reference = _checkout(client)

    response = _deliver(client, {"event": "charge.success", "data": {"reference": reference}})

    assert response.status_code == 200
    assert response.json() == {"status": "processed"}
    assert get_payment(reference).status == "success"
    assert [o.status for o in _orders(reference)] == [OrderStatus.PAID.value]


def test_redelivered_webhook_is_harmless(client, paystack):
    reference = _checkout(client)
    event = {"event": "charge.success", "data": {"reference": reference}}

    _deliver(client, event)
    _deliver(client, event)

    assert len(_orders(reference)) == 1


def test_missing_signature_is_rejected(client, paystack):
    reference = _checkout(client)

    response = _deliver(client, {"event": "charge.success", "data": {"reference": reference}}, signature="")

    assert response.status_code == 401
    assert get_payment(reference).status == "pending"


def test_signature_with_the_wrong_key_is_rejected(client, paystack):
    reference = _checkout(client)

    response = _deliver(
        client,
        {"event": "charge.success", "data": {"reference": reference}},
        secret="sk_test_someone_else",
    )

    assert response.status_code == 401
    assert _orders(reference) == []


def test_tampered_body_is_rejected(client, paystack):
    reference = _checkout(client)
    original = json.dumps({"event": "charge.failed", "data": {"reference": reference}}).encode()
    forged = json.dumps({"event": "charge.success", "data": {"reference": reference}}).encode()

    response = client.post(
        "/payments/webhook",
        content=forged,
        headers={"Content-Type": "application/json", "x-paystack-signature": webhook_signature(SECRET, original)},
    )

    assert response.status_code == 401
    assert get_payment(reference).status == "pending"


@pytest.mark.parametrize(
    "event",
    [
        {"event": "charge.failed", "data": {"reference": "PAY-any"}},
        {"event": "transfer.success", "data": {"reference": "PAY-any"}},
        {"event": "charge.success", "data": {}},
        ["not", "an", "object"],
    ],
)
def test_other_events_are_acknowledged_and_ignored(client, paystack, event):
    response = _deliver(client, event)
    assert response.status_code == 200
    assert response.json() == {"status": "ignored"}


def test_unparseable_body_is_bad_request(client, paystack):
    raw = b"not json"
    response = client.post(
        "/payments/webhook",
        content=raw,
        headers={"x-paystack-signature": webhook_signature(SECRET, raw)},
    )
    assert response.status_code == 400


def test_fake_gateway_accepts_only_its_test_signature(client, gateway):
    reference = _checkout(client)
    event = {"event": "charge.success", "data": {"reference": reference}}

    assert _deliver(client, event, signature="forged").status_code == 401
    assert _deliver(client, event, signature="test-signature").json() == {"status": "processed"}
