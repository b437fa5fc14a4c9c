"""Checkout and payment load test journeys.

Stateful SequentialTaskSet journeys: a checkout settled by polling the
verify endpoint, and one settled by the provider webhook. Both assume the
server runs the fake payment gateway.
"""

import json
import random

from locust import SequentialTaskSet, task

from loadtests.data_generators import checkout_data, unique_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState

# Signature the fake gateway accepts on webhooks
FAKE_WEBHOOK_SIGNATURE = "test-signature"


class _CheckoutBase(SequentialTaskSet):
    def on_start(self):
        self.state = CheckoutState(customer_id=unique_id("cust"))

    def _checkout(self):
        vendor_ids = [unique_id("ven") for _ in range(random.randint(1, 3))]
        with self.client.post(
            "/checkout",
            json=checkout_data(self.state.customer_id, vendor_ids),
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.payment_reference = body["payment_reference"]
                self.state.total = body["total"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    def _webhook(self, event: str, signature: str, name: str):
        body = json.dumps({"event": event, "data": {"reference": self.state.payment_reference}})
        return self.client.post(
            "/payments/webhook",
            data=body,
            headers={"Content-Type": "application/json", "x-paystack-signature": signature},
            catch_response=True,
            name=name,
        )


class CheckoutJourney(_CheckoutBase):
    """Quote -> Checkout -> Verify -> Re-verify (idempotent)."""

    @task
    def quote(self):
        body = checkout_data(self.state.customer_id, [unique_id("ven")])
        with self.client.post(
            "/pricing/quote",
            json={"zone_or_landmark": body["zone_or_landmark"], "cart_lines": body["cart_lines"]},
            catch_response=True,
            name="POST /pricing/quote",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Quote failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def checkout(self):
        self._checkout()

    @task
    def verify(self):
        with self.client.post(
            f"/payments/{self.state.payment_reference}/verify",
            catch_response=True,
            name="POST /payments/[ref]/verify",
        ) as resp:
            if resp.status_code != 200 or resp.json()["status"] != "success":
                resp.failure(f"Verify failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def verify_again(self):
        with self.client.post(
            f"/payments/{self.state.payment_reference}/verify",
            catch_response=True,
            name="POST /payments/[ref]/verify (repeat)",
        ) as resp:
            if resp.status_code != 200 or resp.json()["processed"]:
                resp.failure("Repeated verification was processed twice")

    @task
    def done(self):
        self.interrupt()


class WebhookJourney(_CheckoutBase):
    """Checkout -> forged webhook (401) -> signed webhook -> redelivery."""

    @task
    def checkout(self):
        self._checkout()

    @task
    def forged_webhook(self):
        with self._webhook("charge.success", "forged", "POST /payments/webhook (forged)") as resp:
            if resp.status_code == 401:
                resp.success()
            else:
                resp.failure(f"Forged webhook was accepted: {resp.status_code}")

    @task
    def signed_webhook(self):
        with self._webhook("charge.success", FAKE_WEBHOOK_SIGNATURE, "POST /payments/webhook") as resp:
            if resp.status_code != 200 or resp.json()["status"] != "processed":
                resp.failure(f"Webhook failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def redelivered_webhook(self):
        with self._webhook("charge.success", FAKE_WEBHOOK_SIGNATURE, "POST /payments/webhook (repeat)") as resp:
            if resp.status_code != 200:
                resp.failure(f"Redelivered webhook failed: {resp.status_code}")

    @task
    def done(self):
        self.interrupt()
