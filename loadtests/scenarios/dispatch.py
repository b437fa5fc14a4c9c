"""Delivery dispatch load test journeys.

DeliveryJourney walks one order from payment to delivery. RiderRushUser
has several riders race for the same task; exactly one claim should win
and the rest should get 409 TaskAlreadyClaimed.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, rider_data, unique_id, vendor_data
from loadtests.helpers.response import error_kind, extract_error_detail
from loadtests.helpers.state import DispatchState


class DeliveryJourney(SequentialTaskSet):
    """Register vendor & rider -> Checkout -> Verify -> Accept -> Task -> Claim -> Pickup -> Deliver."""

    riders_per_task = 1

    def on_start(self):
        self.state = DispatchState()
        self.rider_ids: list[str] = []

    def _post(self, path, payload, name, expected=200):
        with self.client.post(path, json=payload, catch_response=True, name=name) as resp:
            if resp.status_code != expected:
                resp.failure(f"{name} failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            return resp.json()

    def _put(self, path, payload, name):
        with self.client.put(path, json=payload, catch_response=True, name=name) as resp:
            if resp.status_code != 200:
                resp.failure(f"{name} failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
            return resp.json()

    @task
    def register(self):
        vendor = vendor_data(self.state.location)
        self.state.vendor_id = vendor["vendor_id"]
        self._post("/vendors", vendor, "POST /vendors", expected=201)
        for _ in range(self.riders_per_task):
            rider = rider_data(self.state.location)
            self._post("/riders", rider, "POST /riders", expected=201)
            self._put(f"/riders/{rider['rider_id']}/approval", {"approval": "Approved"}, "PUT /riders/[id]/approval")
            self.rider_ids.append(rider["rider_id"])

    @task
    def pay(self):
        checkout = checkout_data(unique_id("cust"), [self.state.vendor_id])
        checkout["cart_lines"] = checkout["cart_lines"][:1]
        body = self._post("/checkout", checkout, "POST /checkout", expected=201)
        self._post(f"/payments/{body['payment_reference']}/verify", None, "POST /payments/[ref]/verify")
        orders = self.client.get(f"/notifications/{self.state.vendor_id}/unread", name="GET /notifications/[id]/unread")
        for notification in orders.json()["notifications"]:
            if notification["notification_type"] == "new_order":
                self.state.order_id = notification["payload"]["order_id"]
        if self.state.order_id is None:
            self.interrupt()

    @task
    def accept(self):
        self._put(
            f"/orders/{self.state.order_id}/status",
            {"vendor_id": self.state.vendor_id, "status": "Accepted"},
            "PUT /orders/[id]/status",
        )
        body = self._post(
            "/delivery-tasks",
            {"order_id": self.state.order_id, "vendor_id": self.state.vendor_id},
            "POST /delivery-tasks",
            expected=201,
        )
        self.state.task_id = body["task_id"]

    @task
    def claim(self):
        for rider_id in self.rider_ids:
            with self.client.post(
                f"/delivery-tasks/{self.state.task_id}/claim",
                json={"rider_id": rider_id},
                catch_response=True,
                name="POST /delivery-tasks/[id]/claim",
            ) as resp:
                if resp.status_code == 200:
                    self.state.rider_id = rider_id
                elif resp.status_code == 409 and error_kind(resp) == "TaskAlreadyClaimed":
                    resp.success()
                else:
                    resp.failure(f"Claim failed: {resp.status_code} {extract_error_detail(resp)}")
        if self.state.rider_id is None:
            self.interrupt()

    @task
    def deliver(self):
        for status in ("PickedUp", "Delivered"):
            self._put(
                f"/delivery-tasks/{self.state.task_id}/status",
                {"rider_id": self.state.rider_id, "status": status},
                "PUT /delivery-tasks/[id]/status",
            )
        self.state.current_status = "Delivered"

    @task
    def done(self):
        self.interrupt()


class ContendedDeliveryJourney(DeliveryJourney):
    riders_per_task = 5


class RiderRushUser(HttpUser):
    """Five riders race for every task."""

    tasks = [ContendedDeliveryJourney]
    wait_time = between(0.1, 0.5)
