"""Mixed marketplace workload scenario.

Weights model a lunchtime rush: most traffic is checkout and payment,
with a steady stream of orders going out for delivery.
"""

from locust import HttpUser, between

from loadtests.scenarios.checkout import CheckoutJourney, WebhookJourney
from loadtests.scenarios.dispatch import DeliveryJourney


class MarketplaceUser(HttpUser):
    """Checkout (55%), webhook settlement (10%), full delivery (35%)."""

    tasks = {
        CheckoutJourney: 55,
        WebhookJourney: 10,
        DeliveryJourney: 35,
    }
    wait_time = between(0.5, 2)
