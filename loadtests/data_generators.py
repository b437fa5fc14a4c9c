"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the engine's validation rules
(known landmarks and service locations, positive quantities) and match the
field names of the API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()

LANDMARKS = ["Azikoro", "Swali", "Ekeki", "Amarata", "Ovom", "Etegwe", "Tombia", "Okaki", "Igbogene"]
LOCATIONS = ["Yenagoa", "Amassoma", "Otuoke"]
DISHES = ["jollof", "fried-rice", "bole", "suya", "pepper-soup", "banga", "amala", "puff-puff"]


def unique_id(prefix: str) -> str:
    return f"{prefix}-lt-{uuid.uuid4().hex[:8]}"


def vendor_data(location: str | None = None) -> dict:
    return {
        "vendor_id": unique_id("ven"),
        "business_name": f"{fake.first_name()}'s Kitchen"[:200],
        "location": location or random.choice(LOCATIONS),
        "address": fake.street_address()[:500],
    }


def rider_data(location: str | None = None) -> dict:
    return {
        "rider_id": unique_id("rider"),
        "name": fake.name()[:200],
        "location": location or random.choice(LOCATIONS),
    }


def cart_lines(vendor_ids: list[str], max_lines_per_vendor: int = 2) -> list[dict]:
    lines = []
    for vendor_id in vendor_ids:
        for _ in range(random.randint(1, max_lines_per_vendor)):
            lines.append(
                {
                    "vendor_id": vendor_id,
                    "product_id": random.choice(DISHES),
                    "quantity": random.randint(1, 3),
                    "unit_price": float(random.choice([800, 1200, 1500, 2000, 2500, 3500])),
                }
            )
    return lines


def checkout_data(customer_id: str, vendor_ids: list[str]) -> dict:
    return {
        "user_id": customer_id,
        "zone_or_landmark": random.choice(LANDMARKS),
        "cart_lines": cart_lines(vendor_ids),
        "delivery_details": {"address": fake.street_address(), "phone": fake.msisdn()[:13]},
        "email": fake.email(),
    }
