"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared
across users. State tracks ids returned by creation endpoints so follow-up
requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """One customer checkout, from quote to verified payment."""

    customer_id: str | None = None
    payment_reference: str | None = None
    total: float = 0.0
    order_ids: list[str] = field(default_factory=list)


@dataclass
class DispatchState:
    """One order moving from vendor acceptance to delivery."""

    vendor_id: str | None = None
    rider_id: str | None = None
    location: str = "Yenagoa"
    order_id: str | None = None
    task_id: str | None = None
    current_status: str = "Paid"
