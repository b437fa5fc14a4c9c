"""Marketplace bounded context: order, payment and delivery orchestration.

Connects customers, vendors and delivery riders. Prices carts, drives orders
through the payment, vendor-acceptance and delivery state machines, matches
pending deliveries to riders in the vendor's zone, computes vendor and rider
payouts, and fans out notifications for every committed transition.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
