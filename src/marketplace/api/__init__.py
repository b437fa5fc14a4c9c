"""Marketplace API package."""

from marketplace.api.errors import register_marketplace_exception_handlers
from marketplace.api.routes import (
    ALL_ROUTERS,
    checkout_router,
    delivery_router,
    notification_router,
    order_router,
    payment_router,
    payout_router,
    pricing_router,
    rider_router,
    vendor_router,
)

__all__ = [
    "ALL_ROUTERS",
    "checkout_router",
    "delivery_router",
    "notification_router",
    "order_router",
    "payment_router",
    "payout_router",
    "pricing_router",
    "register_marketplace_exception_handlers",
    "rider_router",
    "vendor_router",
]
