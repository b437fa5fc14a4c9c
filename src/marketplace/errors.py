"""Marketplace error kinds.

Every kind is a Protean ``ValidationError`` so command handlers and the API
layer treat them uniformly. Each carries the usual ``{field: [message]}``
mapping plus a stable ``kind`` string that the HTTP layer exposes.
"""

from protean.exceptions import ValidationError


class MarketplaceError(ValidationError):
    kind = "MarketplaceError"

    def __init__(self, messages, **kwargs):
        if isinstance(messages, str):
            messages = {"_entity": [messages]}
        super().__init__(messages, **kwargs)


class InvalidDeliveryZone(MarketplaceError):
    """The zone, landmark or state is not in the pricing reference tables."""

    kind = "InvalidDeliveryZone"


class EmptyCart(MarketplaceError):
    kind = "EmptyCart"


class InvalidTransition(MarketplaceError):
    """The requested status change is not an edge of the state machine."""

    kind = "InvalidTransition"


class OrderAlreadyTerminal(InvalidTransition):
    """The order is Rejected, Cancelled or Completed and is frozen."""

    kind = "OrderAlreadyTerminal"


class TaskAlreadyClaimed(MarketplaceError):
    """Another rider won the conditional claim on the delivery task."""

    kind = "TaskAlreadyClaimed"


class UnauthorizedActor(MarketplaceError):
    """The caller does not own the order, task or notification it targets."""

    kind = "UnauthorizedActor"


class RiderNotEligible(MarketplaceError):
    kind = "RiderNotEligible"


class DuplicatePayoutSuppressed(MarketplaceError):
    """A payout for the same key already exists. Never surfaced to callers."""

    kind = "DuplicatePayoutSuppressed"


class NotificationDeliveryFailed(MarketplaceError):
    """A channel adapter could not deliver. Never surfaced to callers."""

    kind = "NotificationDeliveryFailed"
