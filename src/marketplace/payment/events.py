"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Payment")
class PaymentInitiated:
    __version__ = 1

    payment_id = Identifier(required=True)
    payment_reference = String(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    order_count = Integer(required=True)
    initiated_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentSucceeded:
    """The payment provider verified the charge."""

    __version__ = 1

    payment_id = Identifier(required=True)
    payment_reference = String(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    verified_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    payment_reference = String(required=True)
    customer_id = Identifier(required=True)
    reason = String()
    failed_at = DateTime(required=True)


@marketplace.event(part_of="Payment")
class PaymentCancelled:
    __version__ = 1

    payment_id = Identifier(required=True)
    payment_reference = String(required=True)
    customer_id = Identifier(required=True)
    cancelled_at = DateTime(required=True)
