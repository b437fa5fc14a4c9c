"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """An order row was created in Pending for one cart line."""

    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    total_price = Float(required=True)
    payment_reference = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderPaid:
    """Payment verification moved the order from Pending to Paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier()
    quantity = Integer()
    total_price = Float(required=True)
    payment_reference = String(required=True)
    paid_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderAccepted:
    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_reference = String()
    accepted_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRejected:
    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_reference = String()
    total_price = Float()
    reason = String()
    rejected_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderConfirmed:
    """The vendor confirmed the order is ready (prepared or packed)."""

    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_reference = String()
    confirmed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_reference = String()
    total_price = Float()
    completed_via = String()  # "delivery" or "vendor"
    completed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    payment_reference = String()
    total_price = Float()
    previous_status = String(required=True)
    reason = String()
    cancelled_by = String()  # Customer, Vendor, Admin or System
    cancelled_at = DateTime(required=True)
