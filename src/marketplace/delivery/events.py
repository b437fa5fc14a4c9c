"""Domain events for the DeliveryTask aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="DeliveryTask")
class DeliveryTaskCreated:
    """A vendor opened a delivery task; riders in its zone may now claim it."""

    __version__ = 1

    task_id = Identifier(required=True)
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier()
    vendor_location = String(required=True)
    payment_reference = String()
    created_at = DateTime(required=True)


@marketplace.event(part_of="DeliveryTask")
class DeliveryTaskAssigned:
    __version__ = 1

    task_id = Identifier(required=True)
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier()
    rider_id = Identifier(required=True)
    payment_reference = String()
    pickup_sequence = Integer()
    stop_count = Integer(default=1)
    assigned_at = DateTime(required=True)


@marketplace.event(part_of="DeliveryTask")
class DeliveryTaskPickedUp:
    __version__ = 1

    task_id = Identifier(required=True)
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier()
    rider_id = Identifier(required=True)
    picked_up_at = DateTime(required=True)


@marketplace.event(part_of="DeliveryTask")
class DeliveryTaskDelivered:
    __version__ = 1

    task_id = Identifier(required=True)
    order_id = Identifier(required=True)
    vendor_id = Identifier(required=True)
    customer_id = Identifier()
    rider_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
