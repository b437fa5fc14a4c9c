"""Order creation boundary: one Pending order per cart line.

Orders placed here come with a pending Payment under the same reference,
unless checkout already opened one, so verification can settle them.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import EmptyCart
from marketplace.order.order import Order, OrderType
from marketplace.payment.lookup import find_payment
from marketplace.payment.payment import Payment
from marketplace.pricing.engine import CENT, CartLine, allocate, money, quote

logger = structlog.get_logger(__name__)


def orders_for_reference(payment_reference) -> list[Order]:
    """All orders settled by ``payment_reference``, oldest first."""
    repo = current_domain.repository_for(Order)
    return repo._dao.query.filter(payment_reference=payment_reference).order_by("created_at").all().items


def intents_without_pricing(lines: list[CartLine]) -> list[dict]:
    return [
        {
            "vendor_id": line.vendor_id,
            "product_id": line.product_id,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "subtotal": float(line.line_total),
            "delivery_fee": 0.0,
            "vat_amount": 0.0,
            "total_price": float(line.line_total),
            "delivery_zone": None,
        }
        for line in lines
    ]


def build_orders(user_id, payment_reference, intents, order_type=OrderType.MENU.value, delivery_address=None):
    """Instantiate one Pending ``Order`` per order intent.

    Intents missing a vendor, customer or product are skipped.
    """
    orders = []
    for intent in intents:
        if not (intent.get("vendor_id") and user_id and intent.get("product_id")):
            logger.warning(
                "Skipping order intent with missing identifiers",
                payment_reference=payment_reference,
                intent=intent,
            )
            continue
        orders.append(
            Order.place(
                user_id=user_id,
                payment_reference=payment_reference,
                vendor_id=intent["vendor_id"],
                product_id=intent["product_id"],
                quantity=intent["quantity"],
                unit_price=intent.get("unit_price"),
                subtotal=intent["subtotal"],
                delivery_fee=intent.get("delivery_fee") or 0.0,
                vat_amount=intent.get("vat_amount") or 0.0,
                total_price=intent["total_price"],
                delivery_zone=intent.get("delivery_zone"),
                delivery_address=delivery_address,
                order_type=order_type or OrderType.MENU.value,
            )
        )
    return orders


@marketplace.command(part_of="Order")
class PlaceOrders:
    """Create Pending orders for a priced cart under one payment reference."""

    user_id = Identifier(required=True)
    payment_reference = String(required=True, max_length=100)
    lines = Text(required=True)  # JSON list of {vendor_id, product_id, quantity, unit_price}
    delivery_zone = String(max_length=100)
    delivery_address = Text()
    order_type = String(choices=OrderType, default=OrderType.MENU.value)
    total = Float()


@marketplace.command_handler(part_of=Order)
class PlaceOrdersHandler:
    @handle(PlaceOrders)
    def place_orders(self, command):
        if orders_for_reference(command.payment_reference):
            raise ValidationError(
                {"payment_reference": [f"Orders already exist for payment {command.payment_reference}"]}
            )

        raw_lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        if command.delivery_zone:
            intents = [intent.to_dict() for intent in allocate(quote(raw_lines, command.delivery_zone))]
        else:
            lines = [CartLine.coerce(raw) for raw in raw_lines]
            intents = intents_without_pricing([line for line in lines if line.quantity > 0])
            if not intents:
                raise EmptyCart({"lines": ["Cart has no items with a positive quantity"]})

        expected = round(sum(intent["total_price"] for intent in intents), 2)
        if command.total is not None and abs(money(expected) - money(command.total)) > CENT:
            raise ValidationError({"total": [f"Total {command.total} does not match priced lines ({expected})"]})

        orders = build_orders(
            command.user_id,
            command.payment_reference,
            intents,
            order_type=command.order_type,
            delivery_address=command.delivery_address,
        )
        if not orders:
            raise ValidationError({"lines": ["No valid order lines"]})

        repo = current_domain.repository_for(Order)
        for order in orders:
            repo.add(order)

        if find_payment(command.payment_reference) is None:
            current_domain.repository_for(Payment).add(
                Payment.for_orders(
                    command.user_id,
                    command.payment_reference,
                    intents,
                    delivery_address=command.delivery_address,
                    order_type=command.order_type,
                )
            )

        logger.info(
            "Orders placed",
            payment_reference=command.payment_reference,
            count=len(orders),
            total=expected,
        )
        return [str(order.id) for order in orders]
