"""Checkout: price a cart and open a pending payment for it."""

import json
from uuid import uuid4

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import OrderType
from marketplace.payment.gateway import get_gateway
from marketplace.payment.lookup import find_payment
from marketplace.payment.payment import Payment
from marketplace.pricing.engine import allocate, quote

logger = structlog.get_logger(__name__)


def new_payment_reference() -> str:
    return f"MKT-{uuid4().hex[:16].upper()}"


@marketplace.command(part_of="Payment")
class InitiateCheckout:
    user_id = Identifier(required=True)
    zone_or_landmark = String(required=True, max_length=100)
    cart_lines = Text(required=True)  # JSON list of {vendor_id, product_id, quantity, unit_price}
    delivery_details = Text()  # JSON object: address, phone, ...
    vendor_count = Integer(min_value=1)
    payment_reference = String(max_length=100)
    order_type = String(choices=OrderType, default=OrderType.MENU.value)
    email = String(max_length=254)


@marketplace.command_handler(part_of=Payment)
class CheckoutHandler:
    @handle(InitiateCheckout)
    def initiate_checkout(self, command):
        cart_lines = json.loads(command.cart_lines) if isinstance(command.cart_lines, str) else command.cart_lines
        delivery_details = json.loads(command.delivery_details) if command.delivery_details else {}

        price_quote = quote(cart_lines, command.zone_or_landmark, vendor_count=command.vendor_count)
        intents = allocate(price_quote)

        reference = command.payment_reference or new_payment_reference()
        if find_payment(reference) is not None:
            raise ValidationError({"payment_reference": [f"Payment reference {reference} is already in use"]})

        payment = Payment.initiate(
            user_id=command.user_id,
            payment_reference=reference,
            price_quote=price_quote,
            intents=intents,
            delivery_details=delivery_details,
            order_type=command.order_type,
        )
        current_domain.repository_for(Payment).add(payment)

        init = get_gateway().initialize_transaction(reference, price_quote.total, email=command.email)
        if not init.success:
            logger.warning("Gateway checkout could not be opened", reference=reference, reason=init.failure_reason)

        logger.info(
            "Checkout initiated",
            payment_reference=reference,
            customer_id=command.user_id,
            total=price_quote.total,
            orders=len(intents),
        )
        return {
            "payment_id": str(payment.id),
            "payment_reference": reference,
            "authorization_url": init.authorization_url,
            **price_quote.as_dict(),
        }
