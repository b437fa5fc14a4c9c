"""Payment verification: the only path from Pending to Paid.

Triggered by the provider webhook or by polling. A successful verification
runs as one unit of work:

1. Payment → success
2. Orders materialized from ``pending_orders`` (unless they already exist)
   and moved Pending → Paid
3. One VendorPayout recorded per order

Repeated deliveries of the same verification are no-ops: the payment is
already successful, so nothing is re-materialized or re-paid.
"""

import structlog
from protean import handle
from protean.fields import Boolean, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.order.placement import build_orders, orders_for_reference
from marketplace.payment.gateway import get_gateway
from marketplace.payment.lookup import get_payment
from marketplace.payment.payment import Payment
from marketplace.payout.ledger import record_vendor_payouts

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Payment")
class VerifyPayment:
    payment_reference = String(required=True, max_length=100)
    verified = Boolean()  # None: ask the configured gateway
    failure_reason = String(max_length=500)


def settle_orders(payment: Payment) -> list[Order]:
    """Materialize (if needed) and mark Paid every order under ``payment``.

    Returns the orders that are payable, i.e. not Rejected or Cancelled.
    """
    repo = current_domain.repository_for(Order)
    orders = orders_for_reference(payment.payment_reference)
    if orders:
        logger.info(
            "Orders already exist for payment; skipping materialization",
            payment_reference=payment.payment_reference,
            count=len(orders),
        )
    else:
        orders = build_orders(
            str(payment.user_id),
            payment.payment_reference,
            payment.order_intents(),
            order_type=payment.order_type,
            delivery_address=payment.delivery_address(),
        )

    payable = []
    for order in orders:
        if order.is_terminal:
            logger.warning(
                "Order is terminal; not marking paid",
                order_id=str(order.id),
                status=order.status,
            )
            continue
        order.mark_paid()
        repo.add(order)
        payable.append(order)
    return payable


@marketplace.command_handler(part_of=Payment)
class VerifyPaymentHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command):
        payment = get_payment(command.payment_reference)
        if payment.is_successful:
            logger.info("Payment already verified; ignoring", payment_reference=command.payment_reference)
            return {"status": payment.status, "processed": False, "orders": 0, "payouts": 0}

        verified, reason = command.verified, command.failure_reason
        if verified is None:
            result = get_gateway().verify_transaction(command.payment_reference)
            verified, reason = result.verified, result.failure_reason

        repo = current_domain.repository_for(Payment)
        if not verified:
            changed = payment.mark_failed(reason)
            if changed:
                repo.add(payment)
            logger.info(
                "Payment verification failed",
                payment_reference=command.payment_reference,
                reason=reason,
                changed=changed,
            )
            return {"status": payment.status, "processed": changed, "orders": 0, "payouts": 0}

        payment.mark_success()
        repo.add(payment)

        orders = settle_orders(payment)
        payouts = record_vendor_payouts(payment.id, orders)

        logger.info(
            "Payment verified",
            payment_reference=command.payment_reference,
            orders=len(orders),
            payouts=len(payouts["created"]),
        )
        return {
            "status": payment.status,
            "processed": True,
            "orders": len(orders),
            "payouts": len(payouts["created"]),
        }
