"""Payment cancellation: abandon a checkout that never succeeded."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.payment.lookup import get_payment
from marketplace.payment.payment import Payment

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Payment")
class CancelPayment:
    payment_reference = String(required=True, max_length=100)


@marketplace.command_handler(part_of=Payment)
class CancelPaymentHandler:
    @handle(CancelPayment)
    def cancel_payment(self, command):
        payment = get_payment(command.payment_reference)
        payment.cancel()
        current_domain.repository_for(Payment).add(payment)
        logger.info("Payment cancelled", payment_reference=command.payment_reference)
