"""Payment lookups by provider reference."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.payment.payment import Payment


def find_payment(payment_reference) -> Payment | None:
    repo = current_domain.repository_for(Payment)
    results = repo._dao.query.filter(payment_reference=payment_reference).all()
    return results.first if results.items else None


def get_payment(payment_reference) -> Payment:
    payment = find_payment(payment_reference)
    if payment is None:
        raise ObjectNotFoundError(f"Payment with reference {payment_reference} does not exist")
    return payment
