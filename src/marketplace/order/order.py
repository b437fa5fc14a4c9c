"""Order aggregate (CQRS): one vendor's share of a checkout.

A checkout produces one Order per cart line. Orders sharing a
``payment_reference`` are settled by the same Payment.

State Machine:
    PENDING → PAID → ACCEPTED → CONFIRMED → COMPLETED
    ACCEPTED → COMPLETED
    {PENDING, PAID, ACCEPTED} → REJECTED
    {PENDING, PAID, ACCEPTED, CONFIRMED} → CANCELLED

REJECTED, CANCELLED and COMPLETED are terminal. Any attempt to leave them
raises ``OrderAlreadyTerminal``; any other illegal edge raises
``InvalidTransition``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace
from marketplace.errors import InvalidTransition, OrderAlreadyTerminal
from marketplace.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderCompleted,
    OrderConfirmed,
    OrderPaid,
    OrderPlaced,
    OrderRejected,
)
from marketplace.pricing.engine import CENT, money


class OrderStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    ACCEPTED = "Accepted"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class OrderType(Enum):
    MENU = "menu"
    SERVICE = "service"


class ActorRole(Enum):
    CUSTOMER = "Customer"
    VENDOR = "Vendor"
    RIDER = "Rider"
    ADMIN = "Admin"
    SYSTEM = "System"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.ACCEPTED, OrderStatus.REJECTED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {
        OrderStatus.CONFIRMED,
        OrderStatus.COMPLETED,
        OrderStatus.REJECTED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.REJECTED: set(),  # terminal
    OrderStatus.COMPLETED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
}

TERMINAL_STATUSES = {OrderStatus.REJECTED, OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Statuses a delivery task can be opened for
DISPATCHABLE_STATUSES = {OrderStatus.ACCEPTED, OrderStatus.CONFIRMED}


@marketplace.aggregate
class Order:
    vendor_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)
    delivery_fee = Float(default=0.0)
    vat_amount = Float(default=0.0)
    total_price = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_reference = String(required=True, max_length=100)
    delivery_zone = String(max_length=100)
    delivery_address = Text()
    order_type = String(choices=OrderType, default=OrderType.MENU.value)
    rejection_reason = String(max_length=500)
    cancellation_reason = String(max_length=500)
    cancelled_by = String(choices=ActorRole)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    completed_at = DateTime()

    @invariant.post
    def total_is_sum_of_parts(self):
        if self.total_price is None or self.subtotal is None:
            return
        parts = money(self.subtotal) + money(self.delivery_fee or 0) + money(self.vat_amount or 0)
        if abs(parts - money(self.total_price)) > CENT:
            raise ValidationError(
                {"total_price": [f"Total {self.total_price} does not equal subtotal + delivery fee + VAT ({parts:.2f})"]}
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        payment_reference,
        vendor_id,
        product_id,
        quantity,
        unit_price,
        subtotal,
        total_price,
        delivery_fee=0.0,
        vat_amount=0.0,
        delivery_zone=None,
        delivery_address=None,
        order_type=OrderType.MENU.value,
    ):
        """Create a Pending order for one cart line."""
        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            payment_reference=payment_reference,
            vendor_id=vendor_id,
            product_id=product_id,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            vat_amount=vat_amount,
            total_price=total_price,
            delivery_zone=delivery_zone,
            delivery_address=delivery_address,
            order_type=order_type,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                vendor_id=vendor_id,
                customer_id=user_id,
                product_id=product_id,
                quantity=quantity,
                total_price=total_price,
                payment_reference=payment_reference,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Transition helpers
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def _assert_can_transition(self, target: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise OrderAlreadyTerminal(
                {"status": [f"Order {self.id} is already {current.value}; cannot move to {target.value}"]}
            )
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def _move_to(self, target: OrderStatus) -> datetime:
        self._assert_can_transition(target)
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        return now

    def _common(self) -> dict:
        return {
            "order_id": str(self.id),
            "vendor_id": str(self.vendor_id),
            "customer_id": str(self.user_id),
            "payment_reference": self.payment_reference,
        }

    # -------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------
    def mark_paid(self) -> bool:
        """Move Pending → Paid. Returns False when the order is already past Pending."""
        current = OrderStatus(self.status)
        if current not in TERMINAL_STATUSES and current != OrderStatus.PENDING:
            return False

        now = self._move_to(OrderStatus.PAID)
        self.paid_at = now
        self.raise_(
            OrderPaid(
                **self._common(),
                product_id=str(self.product_id),
                quantity=self.quantity,
                total_price=self.total_price,
                paid_at=now,
            )
        )
        return True

    def accept(self) -> None:
        now = self._move_to(OrderStatus.ACCEPTED)
        self.raise_(OrderAccepted(**self._common(), accepted_at=now))

    def reject(self, reason: str | None = None) -> None:
        now = self._move_to(OrderStatus.REJECTED)
        self.rejection_reason = reason
        self.raise_(
            OrderRejected(
                **self._common(),
                total_price=self.total_price,
                reason=reason,
                rejected_at=now,
            )
        )

    def confirm(self) -> None:
        now = self._move_to(OrderStatus.CONFIRMED)
        self.raise_(OrderConfirmed(**self._common(), confirmed_at=now))

    def complete(self, via: str = "vendor") -> None:
        now = self._move_to(OrderStatus.COMPLETED)
        self.completed_at = now
        self.raise_(
            OrderCompleted(
                **self._common(),
                total_price=self.total_price,
                completed_via=via,
                completed_at=now,
            )
        )

    def cancel(self, reason: str | None = None, cancelled_by: str = ActorRole.SYSTEM.value) -> None:
        previous = self.status
        now = self._move_to(OrderStatus.CANCELLED)
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.raise_(
            OrderCancelled(
                **self._common(),
                total_price=self.total_price,
                previous_status=previous,
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    def transition_to(self, target: OrderStatus, reason: str | None = None) -> None:
        """Dispatch a vendor-requested target status to its transition method."""
        if target == OrderStatus.ACCEPTED:
            self.accept()
        elif target == OrderStatus.REJECTED:
            self.reject(reason)
        elif target == OrderStatus.CONFIRMED:
            self.confirm()
        elif target == OrderStatus.COMPLETED:
            self.complete(via="vendor")
        elif target == OrderStatus.CANCELLED:
            self.cancel(reason, cancelled_by=ActorRole.VENDOR.value)
        else:
            self._assert_can_transition(target)
            raise InvalidTransition({"status": [f"{target.value} cannot be set directly"]})
