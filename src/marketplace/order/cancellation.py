"""Order cancellation by the customer, an admin or the expiry scheduler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.directory.admin import is_admin
from marketplace.domain import marketplace
from marketplace.errors import UnauthorizedActor
from marketplace.order.order import ActorRole, Order

logger = structlog.get_logger(__name__)

_CANCELLING_ROLES = {ActorRole.CUSTOMER, ActorRole.ADMIN, ActorRole.SYSTEM}


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_role = String(required=True, choices=ActorRole)
    actor_id = Identifier()  # Not needed for System
    reason = String(max_length=500)


def _authorize(order: Order, role: ActorRole, actor_id) -> None:
    if role not in _CANCELLING_ROLES:
        raise UnauthorizedActor({"actor_role": [f"{role.value} cannot cancel orders through this action"]})
    if role == ActorRole.CUSTOMER and str(order.user_id) != str(actor_id):
        raise UnauthorizedActor({"actor_id": ["Customers can only cancel their own orders"]})
    if role == ActorRole.ADMIN and not is_admin(actor_id):
        raise UnauthorizedActor({"actor_id": ["Only administrators can cancel on behalf of others"]})


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        role = ActorRole(command.actor_role)
        _authorize(order, role, command.actor_id)

        order.cancel(reason=command.reason, cancelled_by=role.value)
        repo.add(order)
        logger.info(
            "Order cancelled",
            order_id=command.order_id,
            cancelled_by=role.value,
            reason=command.reason,
        )
