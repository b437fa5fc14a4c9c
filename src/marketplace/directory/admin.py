"""Platform administrators.

The first administrator is created by an explicit one-time bootstrap step
(``manage.py bootstrap-admin``), never by a runtime "is this the first
user?" check. Further admins are granted by an existing admin.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import UnauthorizedActor

logger = structlog.get_logger(__name__)


@marketplace.aggregate
class PlatformAdmin:
    admin_id = Identifier(required=True, unique=True)
    granted_by = Identifier()
    granted_at = DateTime()


def admin_ids() -> list[str]:
    repo = current_domain.repository_for(PlatformAdmin)
    return [str(admin.admin_id) for admin in repo._dao.query.all().items]


def is_admin(user_id) -> bool:
    repo = current_domain.repository_for(PlatformAdmin)
    return bool(repo._dao.query.filter(admin_id=str(user_id)).all().items)


def bootstrap_admin(admin_id: str) -> PlatformAdmin:
    """Create the very first administrator.

    Raises:
        InvalidOperationError: An administrator already exists.
    """
    repo = current_domain.repository_for(PlatformAdmin)
    if repo._dao.query.all().total > 0:
        raise InvalidOperationError("Platform already has an administrator; bootstrap is a one-time step")

    admin = PlatformAdmin(admin_id=admin_id, granted_at=datetime.now(UTC))
    repo.add(admin)
    logger.info("Platform bootstrapped with first admin", admin_id=admin_id)
    return admin


@marketplace.command(part_of=PlatformAdmin)
class GrantAdmin:
    admin_id = Identifier(required=True)
    granted_by = Identifier(required=True)


@marketplace.command_handler(part_of=PlatformAdmin)
class PlatformAdminHandler:
    @handle(GrantAdmin)
    def grant_admin(self, command):
        if not is_admin(command.granted_by):
            raise UnauthorizedActor({"granted_by": ["Only an administrator can grant admin rights"]})
        if is_admin(command.admin_id):
            return None
        admin = PlatformAdmin(
            admin_id=command.admin_id,
            granted_by=command.granted_by,
            granted_at=datetime.now(UTC),
        )
        current_domain.repository_for(PlatformAdmin).add(admin)
        logger.info("Admin granted", admin_id=command.admin_id, granted_by=command.granted_by)
        return str(admin.id)
