"""Rider profile: location, approval and availability used for dispatch.

A rider can claim a delivery only while Approved and only in their own
location. Availability is a softer signal: it decides who gets told about a
new task, not who may claim it.
"""

from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.directory.locations import ServiceLocation, normalize_location, same_location
from marketplace.domain import marketplace
from marketplace.errors import RiderNotEligible

logger = structlog.get_logger(__name__)


class RiderApproval(Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    SUSPENDED = "Suspended"


@marketplace.aggregate
class RiderProfile:
    rider_id = Identifier(required=True, unique=True)
    name = String(required=True, max_length=200)
    location = String(required=True, choices=ServiceLocation)
    approval = String(choices=RiderApproval, default=RiderApproval.PENDING.value)
    is_available = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, rider_id, name, location):
        now = datetime.now(UTC)
        return cls(
            rider_id=rider_id,
            name=name,
            location=normalize_location(location),
            approval=RiderApproval.PENDING.value,
            is_available=True,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_approved(self) -> bool:
        return self.approval == RiderApproval.APPROVED.value

    def set_approval(self, approval: RiderApproval) -> None:
        self.approval = approval.value
        self.updated_at = datetime.now(UTC)

    def set_available(self, available: bool) -> None:
        self.is_available = available
        self.updated_at = datetime.now(UTC)

    def assert_can_serve(self, vendor_location) -> None:
        """Raise RiderNotEligible unless this rider may claim work at ``vendor_location``."""
        if not self.is_approved:
            raise RiderNotEligible({"rider_id": [f"Rider {self.rider_id} is not approved"]})
        if not same_location(self.location, vendor_location):
            raise RiderNotEligible({"rider_id": ["This delivery is assigned to a different zone"]})


def find_rider(rider_id):
    repo = current_domain.repository_for(RiderProfile)
    results = repo._dao.query.filter(rider_id=str(rider_id)).all()
    return results.first if results.items else None


def get_rider(rider_id) -> RiderProfile:
    rider = find_rider(rider_id)
    if rider is None:
        raise RiderNotEligible({"rider_id": [f"Rider {rider_id} not found or not approved"]})
    return rider


def riders_in_zone(location, available_only: bool = True) -> list[RiderProfile]:
    """Approved riders whose location matches ``location``."""
    repo = current_domain.repository_for(RiderProfile)
    riders = repo._dao.query.filter(approval=RiderApproval.APPROVED.value).all().items
    return [
        rider
        for rider in riders
        if same_location(rider.location, location) and (rider.is_available or not available_only)
    ]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@marketplace.command(part_of=RiderProfile)
class RegisterRider:
    rider_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    location = String(required=True, max_length=50)


@marketplace.command(part_of=RiderProfile)
class SetRiderApproval:
    rider_id = Identifier(required=True)
    approval = String(required=True, choices=RiderApproval)


@marketplace.command(part_of=RiderProfile)
class SetRiderAvailability:
    rider_id = Identifier(required=True)
    is_available = Boolean(required=True)


@marketplace.command_handler(part_of=RiderProfile)
class RiderProfileHandler:
    @handle(RegisterRider)
    def register_rider(self, command):
        if find_rider(command.rider_id) is not None:
            raise ValidationError({"rider_id": [f"Rider {command.rider_id} is already registered"]})
        rider = RiderProfile.register(command.rider_id, command.name, command.location)
        current_domain.repository_for(RiderProfile).add(rider)
        logger.info("Rider registered", rider_id=command.rider_id, location=rider.location)
        return str(rider.id)

    @handle(SetRiderApproval)
    def set_rider_approval(self, command):
        rider = self._load(command.rider_id)
        rider.set_approval(RiderApproval(command.approval))
        current_domain.repository_for(RiderProfile).add(rider)
        logger.info("Rider approval changed", rider_id=command.rider_id, approval=command.approval)

    @handle(SetRiderAvailability)
    def set_rider_availability(self, command):
        rider = self._load(command.rider_id)
        rider.set_available(command.is_available)
        current_domain.repository_for(RiderProfile).add(rider)

    @staticmethod
    def _load(rider_id):
        rider = find_rider(rider_id)
        if rider is None:
            raise ObjectNotFoundError(f"Rider {rider_id} is not registered")
        return rider
