"""Vendor profile: the slice of vendor data the engine relies on.

Registration and profile editing live outside the engine. What matters here is
the vendor's service location, which is copied onto each delivery task when
the task is created.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from marketplace.directory.locations import ServiceLocation, normalize_location
from marketplace.domain import marketplace

logger = structlog.get_logger(__name__)


@marketplace.aggregate
class VendorProfile:
    vendor_id = Identifier(required=True, unique=True)
    business_name = String(required=True, max_length=200)
    location = String(required=True, choices=ServiceLocation)
    address = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, vendor_id, business_name, location, address=None):
        now = datetime.now(UTC)
        return cls(
            vendor_id=vendor_id,
            business_name=business_name,
            location=normalize_location(location),
            address=address,
            created_at=now,
            updated_at=now,
        )

    def relocate(self, location, address=None):
        self.location = normalize_location(location)
        if address is not None:
            self.address = address
        self.updated_at = datetime.now(UTC)


def find_vendor(vendor_id):
    """Return the vendor profile for ``vendor_id`` or None."""
    repo = current_domain.repository_for(VendorProfile)
    results = repo._dao.query.filter(vendor_id=str(vendor_id)).all()
    return results.first if results.items else None


@marketplace.command(part_of=VendorProfile)
class RegisterVendor:
    vendor_id = Identifier(required=True)
    business_name = String(required=True, max_length=200)
    location = String(required=True, max_length=50)
    address = String(max_length=500)


@marketplace.command(part_of=VendorProfile)
class RelocateVendor:
    vendor_id = Identifier(required=True)
    location = String(required=True, max_length=50)
    address = String(max_length=500)


@marketplace.command_handler(part_of=VendorProfile)
class VendorProfileHandler:
    @handle(RegisterVendor)
    def register_vendor(self, command):
        if find_vendor(command.vendor_id) is not None:
            raise ValidationError({"vendor_id": [f"Vendor {command.vendor_id} is already registered"]})
        vendor = VendorProfile.register(
            vendor_id=command.vendor_id,
            business_name=command.business_name,
            location=command.location,
            address=command.address,
        )
        current_domain.repository_for(VendorProfile).add(vendor)
        logger.info("Vendor registered", vendor_id=command.vendor_id, location=vendor.location)
        return str(vendor.id)

    @handle(RelocateVendor)
    def relocate_vendor(self, command):
        vendor = find_vendor(command.vendor_id)
        if vendor is None:
            raise ObjectNotFoundError(f"Vendor {command.vendor_id} is not registered")
        vendor.relocate(command.location, command.address)
        current_domain.repository_for(VendorProfile).add(vendor)
