import pytest
from protean import current_domain


@pytest.fixture()
def notifications():
    """Query recorded notifications by recipient and/or type."""
    from marketplace.notification.notification import Notification

    def _query(recipient_id=None, notification_type=None):
        dao = current_domain.repository_for(Notification)._dao
        rows = dao.query.all().items
        if recipient_id is not None:
            rows = [n for n in rows if n.recipient_id == str(recipient_id)]
        if notification_type is not None:
            rows = [n for n in rows if n.notification_type == notification_type]
        return rows

    return _query


@pytest.fixture()
def admin():
    from marketplace.directory.admin import bootstrap_admin

    bootstrap_admin("admin-001")
    return "admin-001"


def line(vendor_id="ven-001", product_id="jollof", quantity=1, unit_price=2500.0):
    return {"vendor_id": vendor_id, "product_id": product_id, "quantity": quantity, "unit_price": unit_price}


@pytest.fixture()
def cart_line():
    return line
