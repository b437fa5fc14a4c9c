import pytest

from marketplace.channel import get_channel, reset_channels
from marketplace.channel.fake_push import FakePushAdapter


def test_push_channel_is_a_singleton():
    adapter = get_channel("Push")
    assert isinstance(adapter, FakePushAdapter)
    assert get_channel("Push") is adapter
    reset_channels()
    assert get_channel("Push") is not adapter


def test_in_app_has_no_adapter():
    with pytest.raises(ValueError):
        get_channel("InApp")


def test_fake_push_records_successful_sends():
    adapter = FakePushAdapter()
    result = adapter.send("cust-1", "Customer", "Hello", "Body", {"notification_id": "n-1"})
    assert result["status"] == "sent"
    assert result["message_id"].startswith("push-")
    (pushed,) = adapter.pushes_to("cust-1")
    assert pushed["title"] == "Hello"
    assert pushed["data"] == {"notification_id": "n-1"}


def test_pushes_can_be_filtered_by_audience():
    adapter = FakePushAdapter()
    adapter.send("user-1", "Customer", "As customer", "Body")
    adapter.send("user-1", "Vendor", "As vendor", "Body")
    assert [p["title"] for p in adapter.pushes_to("user-1", audience="Vendor")] == ["As vendor"]
    assert len(adapter.pushes_to("user-1")) == 2


def test_fake_push_failure_mode():
    adapter = FakePushAdapter()
    adapter.configure(should_succeed=False, failure_reason="token expired")
    result = adapter.send("cust-1", "Customer", "Hello", "Body")
    assert result == {"message_id": None, "status": "failed", "error": "token expired"}
    assert adapter.sent_pushes == []
    adapter.reset()
    assert adapter.send("cust-1", "Customer", "Hello", "Body")["status"] == "sent"
