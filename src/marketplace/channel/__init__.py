"""Channel adapter registry.

The in-app channel is the Notification row itself; only push needs an
adapter. The fake adapter is used until a real provider is wired in.
"""

from marketplace.notification.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the adapter for ``channel_type`` (singleton per channel)."""
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.PUSH.value:
            from marketplace.channel.fake_push import FakePushAdapter

            _channel_instances[channel_type] = FakePushAdapter()
        else:
            raise ValueError(f"No adapter for channel type: {channel_type}")

    return _channel_instances[channel_type]


def reset_channels():
    """Drop all channel singletons (useful for testing)."""
    _channel_instances.clear()
