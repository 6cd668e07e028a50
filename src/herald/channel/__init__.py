"""Channel adapter registry — pluggable notification dispatch channels.

Provides singleton access to channel adapters. The fake email adapter is the
default; ``EMAIL_ADAPTER=resend`` switches email to the Resend adapter,
configured from ``RESEND_API_KEY`` and ``NOTIFICATION_FROM_*``. Additional
channels register here by implementing their own port; the engine only ever
calls ``send``.
"""

import os

from herald.notification.notification import NotificationChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str):
    """Return the configured channel adapter (singleton per channel type).

    Args:
        channel_type: A NotificationChannel enum value ("Email")
    """
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.EMAIL.value:
            adapter = os.environ.get("EMAIL_ADAPTER", "fake")
            if adapter == "fake":
                from herald.channel.fake_email import FakeEmailAdapter

                _channel_instances[channel_type] = FakeEmailAdapter()
            elif adapter == "resend":
                from herald.channel.resend_email import ResendEmailAdapter

                _channel_instances[channel_type] = ResendEmailAdapter.from_env()
            else:
                raise ValueError(f"Unknown email adapter: {adapter}")
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
