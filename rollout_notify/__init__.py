"""Rollout webhook notifications.

Turns canary phase changes and rollout events into a single HTTP POST to a
user-configured webhook, reshaping the payload for chat incoming webhooks.
"""

from __future__ import annotations

from rollout_notify.core.errors import (
    BodyReadError,
    ConfigurationError,
    DispatchTimeoutError,
    ErrorCode,
    InvalidTimeoutError,
    InvalidURLError,
    NotificationError,
    RemoteRejectionError,
    SerializationError,
    TransportError,
)
from rollout_notify.core.notifications import (
    AsyncWebhookDispatcher,
    CanaryPhase,
    EventPayload,
    EventSource,
    EventType,
    HookType,
    WebhookDispatcher,
    WebhookNotifier,
    WebhookTarget,
    get_notifier,
)

__version__ = "0.1.0"

__all__ = [
    "AsyncWebhookDispatcher",
    "BodyReadError",
    "CanaryPhase",
    "ConfigurationError",
    "DispatchTimeoutError",
    "ErrorCode",
    "EventPayload",
    "EventSource",
    "EventType",
    "HookType",
    "InvalidTimeoutError",
    "InvalidURLError",
    "NotificationError",
    "RemoteRejectionError",
    "SerializationError",
    "TransportError",
    "WebhookDispatcher",
    "WebhookNotifier",
    "WebhookTarget",
    "get_notifier",
]
