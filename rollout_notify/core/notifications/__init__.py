"""Rollout Notification System.

Delivers rollout notifications to webhooks:
- Phase changes (generic JSON)
- Operational events (generic JSON or chat incoming-webhook attachments)
"""

from rollout_notify.core.notifications.client import (
    HookOutcome,
    WebhookNotifier,
    get_notifier,
    reset_notifier,
)
from rollout_notify.core.notifications.dispatcher import (
    AsyncWebhookDispatcher,
    WebhookDispatcher,
)
from rollout_notify.core.notifications.models import (
    Attachment,
    CanaryPhase,
    EventPayload,
    EventSource,
    EventType,
    Field,
    HookType,
    WebhookTarget,
)
from rollout_notify.core.notifications.payload import PayloadBuilder
from rollout_notify.core.notifications.providers import (
    ChatWebhookFormatter,
    FormatContext,
    GenericFormatter,
    Provider,
    classify_endpoint,
)

__all__ = [
    "AsyncWebhookDispatcher",
    "Attachment",
    "CanaryPhase",
    "ChatWebhookFormatter",
    "EventPayload",
    "EventSource",
    "EventType",
    "Field",
    "FormatContext",
    "GenericFormatter",
    "HookOutcome",
    "HookType",
    "PayloadBuilder",
    "Provider",
    "WebhookDispatcher",
    "WebhookNotifier",
    "WebhookTarget",
    "classify_endpoint",
    "get_notifier",
    "reset_notifier",
]
