"""Provider-specific payload formatting.

Receivers are classified into a closed set of :class:`Provider` variants by
looking at the endpoint URL. Each variant has one formatter implementing
``format(payload, context)``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from .models import Attachment, EventPayload, EventType, Field, PhaseLike, tag_value

# Case-sensitive URL substrings identifying Slack-compatible incoming webhooks
CHAT_WEBHOOK_TOKENS: Tuple[str, ...] = ("slack", "infomaniak")

COLOR_NORMAL = "#36a64f"
COLOR_ALERT = "#FF0000"


class Provider(str, Enum):
    GENERIC = "generic"
    CHAT_INCOMING_WEBHOOK = "chat_incoming_webhook"


def classify_endpoint(url: str) -> Provider:
    """Pick the provider variant for a webhook URL."""
    if any(token in url for token in CHAT_WEBHOOK_TOKENS):
        return Provider.CHAT_INCOMING_WEBHOOK
    return Provider.GENERIC


@dataclass(frozen=True)
class FormatContext:
    """Event details a formatter may render."""

    namespace: str
    phase: PhaseLike
    event_type: Union[EventType, str]
    message: str


class ProviderFormatter(ABC):
    """Rewrites a payload into the shape a receiver expects."""

    provider: Provider

    @abstractmethod
    def format(self, payload: EventPayload, context: FormatContext) -> EventPayload:
        """Return the payload to send."""
        pass


class GenericFormatter(ProviderFormatter):
    provider = Provider.GENERIC

    def format(self, payload: EventPayload, context: FormatContext) -> EventPayload:
        return payload


class ChatWebhookFormatter(ProviderFormatter):
    """Slack-style ``attachments`` with color-coded severity.

    The generic metadata is dropped and replaced by a fixed set of fields built
    from the event itself. Caller metadata does not appear in the attachment.
    """

    provider = Provider.CHAT_INCOMING_WEBHOOK

    def _get_color(self, event_type: Union[EventType, str]) -> str:
        if tag_value(event_type) == EventType.NORMAL.value:
            return COLOR_NORMAL
        return COLOR_ALERT

    def format(self, payload: EventPayload, context: FormatContext) -> EventPayload:
        payload.metadata = {}

        fields = [
            Field(title="Namespace:", value=context.namespace),
            Field(title="Phase:", value=tag_value(context.phase)),
            Field(title="Type:", value=tag_value(context.event_type)),
        ]

        payload.attachments = [
            Attachment(
                color=self._get_color(context.event_type),
                text=f"**{context.message}**",
                fallback=context.message,
                fields=fields,
            )
        ]
        return payload


_FORMATTERS: Dict[Provider, ProviderFormatter] = {
    Provider.GENERIC: GenericFormatter(),
    Provider.CHAT_INCOMING_WEBHOOK: ChatWebhookFormatter(),
}


def formatter_for(provider: Provider) -> ProviderFormatter:
    return _FORMATTERS[provider]


def format_for_endpoint(payload: EventPayload, url: str, context: FormatContext) -> EventPayload:
    """Classify ``url`` and apply the matching formatter."""
    return formatter_for(classify_endpoint(url)).format(payload, context)


__all__ = [
    "CHAT_WEBHOOK_TOKENS",
    "COLOR_ALERT",
    "COLOR_NORMAL",
    "ChatWebhookFormatter",
    "FormatContext",
    "GenericFormatter",
    "Provider",
    "ProviderFormatter",
    "classify_endpoint",
    "format_for_endpoint",
    "formatter_for",
]
