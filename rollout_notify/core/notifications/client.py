"""Webhook notifier for rollout phase changes and events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from rollout_notify.core.config import Settings, get_settings
from rollout_notify.core.errors import NotificationError

from .dispatcher import WebhookDispatcher
from .models import EventSource, EventType, HookType, PhaseLike, WebhookTarget, tag_value
from .payload import PayloadBuilder
from .providers import FormatContext, format_for_endpoint

logger = logging.getLogger(__name__)

# Timeout strings shorter than this are treated as unset
MIN_TIMEOUT_LENGTH = 2


@dataclass
class HookOutcome:
    """Result of sending one event hook."""

    target: WebhookTarget
    error: Optional[NotificationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WebhookNotifier:
    """Builds, formats and dispatches rollout notifications.

    Each call makes exactly one delivery attempt and raises
    :class:`NotificationError` subclasses on failure.
    """

    def __init__(
        self,
        dispatcher: Optional[WebhookDispatcher] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._dispatcher = dispatcher or WebhookDispatcher(settings=self._settings)

    @property
    def dispatcher(self) -> WebhookDispatcher:
        return self._dispatcher

    def phase_timeout(self, target: WebhookTarget) -> str:
        """Timeout used for a phase notification to ``target``."""
        timeout = target.timeout or ""
        if len(timeout) < MIN_TIMEOUT_LENGTH:
            return self._settings.PHASE_TIMEOUT
        return timeout

    def event_timeout(self, target: WebhookTarget) -> str:
        """Event notifications ignore ``target.timeout``."""
        return self._settings.EVENT_TIMEOUT

    def notify(
        self,
        name: str,
        namespace: str,
        phase: PhaseLike,
        target: WebhookTarget,
    ) -> None:
        """Send a phase-change notification."""
        payload = PayloadBuilder.build(name, namespace, phase, target.metadata)
        self._dispatcher.dispatch(target.url, payload, self.phase_timeout(target))

    def notify_event(
        self,
        source: EventSource,
        target: WebhookTarget,
        message: str,
        event_type: Union[EventType, str],
    ) -> None:
        """Send an operational event, reshaped for chat webhooks when needed."""
        payload = PayloadBuilder.build(
            source.name,
            source.namespace,
            source.phase,
            target.metadata,
            initialize_metadata=True,
        )
        context = FormatContext(
            namespace=source.namespace,
            phase=source.phase,
            event_type=tag_value(event_type),
            message=message,
        )
        payload = format_for_endpoint(payload, target.url, context)
        self._dispatcher.dispatch(target.url, payload, self.event_timeout(target))

    def notify_event_hooks(
        self,
        source: EventSource,
        targets: Sequence[WebhookTarget],
        message: str,
        event_type: Union[EventType, str],
    ) -> List[HookOutcome]:
        """Send an event to every ``event`` hook, one after another.

        Failures are logged and returned, never raised.
        """
        outcomes: List[HookOutcome] = []
        for target in targets:
            if target.type != HookType.EVENT:
                continue
            try:
                self.notify_event(source, target, message, event_type)
            except NotificationError as e:
                logger.warning(
                    f"Error sending event to webhook {target.name or target.url}: {e}",
                    extra={
                        "hook": target.name,
                        "rollout": source.name,
                        "namespace": source.namespace,
                        "error_code": e.code.value,
                    },
                )
                outcomes.append(HookOutcome(target=target, error=e))
            else:
                outcomes.append(HookOutcome(target=target))
        return outcomes


# Global notifier instance
_notifier: Optional[WebhookNotifier] = None


def get_notifier() -> WebhookNotifier:
    """Get global notifier."""
    global _notifier
    if _notifier is None:
        _notifier = WebhookNotifier()
    return _notifier


def reset_notifier() -> None:
    global _notifier
    _notifier = None
