"""Data types exchanged between the rollout controller and webhook receivers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union


class CanaryPhase(str, Enum):
    """Progression phases of a canary rollout."""

    INITIALIZING = "Initializing"
    INITIALIZED = "Initialized"
    WAITING = "Waiting"
    PROGRESSING = "Progressing"
    WAITING_PROMOTION = "WaitingPromotion"
    PROMOTING = "Promoting"
    FINALISING = "Finalising"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    TERMINATING = "Terminating"
    TERMINATED = "Terminated"


class EventType(str, Enum):
    """Severity class of an operational event."""

    NORMAL = "Normal"
    WARNING = "Warning"


class HookType(str, Enum):
    """Rollout stage a webhook is attached to."""

    PRE_ROLLOUT = "pre-rollout"
    ROLLOUT = "rollout"
    CONFIRM_ROLLOUT = "confirm-rollout"
    POST_ROLLOUT = "post-rollout"
    EVENT = "event"
    ROLLBACK = "rollback"
    CONFIRM_PROMOTION = "confirm-promotion"
    CONFIRM_TRAFFIC_INCREASE = "confirm-traffic-increase"


PhaseLike = Union[CanaryPhase, str]


def tag_value(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class WebhookTarget:
    """Where and how to deliver a notification."""

    url: str
    timeout: Optional[str] = None
    metadata: Optional[Mapping[str, str]] = None

    name: str = ""
    type: HookType = HookType.EVENT


@dataclass(frozen=True)
class EventSource:
    """The rollout an event refers to."""

    name: str
    namespace: str
    phase: PhaseLike = ""


@dataclass
class Field:
    title: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "value": self.value}


@dataclass
class Attachment:
    """Rich-formatting block understood by chat incoming webhooks."""

    color: str
    text: str
    fallback: str
    fields: List[Field] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "color": self.color,
            "text": self.text,
            "fallback": self.fallback,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass
class EventPayload:
    """Body POSTed to a webhook.

    ``metadata`` and ``attachments`` are left out of the wire form when empty.
    """

    name: str
    namespace: str
    phase: PhaseLike
    metadata: Optional[Dict[str, str]] = None
    attachments: List[Attachment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "phase": tag_value(self.phase),
        }
        if self.metadata:
            data["metadata"] = {k: self.metadata[k] for k in sorted(self.metadata)}
        if self.attachments:
            data["attachments"] = [a.to_dict() for a in self.attachments]
        return data


__all__ = [
    "Attachment",
    "CanaryPhase",
    "EventPayload",
    "EventSource",
    "EventType",
    "Field",
    "HookType",
    "PhaseLike",
    "WebhookTarget",
    "tag_value",
]
