"""Construction of provider-agnostic webhook payloads."""

from __future__ import annotations

from typing import Mapping, Optional

from .models import EventPayload, PhaseLike


class PayloadBuilder:
    """Builds fresh :class:`EventPayload` values. Never fails."""

    @staticmethod
    def build(
        name: str,
        namespace: str,
        phase: PhaseLike,
        metadata: Optional[Mapping[str, str]] = None,
        *,
        initialize_metadata: bool = False,
    ) -> EventPayload:
        """Build a payload for one rollout.

        Args:
            name: Rollout name
            namespace: Rollout namespace
            phase: Current phase (or event-type tag)
            metadata: Caller-supplied key/value pairs
            initialize_metadata: Start from an empty metadata map and merge
                ``metadata`` into it, as event notifications do. Otherwise the
                caller's map is copied as-is, or left unset when absent.
        """
        payload = EventPayload(name=name, namespace=namespace, phase=phase)
        if initialize_metadata:
            payload.metadata = {}
            if metadata is not None:
                PayloadBuilder.merge_metadata(payload, metadata)
        elif metadata is not None:
            payload.metadata = dict(metadata)
        return payload

    @staticmethod
    def merge_metadata(payload: EventPayload, metadata: Mapping[str, str]) -> EventPayload:
        """Merge ``metadata`` into ``payload``; keys already present win."""
        if payload.metadata is None:
            payload.metadata = {}
        for key, value in metadata.items():
            if key in payload.metadata:
                continue
            payload.metadata[key] = value
        return payload


__all__ = ["PayloadBuilder"]
