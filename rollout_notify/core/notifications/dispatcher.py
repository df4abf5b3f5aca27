"""Single-attempt HTTP delivery of webhook payloads.

A dispatch:
- Encodes the payload as compact JSON
- Validates the endpoint URL (caller configuration errors never reach the network)
- POSTs once, the whole exchange bounded by one wall-clock deadline
- Reads the whole response body and classifies the status code

Status codes up to and including 202 are success. Anything else raises
:class:`RemoteRejectionError` whose message is the response body verbatim.
No retries are attempted here.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Dict, Optional

import anyio
import httpx

from rollout_notify.core.config import Settings, get_settings
from rollout_notify.core.duration import parse_duration
from rollout_notify.core.errors import (
    BodyReadError,
    DispatchTimeoutError,
    InvalidTimeoutError,
    InvalidURLError,
    NotificationError,
    RemoteRejectionError,
    SerializationError,
    TransportError,
)
from rollout_notify.utils.metrics import (
    webhook_dispatch_duration_seconds,
    webhook_dispatch_total,
)

from .providers import classify_endpoint

logger = logging.getLogger(__name__)

MAX_SUCCESS_STATUS = 202
DEADLINE_EXCEEDED = "context deadline exceeded"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
# Allowed host characters; percent escapes are rejected, non-ASCII is left to IDNA
_BAD_HOST_CHAR = re.compile(r"[^A-Za-z0-9\-._~!$&'()*+,;=\[\]:\u0080-\U0010ffff]")


def encode_payload(payload: Any) -> bytes:
    """Serialize a payload (or plain mapping) to UTF-8 JSON."""
    data = payload.to_dict() if hasattr(payload, "to_dict") else payload
    try:
        text = json.dumps(data, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot encode payload: {e}") from e
    return text.encode("utf-8")


def parse_endpoint_url(url: str) -> httpx.URL:
    if _CONTROL_CHARS.search(url):
        raise InvalidURLError(url, "invalid control character in URL")
    if _BAD_ESCAPE.search(url):
        raise InvalidURLError(url, "invalid URL escape")
    try:
        endpoint = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidURLError(url, str(e)) from e
    if _BAD_HOST_CHAR.search(endpoint.host):
        raise InvalidURLError(url, "invalid character in host name")
    return endpoint


def resolve_timeout(timeout: Optional[str], default: str) -> float:
    """Turn a duration string into seconds; empty means ``default``."""
    value = timeout or default
    try:
        return parse_duration(value)
    except ValueError as e:
        raise InvalidTimeoutError(value, str(e)) from e


@dataclass(frozen=True)
class PreparedDispatch:
    """Everything needed to perform the network call."""

    url: httpx.URL
    body: bytes
    headers: Dict[str, str]
    timeout_seconds: float

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(self.timeout_seconds)


def prepare_dispatch(
    url: str,
    payload: Any,
    timeout: Optional[str],
    *,
    settings: Optional[Settings] = None,
) -> PreparedDispatch:
    effective = settings or get_settings()
    body = encode_payload(payload)
    endpoint = parse_endpoint_url(url)
    headers = {
        "Content-Type": "application/json",
        "User-Agent": effective.USER_AGENT,
    }
    seconds = resolve_timeout(timeout, effective.DISPATCH_TIMEOUT)
    return PreparedDispatch(url=endpoint, body=body, headers=headers, timeout_seconds=seconds)


async def _aread_body(chunks: AsyncIterator[bytes]) -> bytes:
    buf = bytearray()
    try:
        async for chunk in chunks:
            buf.extend(chunk)
    except (httpx.HTTPError, httpx.StreamError) as e:
        raise BodyReadError(e) from e
    return bytes(buf)


def _classify(status_code: int, body: bytes) -> int:
    if status_code > MAX_SUCCESS_STATUS:
        raise RemoteRejectionError(body.decode("utf-8", errors="replace"), status_code=status_code)
    return status_code


def _transport_error(exc: httpx.RequestError) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        return DispatchTimeoutError(f"webhook request timed out: {exc}")
    return TransportError(f"webhook request failed: {exc}")


async def send_prepared(client: httpx.AsyncClient, prepared: PreparedDispatch) -> int:
    """Perform the network call under a single wall-clock deadline.

    The deadline covers connecting, sending, receiving the headers and reading
    the body. When it expires the request is cancelled and the response is
    closed.
    """
    if prepared.timeout_seconds <= 0:
        raise DispatchTimeoutError(DEADLINE_EXCEEDED)
    reading_body = False
    try:
        with anyio.fail_after(prepared.timeout_seconds):
            async with client.stream(
                "POST",
                prepared.url,
                content=prepared.body,
                headers=prepared.headers,
                timeout=prepared.timeout,
            ) as response:
                reading_body = True
                body = await _aread_body(response.aiter_bytes())
    except TimeoutError as e:
        if reading_body:
            raise BodyReadError(DispatchTimeoutError(DEADLINE_EXCEEDED)) from e
        raise DispatchTimeoutError(DEADLINE_EXCEEDED) from e
    except httpx.RequestError as e:
        raise _transport_error(e) from e
    return _classify(response.status_code, body)


class _DispatchRecorder:
    """Logs and counts the outcome of one dispatch."""

    def __init__(self, url: str):
        self.url = url
        self.provider = classify_endpoint(url).value
        self.start = time.monotonic()

    def success(self, status_code: int) -> None:
        self._observe("success")
        logger.debug(
            "webhook_dispatched",
            extra={
                "url": self.url,
                "provider": self.provider,
                "status_code": status_code,
                "latency_ms": self._elapsed_ms(),
            },
        )

    def failure(self, exc: NotificationError) -> None:
        self._observe(exc.code.value.lower())
        logger.debug(
            "webhook_dispatch_failed",
            extra={
                "url": self.url,
                "provider": self.provider,
                "error_code": exc.code.value,
                "status_code": getattr(exc, "status_code", None),
                "latency_ms": self._elapsed_ms(),
            },
        )

    def _observe(self, outcome: str) -> None:
        webhook_dispatch_total.labels(provider=self.provider, outcome=outcome).inc()
        webhook_dispatch_duration_seconds.labels(provider=self.provider).observe(
            time.monotonic() - self.start
        )

    def _elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start) * 1000)


def _default_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True)


class WebhookDispatcher:
    """Blocking webhook sender.

    Each call runs in its own short-lived event loop with a fresh client from
    ``client_factory``, so the deadline can abort a request at any stage.
    Pass a factory to control transport, proxies or TLS. Must not be called
    from a running event loop; use :class:`AsyncWebhookDispatcher` there.
    """

    def __init__(
        self,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._client_factory = client_factory or _default_client

    def dispatch(self, url: str, payload: Any, timeout: Optional[str] = "") -> int:
        """POST ``payload`` to ``url`` once.

        Returns:
            The HTTP status code of the accepted request.

        Raises:
            ConfigurationError: malformed URL or timeout
            SerializationError: payload is not JSON serializable
            TransportError: no response (DispatchTimeoutError on deadline)
            BodyReadError: the response body could not be read
            RemoteRejectionError: status above 202, message is the body
        """
        recorder = _DispatchRecorder(url)
        try:
            prepared = prepare_dispatch(url, payload, timeout, settings=self._settings)
            status_code = anyio.run(self._send, prepared)
        except NotificationError as e:
            recorder.failure(e)
            raise
        recorder.success(status_code)
        return status_code

    async def _send(self, prepared: PreparedDispatch) -> int:
        async with self._client_factory() as client:
            return await send_prepared(client, prepared)


class AsyncWebhookDispatcher:
    """asyncio counterpart of :class:`WebhookDispatcher`."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or _default_client()

    async def __aenter__(self) -> "AsyncWebhookDispatcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def dispatch(self, url: str, payload: Any, timeout: Optional[str] = "") -> int:
        recorder = _DispatchRecorder(url)
        try:
            prepared = prepare_dispatch(url, payload, timeout, settings=self._settings)
            status_code = await send_prepared(self._client, prepared)
        except NotificationError as e:
            recorder.failure(e)
            raise
        recorder.success(status_code)
        return status_code


__all__ = [
    "AsyncWebhookDispatcher",
    "MAX_SUCCESS_STATUS",
    "PreparedDispatch",
    "WebhookDispatcher",
    "encode_payload",
    "parse_endpoint_url",
    "prepare_dispatch",
    "resolve_timeout",
    "send_prepared",
]
