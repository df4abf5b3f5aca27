import json
import os
import socket
import threading
import time
from typing import Any, Callable, List, Optional

import httpx
import pytest
import pytest_asyncio

from rollout_notify.core.config import get_settings, reset_settings
from rollout_notify.core.notifications import (
    AsyncWebhookDispatcher,
    WebhookDispatcher,
    WebhookNotifier,
    reset_notifier,
)

# Environment variables that may be modified by tests
_ENV_VARS_TO_ISOLATE = [
    "ROLLOUT_NOTIFY_LOG_LEVEL",
    "ROLLOUT_NOTIFY_PHASE_TIMEOUT",
    "ROLLOUT_NOTIFY_EVENT_TIMEOUT",
    "ROLLOUT_NOTIFY_DISPATCH_TIMEOUT",
    "ROLLOUT_NOTIFY_USER_AGENT",
]


@pytest.fixture(autouse=True)
def env_isolation():
    """Isolate environment variables and cached settings between tests."""
    backup = {k: os.environ.get(k) for k in _ENV_VARS_TO_ISOLATE}
    reset_settings()
    try:
        yield
    finally:
        for k, v in backup.items():
            if v is None:
                os.environ.pop(k, None)
            else:
                os.environ[k] = v
        reset_settings()
        reset_notifier()


class StubEndpoint:
    """Records POSTed requests and answers with a fixed status/body."""

    def __init__(self, status_code: int = 200, body: bytes = b"ok"):
        self.status_code = status_code
        self.body = body
        self.requests: List[httpx.Request] = []
        self.handler: Optional[Callable[[httpx.Request], Any]] = None

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        return httpx.Response(self.status_code, content=self.body, request=request)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)

    def last_timeout(self) -> float:
        return self.last.extensions["timeout"]["read"]


@pytest.fixture
def stub():
    return StubEndpoint()


def stub_client_factory(stub: StubEndpoint) -> Callable[[], httpx.AsyncClient]:
    return lambda: httpx.AsyncClient(transport=httpx.MockTransport(stub))


@pytest.fixture
def stub_factory(stub):
    return stub_client_factory(stub)


@pytest.fixture
def dispatcher(stub):
    return WebhookDispatcher(client_factory=stub_client_factory(stub), settings=get_settings())


@pytest_asyncio.fixture
async def async_dispatcher(stub):
    client = httpx.AsyncClient(transport=httpx.MockTransport(stub))
    d = AsyncWebhookDispatcher(client=client, settings=get_settings())
    try:
        yield d
    finally:
        await client.aclose()


@pytest.fixture
def notifier(dispatcher):
    return WebhookNotifier(dispatcher=dispatcher)


class TricklingServer:
    """Local HTTP server that sends its status line one byte at a time."""

    def __init__(self, delay: float = 0.2):
        self.delay = delay
        self._stop = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(1)
        self._sock.settimeout(0.1)
        self._thread = threading.Thread(target=self._serve, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._sock.getsockname()
        return f"http://{host}:{port}/hook"

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=5)
        self._sock.close()

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            with conn:
                response = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nok"
                try:
                    conn.recv(65536)
                    for i in range(len(response)):
                        if self._stop.is_set():
                            return
                        conn.sendall(response[i : i + 1])
                        time.sleep(self.delay)
                except OSError:
                    continue


@pytest.fixture
def trickling_server():
    server = TricklingServer()
    server.start()
    try:
        yield server
    finally:
        server.stop()
