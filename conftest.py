from collections.abc import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config


class RecordingLogger:
    """RequestLogger that keeps every event in memory."""

    def __init__(self):
        self.forwards: list[tuple[str, str, str, str]] = []
        self.responses: list[tuple[str, int]] = []
        self.not_found: list[tuple[str, str]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_forward(self, backend, method, path, *, strategy):
        self.forwards.append((backend, method, path, strategy))

    def log_response(self, backend, status, elapsed_ms):
        self.responses.append((backend, status))

    def log_not_found(self, method, path):
        self.not_found.append((method, path))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


class BackendStub:
    """Stands in for every backend behind an httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: (
            httpx.Response(200, json={"ok": True})
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(await request.aread())
        self.requests.append(request)
        return self.responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def request_logger():
    return RecordingLogger()


@pytest.fixture
def backend_stub():
    return BackendStub()


@pytest.fixture
def gateway(config, request_logger, backend_stub):
    """TestClient for the gateway with every backend replaced by backend_stub."""
    app = create_app(config, request_logger, transport=backend_stub.transport)
    with TestClient(app) as client:
        yield client
