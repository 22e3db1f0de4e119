"""Shared request data types."""

from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum


class Backend(str, Enum):
    """Downstream services the gateway forwards to."""

    AUTH = "auth"
    USER = "user"
    ORGANIZATION = "organization"
    MEDICAL_RECORDS = "medical-records"
    AUDIT = "audit"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Backend.AUTH: "Auth Service",
    Backend.USER: "User Service",
    Backend.ORGANIZATION: "Organization Service",
    Backend.MEDICAL_RECORDS: "Medical Records Service",
    Backend.AUDIT: "Audit Service",
}


class BodyStrategy(str, Enum):
    """How a request/response body moves through the gateway."""

    JSON = "json"
    STREAM_IN = "stream-in"
    STREAM_OUT = "stream-out"


class FailureKind(str, Enum):
    NOT_FOUND = "not-found"
    BACKEND_ERROR = "backend-error"
    BACKEND_UNAVAILABLE = "backend-unavailable"
    GATEWAY_INTERNAL = "gateway-internal"


_FAILURE_STATUS = {
    FailureKind.NOT_FOUND: 404,
    FailureKind.BACKEND_ERROR: 502,
    FailureKind.BACKEND_UNAVAILABLE: 503,
    FailureKind.GATEWAY_INTERNAL: 500,
}


@dataclass(frozen=True)
class ForwardRequest:
    """Prepared data for a single backend call."""

    backend: Backend
    method: str
    url: str
    headers: dict[str, str]
    strategy: BodyStrategy
    timeout: float
    content: bytes | AsyncIterator[bytes] | None = None


@dataclass(frozen=True)
class ForwardResponse:
    """Successful backend answer, either buffered or still streaming."""

    backend: Backend
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None
    stream: AsyncGenerator[bytes, None] | None = None
    media_type: str | None = None
    # Closes the backend response behind an unfinished stream
    release: Callable[[], Awaitable[None]] | None = None


@dataclass(frozen=True)
class ForwardFailure:
    """Classified failure of a backend call.

    BACKEND_ERROR carries the backend's own status, body and media type so they
    can be relayed unchanged. The other kinds carry a diagnostic for the logs.
    """

    kind: FailureKind
    message: str
    backend: Backend | None = None
    base_url: str | None = None
    diagnostic: str | None = None
    status_code: int | None = None
    content: bytes | None = None
    media_type: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        if self.kind is FailureKind.BACKEND_ERROR and self.status_code is not None:
            return self.status_code
        return _FAILURE_STATUS[self.kind]


ForwardOutcome = ForwardResponse | ForwardFailure
