import httpx
import pytest

from core.exceptions import BodyPreparationError
from core.failures import backend_error, classify_exception, exception_name, route_not_found
from core.request_types import Backend, FailureKind

REQUEST = httpx.Request("GET", "http://localhost:3003/api/v1/users")


@pytest.mark.parametrize("backend", list(Backend))
def test_connection_refused_means_backend_unavailable(backend):
    exc = httpx.ConnectError("[Errno 111] Connection refused", request=REQUEST)

    failure = classify_exception(exc, backend, "http://localhost:3003")

    assert failure.kind is FailureKind.BACKEND_UNAVAILABLE
    assert failure.http_status == 503
    assert failure.backend is backend
    assert failure.message == f"{backend.display_name} is not available"
    assert failure.base_url == "http://localhost:3003"


@pytest.mark.parametrize(
    "exc",
    [
        httpx.ReadTimeout("timed out", request=REQUEST),
        httpx.ConnectTimeout("timed out", request=REQUEST),
        httpx.RemoteProtocolError("peer closed connection", request=REQUEST),
        httpx.ReadError("connection reset", request=REQUEST),
        BodyPreparationError("Invalid JSON: Expecting value"),
        RuntimeError("unexpected"),
    ],
)
def test_other_failures_are_gateway_internal(exc):
    failure = classify_exception(exc, Backend.USER)

    assert failure.kind is FailureKind.GATEWAY_INTERNAL
    assert failure.http_status == 500
    assert failure.message == "Error in API Gateway"
    assert failure.diagnostic.startswith(type(exc).__name__)


def test_backend_error_keeps_status_and_body():
    failure = backend_error(Backend.USER, 422, b'{"errors": ["email taken"]}', "application/json")

    assert failure.kind is FailureKind.BACKEND_ERROR
    assert failure.http_status == 422
    assert failure.content == b'{"errors": ["email taken"]}'
    assert failure.media_type == "application/json"


def test_route_not_found_echoes_path():
    failure = route_not_found("/api/v1/nope")

    assert failure.http_status == 404
    assert failure.message == "Route /api/v1/nope not found in API Gateway"
    assert exception_name(failure) is None


def test_exception_name_hides_exception_text():
    exc = httpx.ReadTimeout("timed out reading from 10.0.3.7:3005", request=REQUEST)

    failure = classify_exception(exc, Backend.MEDICAL_RECORDS)

    assert exception_name(failure) == "ReadTimeout"
