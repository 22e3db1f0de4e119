import pytest

from core.headers import HeaderBuilder
from core.request_types import BodyStrategy

TOKEN = "Bearer eyJhbGciOiJIUzI1NiJ9.e30.c2lnbmF0dXJl"


@pytest.fixture
def builder():
    return HeaderBuilder()


@pytest.mark.parametrize("strategy", list(BodyStrategy))
def test_authorization_is_forwarded_unchanged(builder, strategy):
    headers = builder.build_backend_headers({"authorization": TOKEN}, strategy)

    assert headers["Authorization"] == TOKEN


@pytest.mark.parametrize("strategy", list(BodyStrategy))
def test_missing_authorization_is_not_fabricated(builder, strategy):
    headers = builder.build_backend_headers({"accept": "application/json"}, strategy)

    assert "Authorization" not in headers


def test_only_allow_listed_headers_survive(builder):
    inbound = {
        "host": "gateway.local",
        "connection": "keep-alive",
        "cookie": "session=abc",
        "x-forwarded-for": "10.0.0.1",
        "x-internal-secret": "s3cret",
        "accept": "application/json",
        "user-agent": "medcore-web/1.0",
    }

    headers = builder.build_backend_headers(inbound, BodyStrategy.JSON)

    assert headers == {
        "Accept": "application/json",
        "User-Agent": "medcore-web/1.0",
        "Content-Type": "application/json",
    }


def test_json_strategy_always_sends_application_json(builder):
    headers = builder.build_backend_headers(
        [("content-type", "text/plain; charset=latin-1")], BodyStrategy.JSON
    )

    assert headers["Content-Type"] == "application/json"


def test_stream_in_keeps_multipart_boundary(builder):
    content_type = "multipart/form-data; boundary=----WebKitFormBoundary7MA4YWxkTrZu0gW"

    headers = builder.build_backend_headers(
        [("Content-Type", content_type), ("Authorization", TOKEN)], BodyStrategy.STREAM_IN
    )

    assert headers["Content-Type"] == content_type


def test_stream_out_asks_for_unencoded_bytes(builder):
    headers = builder.build_backend_headers({"content-type": "application/json"}, BodyStrategy.STREAM_OUT)

    assert "Content-Type" not in headers
    assert headers["Accept-Encoding"] == "identity"


def test_download_headers_are_copied(builder):
    backend_headers = {
        "content-type": "application/pdf",
        "content-disposition": 'attachment; filename="lab-results.pdf"',
        "content-length": "1048576",
        "x-powered-by": "Express",
        "set-cookie": "sid=1",
    }

    relayed = builder.build_download_headers(backend_headers)

    assert relayed == {
        "Content-Type": "application/pdf",
        "Content-Disposition": 'attachment; filename="lab-results.pdf"',
        "Content-Length": "1048576",
    }


def test_download_length_dropped_for_encoded_bodies(builder):
    relayed = builder.build_download_headers(
        {"content-type": "application/pdf", "content-length": "10", "content-encoding": "gzip"}
    )

    assert relayed == {"Content-Type": "application/pdf"}


def test_error_headers_keep_redirect_target(builder):
    relayed = builder.build_error_headers(
        {"location": "/api/v1/users/u1", "x-powered-by": "Express", "content-length": "0"}
    )

    assert relayed == {"Location": "/api/v1/users/u1"}
