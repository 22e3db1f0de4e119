"""Translate forward outcomes into caller-facing responses."""

from fastapi import Response
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.failures import exception_name
from core.request_types import FailureKind, ForwardFailure, ForwardOutcome, ForwardResponse


def render_outcome(outcome: ForwardOutcome) -> Response:
    if isinstance(outcome, ForwardFailure):
        return render_failure(outcome)
    return render_success(outcome)


def render_success(outcome: ForwardResponse) -> Response:
    if outcome.stream is not None:
        return StreamingResponse(
            outcome.stream,
            status_code=outcome.status_code,
            headers=outcome.headers,
            # Runs even when the caller leaves before the body is iterated
            background=BackgroundTask(outcome.release) if outcome.release else None,
        )
    return Response(
        content=outcome.content or b"",
        status_code=outcome.status_code,
        media_type=outcome.media_type,
    )


def render_failure(failure: ForwardFailure) -> Response:
    """Render the error envelope for a failure kind.

    Backend errors are relayed verbatim; every other kind gets a JSON
    envelope with ``error`` and ``message`` fields.
    """
    if failure.kind is FailureKind.BACKEND_ERROR:
        return Response(
            content=failure.content or b"",
            status_code=failure.http_status,
            media_type=failure.media_type,
            headers=failure.headers,
        )

    if failure.kind is FailureKind.NOT_FOUND:
        body = {
            "error": "Not Found",
            "message": failure.message,
            "path": failure.diagnostic,
        }
    elif failure.kind is FailureKind.BACKEND_UNAVAILABLE:
        body = {
            "error": "Service Unavailable",
            "message": failure.message,
            "service": failure.backend.value if failure.backend else None,
            "serviceUrl": failure.base_url,
            "details": exception_name(failure),
        }
    else:
        body = {
            "error": "Internal Server Error",
            "message": failure.message,
            "service": failure.backend.value if failure.backend else None,
            "details": exception_name(failure),
        }
    return JSONResponse(body, status_code=failure.http_status)
