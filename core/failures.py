"""Classify backend call failures into client-facing failure kinds."""

import httpx

from core.request_types import Backend, FailureKind, ForwardFailure


def classify_exception(
    exc: BaseException,
    backend: Backend | None,
    base_url: str | None = None,
) -> ForwardFailure:
    """Map a transport or preparation exception to a failure kind.

    Only connection-level failures (refused, DNS) mean the backend is
    unavailable. Timeouts, protocol errors, aborted streams and anything
    unexpected are gateway-internal.
    """
    diagnostic = f"{type(exc).__name__}: {exc}"
    if isinstance(exc, httpx.ConnectError) and backend is not None:
        return ForwardFailure(
            kind=FailureKind.BACKEND_UNAVAILABLE,
            message=f"{backend.display_name} is not available",
            backend=backend,
            base_url=base_url,
            diagnostic=diagnostic,
        )
    return ForwardFailure(
        kind=FailureKind.GATEWAY_INTERNAL,
        message="Error in API Gateway",
        backend=backend,
        base_url=base_url,
        diagnostic=diagnostic,
    )


def backend_error(
    backend: Backend,
    status_code: int,
    content: bytes,
    media_type: str | None,
    headers: dict[str, str] | None = None,
) -> ForwardFailure:
    """Backend answered with a non-2xx status; relayed unchanged."""
    return ForwardFailure(
        kind=FailureKind.BACKEND_ERROR,
        message=f"{backend.display_name} responded with {status_code}",
        backend=backend,
        status_code=status_code,
        content=content,
        media_type=media_type,
        headers=headers or {},
    )


def route_not_found(path: str) -> ForwardFailure:
    return ForwardFailure(
        kind=FailureKind.NOT_FOUND,
        message=f"Route {path} not found in API Gateway",
        diagnostic=path,
    )


def exception_name(failure: ForwardFailure) -> str | None:
    """Exception type recorded in a failure's diagnostic, if any."""
    if not failure.diagnostic or failure.kind is FailureKind.NOT_FOUND:
        return None
    return failure.diagnostic.split(":", 1)[0]
