"""FastAPI route handlers."""

import asyncio
from collections.abc import Awaitable
from contextlib import suppress
from datetime import UTC, datetime

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from api.responses import render_failure, render_outcome
from core.config import Config
from core.failures import classify_exception, route_not_found
from core.protocols import RequestLogger
from core.request_types import BodyStrategy, ForwardOutcome, ForwardResponse
from services.targets import service_addresses
from ui.log_utils import write_incoming_log

# Non-standard status logged when the caller goes away mid-request
CLIENT_CLOSED_REQUEST = 499


async def handle_proxy(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Route, prepare, forward and relay a single inbound request."""
    routing_service = request.app.state.routing_service
    backend_client = request.app.state.backend_client
    path = request.url.path

    route = routing_service.resolve(request.method, path)
    if route is None:
        logger.log_not_found(request.method, path)
        return render_failure(route_not_found(path))

    if config.proxy.debug:
        write_incoming_log(
            request.method,
            path,
            dict(request.headers),
            backend=route.backend.value,
        )

    target = routing_service.target_for(route)
    try:
        forward = await routing_service.prepare(request, route)
    except Exception as exc:
        failure = classify_exception(exc, route.backend, target.base_url)
        logger.log_error(route.backend.value, failure.http_status, failure.diagnostic or "")
        return render_failure(failure)

    if forward.strategy is BodyStrategy.STREAM_IN:
        # The inbound stream itself reports a vanished caller
        outcome = await backend_client.send(forward)
    else:
        outcome = await _send_unless_disconnected(
            request,
            backend_client.send(forward),
            config.limits.disconnect_poll_interval,
        )
        if outcome is None:
            logger.log_error(
                route.backend.value,
                CLIENT_CLOSED_REQUEST,
                "Caller disconnected, backend call cancelled",
            )
            return Response(status_code=CLIENT_CLOSED_REQUEST)

    return render_outcome(outcome)


async def handle_health(request: Request, config: Config) -> Response:
    """Report gateway status and the resolved backend addresses."""
    return JSONResponse(
        {
            "ok": True,
            "ts": datetime.now(UTC).isoformat(),
            "service": "api-gateway",
            "port": config.proxy.port,
            "environment": config.proxy.environment,
            "services": service_addresses(request.app.state.targets),
        }
    )


async def _send_unless_disconnected(
    request: Request,
    send: Awaitable[ForwardOutcome],
    interval: float,
) -> ForwardOutcome | None:
    """Run the backend call, cancelling it if the caller disconnects first."""
    send_task = asyncio.ensure_future(send)
    watch_task = asyncio.ensure_future(_wait_for_disconnect(request, interval))
    try:
        done, _ = await asyncio.wait(
            {send_task, watch_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        watch_task.cancel()
        if not send_task.done():
            send_task.cancel()

    if send_task in done:
        return send_task.result()

    with suppress(asyncio.CancelledError):
        outcome = await send_task
        # Finished while being cancelled; release an unread download
        if isinstance(outcome, ForwardResponse) and outcome.release is not None:
            await outcome.release()
    return None


async def _wait_for_disconnect(request: Request, interval: float) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(interval)
