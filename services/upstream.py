"""HTTP forwarding to backend services with streaming support."""

import time
from collections.abc import AsyncGenerator

import httpx

from core.failures import backend_error, classify_exception
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import (
    Backend,
    BodyStrategy,
    ForwardOutcome,
    ForwardRequest,
    ForwardResponse,
)
from services.targets import BackendTarget


class BackendClient:
    """Forward prepared requests to backends, one call per request.

    Never retries. Every exception raised while talking to a backend is
    classified into a ForwardFailure instead of propagating.
    """

    def __init__(
        self,
        clients: dict[Backend, httpx.AsyncClient],
        targets: dict[Backend, BackendTarget],
        logger: RequestLogger,
        header_builder: HeaderBuilder,
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._clients = clients
        self._targets = targets
        self._logger = logger
        self._headers = header_builder
        self._chunk_size = chunk_size

    async def send(self, forward: ForwardRequest) -> ForwardOutcome:
        """Issue the backend call and translate the result per body strategy."""
        backend = forward.backend
        client = self._clients[backend]
        started = time.perf_counter()
        response: httpx.Response | None = None

        try:
            request = client.build_request(
                forward.method,
                forward.url,
                headers=forward.headers,
                content=forward.content,
                timeout=forward.timeout,
            )
            response = await client.send(request, stream=True)
            elapsed_ms = (time.perf_counter() - started) * 1000

            if forward.strategy is BodyStrategy.STREAM_OUT and response.is_success:
                self._logger.log_response(backend.value, response.status_code, elapsed_ms)
                streamed = ForwardResponse(
                    backend=backend,
                    status_code=response.status_code,
                    headers=self._headers.build_download_headers(response.headers),
                    stream=self._relay(response, backend),
                    release=response.aclose,
                )
                # Closed by the relay or by its release callback from here on
                response = None
                return streamed

            content = await response.aread()
        except Exception as exc:
            failure = classify_exception(exc, backend, self._targets[backend].base_url)
            self._logger.log_error(
                backend.value, failure.http_status, failure.diagnostic or ""
            )
            return failure
        finally:
            if response is not None:
                await response.aclose()

        media_type = response.headers.get("content-type")
        if not response.is_success:
            self._logger.log_error(
                backend.value,
                response.status_code,
                content.decode("utf-8", errors="replace"),
            )
            return backend_error(
                backend,
                response.status_code,
                content,
                media_type,
                headers=self._headers.build_error_headers(response.headers),
            )

        self._logger.log_response(backend.value, response.status_code, elapsed_ms)
        return ForwardResponse(
            backend=backend,
            status_code=response.status_code,
            content=content,
            media_type=media_type,
        )

    async def _relay(
        self,
        response: httpx.Response,
        backend: Backend,
    ) -> AsyncGenerator[bytes, None]:
        """Move the download body in bounded chunks; closing releases the backend."""
        try:
            async for chunk in response.aiter_bytes(self._chunk_size):
                yield chunk
        except httpx.HTTPError as e:
            # Status is already on the wire; the caller sees an aborted body
            self._logger.log_error(
                backend.value,
                response.status_code,
                f"Download aborted: {type(e).__name__}: {e}",
            )
            raise
        finally:
            await response.aclose()

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()
