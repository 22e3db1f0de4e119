"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_health, handle_proxy
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.routes import build_route_table
from services.routing_service import RoutingService
from services.targets import build_targets
from services.upstream import BackendClient

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    targets = build_targets(config)
    route_table = build_route_table()
    header_builder = HeaderBuilder()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        clients = {
            backend: httpx.AsyncClient(
                base_url=target.base_url,
                timeout=target.timeout,
                limits=limits,
                transport=transport,
            )
            for backend, target in targets.items()
        }
        app.state.targets = targets
        app.state.backend_client = BackendClient(
            clients,
            targets,
            logger,
            header_builder,
            chunk_size=config.limits.stream_chunk_size,
        )
        app.state.routing_service = RoutingService(
            logger=logger,
            route_table=route_table,
            targets=targets,
            header_builder=header_builder,
        )
        try:
            yield
        finally:
            await app.state.backend_client.aclose()

    app = FastAPI(title="MedCore API Gateway", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    async def gateway_health(request: Request):
        return await handle_health(request, config)

    @app.api_route("/{path:path}", methods=PROXY_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request, config, logger)

    return app
