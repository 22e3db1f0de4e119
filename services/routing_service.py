"""Routing orchestration for gateway requests."""

from fastapi import Request
from starlette.requests import ClientDisconnect

from core.body import BodyStrategySelector
from core.exceptions import BodyPreparationError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import Backend, BodyStrategy, ForwardRequest
from core.router import Route, RouteTable
from services.targets import BackendTarget


class RoutingService:
    """Resolve inbound requests to routes and prepare backend calls."""

    def __init__(
        self,
        logger: RequestLogger,
        route_table: RouteTable,
        targets: dict[Backend, BackendTarget],
        header_builder: HeaderBuilder,
        selector: BodyStrategySelector | None = None,
    ) -> None:
        self._logger = logger
        self._routes = route_table
        self._targets = targets
        self._headers = header_builder
        self._selector = selector or BodyStrategySelector()

    @property
    def routes(self) -> RouteTable:
        return self._routes

    def resolve(self, method: str, path: str) -> Route | None:
        return self._routes.resolve(method, path)

    def target_for(self, route: Route) -> BackendTarget:
        return self._targets[route.backend]

    async def prepare(self, request: Request, route: Route) -> ForwardRequest:
        """Build the ForwardRequest for a routed inbound request.

        Raises:
            BodyPreparationError: the inbound body cannot be read or re-encoded.
        """
        content_type = request.headers.get("content-type")
        strategy = self._selector.select(route, content_type)
        target = self.target_for(route)
        headers = self._headers.build_backend_headers(request.headers.items(), strategy)

        if strategy is BodyStrategy.STREAM_IN:
            content = request.stream()
        elif strategy is BodyStrategy.STREAM_OUT:
            content = None
        else:
            try:
                raw = await request.body()
            except ClientDisconnect as e:
                raise BodyPreparationError(
                    "Client disconnected while sending body", content_type
                ) from e
            content = self._selector.encode_json(raw, content_type)

        self._logger.log_forward(
            route.backend.value,
            request.method,
            request.url.path,
            strategy=strategy.value,
        )
        return ForwardRequest(
            backend=route.backend,
            method=request.method,
            url=target.url_for(path_and_query(request)),
            headers=headers,
            strategy=strategy,
            timeout=target.timeout_for(strategy),
            content=content,
        )


def path_and_query(request: Request) -> str:
    """Original path and query string, still percent-encoded."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path
