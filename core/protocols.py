"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard)."""

    def log_forward(
        self,
        backend: str,
        method: str,
        path: str,
        *,
        strategy: str,
    ) -> None: ...
    def log_response(self, backend: str, status: int, elapsed_ms: float) -> None: ...
    def log_not_found(self, method: str, path: str) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
