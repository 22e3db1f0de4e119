"""Backend targets resolved from configuration."""

from dataclasses import dataclass

from core.config import BackendSettings, Config
from core.request_types import Backend, BodyStrategy


@dataclass(frozen=True)
class BackendTarget:
    """A downstream service: identity, base address and timeouts."""

    backend: Backend
    base_url: str
    timeout: float
    download_timeout: float

    def url_for(self, path_and_query: str) -> str:
        """Target URL for an inbound path (query string included)."""
        return f"{self.base_url}{path_and_query}"

    def timeout_for(self, strategy: BodyStrategy) -> float:
        """Downloads get the longer timeout class."""
        if strategy is BodyStrategy.STREAM_OUT:
            return self.download_timeout
        return self.timeout


def _settings_for(config: Config, backend: Backend) -> BackendSettings:
    return getattr(config.services, backend.value.replace("-", "_"))


def build_targets(config: Config) -> dict[Backend, BackendTarget]:
    """Build the immutable target map once at startup."""
    targets = {}
    for backend in Backend:
        settings = _settings_for(config, backend)
        timeout = settings.timeout or config.timeouts.default
        targets[backend] = BackendTarget(
            backend=backend,
            base_url=settings.base_url,
            timeout=timeout,
            download_timeout=max(timeout, config.timeouts.download),
        )
    return targets


def service_addresses(targets: dict[Backend, BackendTarget]) -> dict[str, str]:
    """Base addresses keyed the way the health endpoint reports them."""
    keys = {
        Backend.AUTH: "auth",
        Backend.USER: "user",
        Backend.ORGANIZATION: "organization",
        Backend.MEDICAL_RECORDS: "medicalRecords",
        Backend.AUDIT: "audit",
    }
    return {keys[backend]: target.base_url for backend, target in targets.items()}
