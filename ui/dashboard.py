"""Real-time CLI dashboard for gateway monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import Backend
from services.targets import build_targets
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, path: str, backend: str, strategy: str, timestamp: datetime):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.backend = backend
        self.strategy = strategy
        self.timestamp = timestamp
        self.status: int | None = None


class Dashboard:
    """Real-time dashboard showing backends and recent requests."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._addresses = {
            backend.value: target.base_url for backend, target in build_targets(config).items()
        }
        self._request_count = {backend.value: 0 for backend in Backend}
        self._last_status: dict[str, int] = {}
        self._not_found = 0
        self._recent: list[RequestInfo] = []
        self._max_recent = 10
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_forward(
        self,
        backend: str,
        method: str,
        path: str,
        *,
        strategy: str,
    ) -> None:
        """Log a request about to be forwarded to a backend."""
        with self._lock:
            self._request_count[backend] = self._request_count.get(backend, 0) + 1
            info = RequestInfo(method, path, backend, strategy, datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()
            write_cli_log("FORWARD", f"{method} {path}", backend=backend, strategy=strategy)

    def log_response(self, backend: str, status: int, elapsed_ms: float) -> None:
        """Log a backend answer."""
        with self._lock:
            self._record_status(backend, status)
            self._refresh()
            write_cli_log("RESPONSE", str(status), backend=backend, ms=f"{elapsed_ms:.0f}")

    def log_not_found(self, method: str, path: str) -> None:
        with self._lock:
            self._not_found += 1
            self._push_error(f"404 {method} {path}")
            self._refresh()
            write_cli_log("NOT_FOUND", f"{method} {path}")

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._record_status(route, status)
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._push_error(f"{route} {status}: {truncated}")
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _record_status(self, backend: str, status: int) -> None:
        self._last_status[backend] = status
        for info in self._recent:
            if info.backend == backend and info.status is None:
                info.status = status
                break

    def _push_error(self, line: str) -> None:
        self._errors.insert(0, line)
        self._errors = self._errors[:3]

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="backends", ratio=1),
            Layout(name="requests", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["backends"].update(self._build_backends_panel())
        layout["requests"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("MedCore API Gateway", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {sum(self._request_count.values())}", style="blue")
        stats.append("  |  ")
        stats.append(f"Not found: {self._not_found}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")
        stats.append("  |  ")
        stats.append(self.config.proxy.environment, style="dim")

        return Panel(stats, style="cyan")

    def _build_backends_panel(self) -> Panel:
        """Build per-backend panel."""
        table = Table(show_header=True, header_style="bold", expand=True, box=None)
        table.add_column("Backend")
        table.add_column("Address", style="dim")
        table.add_column("Reqs", justify="right")
        table.add_column("Last", justify="right")

        for backend, address in self._addresses.items():
            status = self._last_status.get(backend)
            table.add_row(
                backend,
                address,
                str(self._request_count.get(backend, 0)),
                _styled_status(status),
            )

        return Panel(table, title="[blue]Backends[/blue]", border_style="blue")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=6)
            table.add_column("Path", ratio=2)
            table.add_column("Backend", ratio=1)
            table.add_column("Body", width=10)
            table.add_column("Status", justify="right", width=6)

            for info in self._recent:
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    info.method,
                    info.path,
                    info.backend,
                    info.strategy,
                    _styled_status(info.status),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[magenta]Recent requests[/magenta]", border_style="magenta")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Listening on http://{self.config.proxy.host}:{self.config.proxy.port}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


def _styled_status(status: int | None) -> str:
    if status is None:
        return "[dim]-[/dim]"
    if status < 400:
        return f"[green]{status}[/green]"
    if status < 500:
        return f"[yellow]{status}[/yellow]"
    return f"[red]{status}[/red]"
