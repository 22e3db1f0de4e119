"""CLI entry point for medcore-gateway."""

import sys
from datetime import datetime

from rich.console import Console
from rich.table import Table

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from services.routes import build_route_table
from services.targets import build_targets
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            _print_config(config)
            return

        if arg == "--routes":
            _print_routes()
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    # Run with dashboard
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Gateway started", port=config.proxy.port)
    for backend, target in build_targets(config).items():
        write_cli_log("STARTUP", f"Proxying to {backend.display_name}", url=target.base_url)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Gateway stopped", duration=str(duration))
        dashboard.stop()


def _print_config(config: Config):
    console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
    for backend, target in build_targets(config).items():
        console.print(
            f"[bold]{backend.display_name}:[/bold] {target.base_url} "
            f"[dim](timeout {target.timeout}s, download {target.download_timeout}s)[/dim]"
        )


def _print_routes():
    """Print the route table in evaluation order."""
    table = Table(title="Routes (evaluation order)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Methods")
    table.add_column("Pattern")
    table.add_column("Kind", style="dim")
    table.add_column("Backend", style="cyan")
    table.add_column("Body")

    for index, entry in enumerate(build_route_table(), start=1):
        body = entry.strategy.value
        if entry.accepts_uploads:
            body += " / stream-in"
        table.add_row(
            str(index),
            entry.method_label,
            entry.pattern.template,
            entry.pattern.kind.name.lower(),
            entry.backend.value,
            body,
        )
    console.print(table)


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]MedCore API Gateway[/bold cyan]

Forwards /api/v1/* requests to the auth, user, organization,
medical-records and audit services.

[bold]Usage:[/bold]
    medcore-gateway              Start with live dashboard
    medcore-gateway --config     Show config location and backend addresses
    medcore-gateway --routes     Show the route table in evaluation order
    medcore-gateway --help       Show this help

[bold]Environment overrides:[/bold]
    PORT, NODE_ENV, AUTH_SERVICE_URL, USER_SERVICE_URL,
    ORGANIZATION_SERVICE_URL, MEDICAL_RECORDS_SERVICE_URL, AUDIT_SERVICE_URL
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
