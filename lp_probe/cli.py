"""
Command-line interface for load-probe.

``load-probe run`` drives a single coordinated probe run against a target
server; ``load-probe sinks`` lists the result sinks that can be activated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from lp_common.config.env import parse_key_values
from lp_common.errors import (
    ConfigRetrievalTimeoutError,
    ConfigurationError,
    LPError,
    error_to_payload,
)
from lp_common.logging import configure_logging
from lp_probe.engine.factories import resolve_engine_factory
from lp_probe.engine.orchestrator import ProbeOrchestrator
from lp_probe.models.config import ProbeSettings, ProbeTimings
from lp_probe.sinks import create_sink_registry

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(help="Coordinated load-test probe.", no_args_is_help=True)


@app.callback()
def entry(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
    json_logs: Optional[bool] = typer.Option(
        None, "--json-logs/--console-logs", help="Render logs as JSON lines."
    ),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file."),
) -> None:
    """Configure logging for every command."""
    configure_logging(debug=debug, json=json_logs, log_file=log_file, force=True)


def build_settings(
    *,
    host: str,
    port: int,
    scheme: str,
    transport: str,
    loader_number: int,
    shared_threads: int,
    result_path: Optional[Path],
    params: List[str],
    resources_path: Optional[Path],
    skip_loader_config: bool,
    server_version: Optional[str],
) -> ProbeSettings:
    """Translate CLI options into validated settings."""
    try:
        return ProbeSettings(
            host=host,
            port=port,
            scheme=scheme,
            transport=transport,
            instance_number=loader_number,
            shared_threads=shared_threads,
            result_path=result_path,
            dynamic_params=parse_key_values(params),
            resources_path=resources_path,
            skip_config_retrieval=skip_loader_config,
            server_version=server_version,
            timings=ProbeTimings.from_env(),
        )
    except ValidationError as exc:
        raise ConfigurationError("Invalid probe settings", cause=exc) from exc


@app.command("run")
def run_command(
    host: str = typer.Option("localhost", "--host", "-H", help="Target host."),
    port: int = typer.Option(8080, "--port", "-p", help="Target port."),
    scheme: str = typer.Option("http", "--scheme", help="Target scheme (http or https)."),
    transport: str = typer.Option("http", "--transport", "-t", help="Transport kind recorded in the run configuration."),
    loader_number: int = typer.Option(0, "--loader-number", help="Loader instance number."),
    shared_threads: int = typer.Option(0, "--shared-threads", help="Max threads of the shared thread pool."),
    result_path: Optional[Path] = typer.Option(None, "--result-path", help="Path to store the JSON result file."),
    params: List[str] = typer.Option([], "--param", "-D", help="Dynamic parameter key=value (repeatable)."),
    resources_path: Optional[Path] = typer.Option(None, "--resources-path", help="Resource tree file (YAML or JSON)."),
    skip_loader_config: bool = typer.Option(False, "--skip-loader-config", help="Skip retrieving the loader config."),
    server_version: Optional[str] = typer.Option(None, "--server-version", help="Server version used when the target does not report one."),
    engine: str = typer.Option(..., "--engine", "-e", help="Load engine entry point name or module:factory path."),
) -> None:
    """Run one probe against the target server."""
    try:
        settings = build_settings(
            host=host,
            port=port,
            scheme=scheme,
            transport=transport,
            loader_number=loader_number,
            shared_threads=shared_threads,
            result_path=result_path,
            params=params,
            resources_path=resources_path,
            skip_loader_config=skip_loader_config,
            server_version=server_version,
        )
        factory = resolve_engine_factory(engine)
        orchestrator = ProbeOrchestrator.from_settings(settings, factory)
    except ConfigurationError as exc:
        logger.debug("Invalid settings: %s", error_to_payload(exc))
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        if exc.__cause__ is not None:
            err_console.print(str(exc.__cause__))
        raise typer.Exit(2)
    except LPError as exc:
        logger.error("Probe setup failed: %s", error_to_payload(exc))
        err_console.print(f"[red]Probe setup failed:[/red] {exc}")
        raise typer.Exit(1)

    try:
        outcome = orchestrator.run()
    except ConfigRetrievalTimeoutError as exc:
        logger.error("Probe aborted: %s", error_to_payload(exc))
        err_console.print(f"[red]Aborted:[/red] {exc}")
        raise typer.Exit(1)
    except LPError as exc:
        logger.error("Probe failed: %s", error_to_payload(exc))
        err_console.print(f"[red]Probe failed:[/red] {exc}")
        raise typer.Exit(1)

    console.print(f"Run [bold]{outcome.result.uuid}[/bold] completed in {outcome.run_seconds:.1f}s")
    for error in outcome.sink_errors:
        err_console.print(f"[yellow]Sink {error.sink} failed:[/yellow] {error.cause}")


@app.command("sinks")
def list_sinks() -> None:
    """List registered result sinks."""
    registry = create_sink_registry()
    plugins = registry.available(load_entrypoints=True)
    if not plugins:
        console.print("No result sinks registered.")
        return
    table = Table(title="Result Sinks", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name in sorted(plugins):
        table.add_row(name, plugins[name].description)
    console.print(table)


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()
