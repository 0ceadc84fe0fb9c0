"""CLI for the dex exporter.

Provides a command-line interface using Typer for:
- Serving container metrics to Prometheus
- Running a single collection cycle by hand
- Generating a sample configuration
"""

from __future__ import annotations

import threading
from pathlib import Path

import typer
from docker.errors import DockerException
from prometheus_client import generate_latest
from rich.console import Console
from rich.table import Table

from dex_exporter.core.config import load_config
from dex_exporter.core.schemas import ExporterConfig
from dex_exporter.exposition.prometheus import build_registry, serve
from dex_exporter.monitoring.base import MetricPoint
from dex_exporter.monitoring.collector import ContainerCollector
from dex_exporter.monitoring.docker_adapter import DockerRuntimeAdapter
from dex_exporter.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="dex-exporter",
    help="Docker container metrics exporter for Prometheus",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.command(name="serve")
def serve_metrics(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    address: str | None = typer.Option(
        None, "--address", "-a", help="Bind address (overrides config)"
    ),
    port: int | None = typer.Option(None, "--port", "-p", help="HTTP port (overrides config)"),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Logging level (overrides config)"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for log shippers)"
    ),
) -> None:
    """Serve container metrics on /metrics until interrupted."""
    exporter_config = _apply_overrides(
        _load_exporter_config(config), listen_address=address, port=port, log_level=log_level
    )

    setup_logging(
        level=exporter_config.log_level,
        log_file=log_file,
        json_format=json_logs,
        rich_console=not json_logs,
    )

    adapter = _create_adapter(exporter_config)
    try:
        if not adapter.ping():
            logger.warning("Docker daemon is not responding, metrics will be empty until it is")

        registry = build_registry(_create_collector(adapter, exporter_config))
        try:
            server = serve(registry, exporter_config.listen_address, exporter_config.port)
        except OSError as e:
            console.print(
                f"[bold red]Can't listen on "
                f"{exporter_config.listen_address}:{exporter_config.port}: {e}[/]"
            )
            raise typer.Exit(1) from e
        try:
            # The HTTP server runs in a daemon thread; block until Ctrl+C
            threading.Event().wait()
        except KeyboardInterrupt:
            logger.info("Shutting down")
        finally:
            server.shutdown()
            server.server_close()
    finally:
        adapter.close()


@app.command()
def collect(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to exporter configuration file (YAML/JSON)"
    ),
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, prometheus"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
) -> None:
    """Run a single collection cycle and print the result."""
    exporter_config = _apply_overrides(_load_exporter_config(config), log_level=log_level)
    setup_logging(level=exporter_config.log_level)

    adapter = _create_adapter(exporter_config)
    try:
        collector = _create_collector(adapter, exporter_config)
        if output_format == "table":
            _show_points_table(collector.collect())
        elif output_format == "prometheus":
            typer.echo(generate_latest(build_registry(collector)).decode(), nl=False)
        else:
            console.print(f"[bold red]Unknown format: {output_format}[/]")
            raise typer.Exit(1)
    finally:
        adapter.close()


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("dex-exporter.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# dex exporter configuration

# HTTP endpoint serving /metrics
listen_address: "0.0.0.0"
port: 8080

# Docker daemon. Leave empty to use DOCKER_HOST or the local socket.
# docker_host: "unix:///var/run/docker.sock"
docker_timeout_seconds: 10

# Report stopped containers too (dex_container_running = 0)
include_stopped: true

# Maximum concurrent stats requests per scrape
max_workers: 16

# Interfaces summed into dex_network_{rx,tx}_bytes. Empty list = all interfaces.
network_interfaces:
  - eth0

log_level: INFO
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _load_exporter_config(path: Path | None) -> ExporterConfig:
    """Load the config file, or defaults when no file is given."""
    if path is None:
        return ExporterConfig()
    try:
        return load_config(path)
    except Exception as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


def _apply_overrides(config: ExporterConfig, **overrides: object) -> ExporterConfig:
    """Re-validate the config with command-line values set (None = keep)."""
    try:
        return ExporterConfig.model_validate(
            {**config.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
        )
    except ValueError as e:
        console.print(f"[bold red]Invalid option: {e}[/]")
        raise typer.Exit(1) from e


def _create_adapter(config: ExporterConfig) -> DockerRuntimeAdapter:
    try:
        return DockerRuntimeAdapter.from_config(config)
    except DockerException as e:
        console.print(f"[bold red]Can't create docker client: {e}[/]")
        raise typer.Exit(1) from e


def _create_collector(adapter: DockerRuntimeAdapter, config: ExporterConfig) -> ContainerCollector:
    return ContainerCollector(
        adapter,
        max_workers=config.max_workers,
        network_interfaces=config.network_interfaces,
        include_stopped=config.include_stopped,
    )


def _show_points_table(points: list[MetricPoint]) -> None:
    """Display one cycle's metric points."""
    if not points:
        console.print("[bold yellow]No metrics collected[/]")
        return

    table = Table(title="Container Metrics")
    table.add_column("Container", style="cyan")
    table.add_column("Metric", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Value", style="green", justify="right")

    for point in points:
        table.add_row(
            ", ".join(point.labels.values()),
            point.name,
            point.kind.value,
            f"{point.value:,.2f}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
