"""CLI for the container telemetry agent.

Provides a command-line interface using Typer for:
- Running the agent (scheduled collection + health endpoint)
- Running a single collection cycle
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from container_telemetry.agent import AgentStartupError, TelemetryAgent
from container_telemetry.core.config import AgentSettings, load_config
from container_telemetry.utils.logging import setup_logging

app = typer.Typer(
    name="container-telemetry",
    help="Container telemetry agent",
    add_completion=False,
)

console = Console(stderr=True)


def _load_settings(config: Path | None) -> AgentSettings:
    try:
        settings = load_config(config)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e

    setup_logging(
        level=settings.log_level, log_format=settings.log_format, log_file=settings.log_file
    )
    return settings


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Optional configuration file (YAML/JSON)"
    ),
) -> None:
    """Collect container stats on a schedule and serve /health."""
    settings = _load_settings(config)

    try:
        TelemetryAgent(settings).run()
    except AgentStartupError as e:
        raise typer.Exit(1) from e


@app.command()
def collect(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Optional configuration file (YAML/JSON)"
    ),
) -> None:
    """Run one collection cycle and exit."""
    settings = _load_settings(config)

    try:
        TelemetryAgent(settings).collect_once()
    except AgentStartupError as e:
        raise typer.Exit(1) from e


if __name__ == "__main__":
    app()
