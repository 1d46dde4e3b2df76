from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_config, render_reading, render_readings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the fan controller backend.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Backend base URL (defaults to FANCTL_API_URL env or http://localhost:5000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Show at most this many of the returned readings.",
    ),
) -> None:
    """List the most recent readings, newest first."""
    state = _get_state(ctx)
    readings = state.client.list_readings()
    if limit is not None:
        readings = readings[:limit]
    render_readings(readings)


@app.command("config")
def config_command(ctx: typer.Context) -> None:
    """Show the current threshold configuration."""
    state = _get_state(ctx)
    render_config(state.client.get_config())


@app.command("set-threshold")
def set_threshold_command(
    ctx: typer.Context,
    threshold: float = typer.Argument(..., help="New temperature threshold."),
) -> None:
    """Update the threshold pushed to devices."""
    state = _get_state(ctx)
    payload = state.client.set_threshold(threshold)
    typer.secho(f"Threshold updated to {payload.get('threshold')}", fg=typer.colors.GREEN)
    render_config(payload)


@app.command("send")
def send_command(
    ctx: typer.Context,
    temperature: float = typer.Argument(..., help="Temperature reading."),
    fan_speed: float = typer.Argument(..., help="Fan speed reading."),
) -> None:
    """Post a reading the way a device does."""
    state = _get_state(ctx)
    typer.echo(f"Sending reading to {state.config.base_url} ...")
    render_reading(state.client.send_reading(temperature, fan_speed))
