from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_config(payload: Dict[str, Any]) -> None:
    echo_heading("Config")
    echo_key_values(
        [
            ("threshold", payload.get("threshold")),
            ("lastUpdated", payload.get("lastUpdated")),
        ]
    )


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading("Reading")
    echo_key_values(
        [
            ("id", payload.get("id")),
            ("temperature", payload.get("temperature")),
            ("fanSpeed", payload.get("fanSpeed")),
            ("timestamp", payload.get("timestamp")),
        ]
    )


def render_readings(readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Readings ({len(readings)})")
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        typer.echo(
            f"  - {reading.get('timestamp')}  "
            f"temperature={reading.get('temperature')}  "
            f"fanSpeed={reading.get('fanSpeed')}"
        )
