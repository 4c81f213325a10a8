from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional

import typer

GAUGE_MIN = -180.0
GAUGE_MAX = 180.0


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def clamp_angle(angle: float) -> float:
    """Clamp for display; stored readings keep the raw value."""
    return min(max(angle, GAUGE_MIN), GAUGE_MAX)


def format_angle(angle: Optional[float]) -> str:
    if angle is None or not math.isfinite(angle):
        return "n/a"
    return f"{angle:.1f}°"


def gauge_bar(angle: Optional[float], width: int = 37) -> str:
    """Draw a one-line gauge spanning -180° to 180° with a needle marker."""
    cells = ["-"] * width
    cells[width // 2] = "+"
    if angle is not None and math.isfinite(angle):
        position = (clamp_angle(angle) - GAUGE_MIN) / (GAUGE_MAX - GAUGE_MIN)
        cells[round(position * (width - 1))] = "|"
    return f"-180° [{''.join(cells)}] 180°"


def render_reading(reading: Optional[Dict[str, Any]]) -> None:
    echo_heading("Latest Reading")
    if not reading:
        typer.echo("No readings yet.")
        return
    echo_key_values(
        [
            ("id", reading.get("id")),
            ("timeOccurred", reading.get("timeOccurred")),
            ("angle", format_angle(reading.get("angle"))),
            ("receivedAt", reading.get("receivedAt")),
        ]
    )
    typer.echo(gauge_bar(reading.get("angle")))


def render_history(payload: Dict[str, Any]) -> None:
    readings = payload.get("readings") or []
    echo_heading(f"Readings ({payload.get('count', len(readings))} retained)")
    if not readings:
        typer.echo("No readings yet.")
        return
    for reading in readings:
        typer.echo(
            f"  - #{reading.get('id')} {format_angle(reading.get('angle')):>8} "
            f"at {reading.get('timeOccurred')} (logged {reading.get('receivedAt')})"
        )
