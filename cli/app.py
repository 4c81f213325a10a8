from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import typer

from cli.client import ApiClient, ApiError
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_history, render_reading


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Dashboard and device simulator for the sensor angle service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@contextmanager
def _exit_on_api_error() -> Iterator[None]:
    try:
        yield
    except ApiError as exc:
        typer.secho(exc.message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:3001).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    try:
        config = load_config(base_url=base_url, timeout=timeout)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    time_occurred: str = typer.Argument(..., help="Label describing when the event happened."),
    angle: float = typer.Argument(..., help="Measured angle in degrees."),
) -> None:
    """Post a reading the way the sensor device does."""
    state = _get_state(ctx)
    with _exit_on_api_error():
        payload = state.client.send_reading(time_occurred, angle)
    typer.secho(payload.get("message", "Reading sent."), fg=typer.colors.GREEN)
    render_reading(payload.get("reading"))


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recent reading."""
    state = _get_state(ctx)
    with _exit_on_api_error():
        reading = state.client.latest_reading()
    render_reading(reading)


@app.command("list")
def list_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Only show the newest N readings."
    ),
) -> None:
    """List retained readings, newest first."""
    state = _get_state(ctx)
    with _exit_on_api_error():
        payload = state.client.list_readings(limit=limit)
    render_history(payload)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        min=0.0,
        help="Seconds between polls (defaults to CLI_POLL_INTERVAL or 1s).",
    ),
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations",
        min=1,
        help="Stop after N polls instead of running until interrupted.",
    ),
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="History rows per refresh."),
) -> None:
    """Poll the service and redraw the gauge and recent history.

    Failed polls are reported and retried on the next tick.
    """
    state = _get_state(ctx)
    poll_interval = interval if interval is not None else state.config.poll_interval
    polls = 0
    last_synced: Optional[str] = None
    try:
        while iterations is None or polls < iterations:
            try:
                payload = state.client.list_readings(limit=limit)
            except ApiError as exc:
                typer.secho(
                    f"Status: Connection Error | {exc.message}",
                    fg=typer.colors.RED,
                )
                if last_synced is not None:
                    typer.echo(f"Last synced: {last_synced}")
            else:
                readings = payload.get("readings") or []
                render_reading(readings[0] if readings else None)
                typer.echo()
                render_history(payload)
                last_synced = time.strftime("%H:%M:%S")
                typer.secho(
                    f"Status: connected | Last update: {last_synced}",
                    fg=typer.colors.GREEN,
                )
            polls += 1
            if iterations is not None and polls >= iterations:
                break
            time.sleep(poll_interval)
            typer.echo()
    except KeyboardInterrupt:
        typer.echo("Stopped watching.")


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the service is up."""
    state = _get_state(ctx)
    with _exit_on_api_error():
        payload = state.client.health()
    echo_key_values(sorted(payload.items()))
