from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    echo_key_values,
    render_customers,
    render_devices,
    render_events,
    render_insights,
    render_submission,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the telemetry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Telemetry API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("customers")
def customers_command(ctx: typer.Context) -> None:
    """List customers."""
    state = _get_state(ctx)
    render_customers(state.client.list_customers())


@app.command("devices")
def devices_command(
    ctx: typer.Context,
    customer_id: str = typer.Argument(..., help="Customer (tenant) identifier."),
) -> None:
    """List the devices of a customer."""
    state = _get_state(ctx)
    render_devices(customer_id, state.client.list_devices(customer_id))


@app.command("telemetry")
def telemetry_command(
    ctx: typer.Context,
    customer_id: str = typer.Argument(..., help="Customer (tenant) identifier."),
    device_id: str = typer.Argument(..., help="Device identifier within the customer."),
    hours: Optional[int] = typer.Option(None, "--hours", help="Trailing window in hours."),
) -> None:
    """Show telemetry events in the trailing window, oldest first."""
    state = _get_state(ctx)
    render_events(state.client.get_telemetry(customer_id, device_id, hours))


@app.command("insights")
def insights_command(
    ctx: typer.Context,
    customer_id: str = typer.Argument(..., help="Customer (tenant) identifier."),
    device_id: str = typer.Argument(..., help="Device identifier within the customer."),
    hours: Optional[int] = typer.Option(None, "--hours", help="Trailing window in hours."),
) -> None:
    """Show latest, min, average and max over the trailing window."""
    state = _get_state(ctx)
    render_insights(state.client.get_insights(customer_id, device_id, hours))


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    customer_id: str = typer.Argument(..., help="Customer (tenant) identifier."),
    device_id: str = typer.Argument(..., help="Device identifier within the customer."),
    value: float = typer.Argument(..., help="Numeric reading."),
    event_id: Optional[str] = typer.Option(
        None, "--event-id", help="Dedup key; a random id is generated when omitted."
    ),
    recorded_at: Optional[datetime] = typer.Option(
        None, "--recorded-at", help="Device timestamp; defaults to now (UTC)."
    ),
    reading_type: str = typer.Option("temperature", "--type", help="Reading category."),
    unit: str = typer.Option("C", "--unit", help="Unit label."),
) -> None:
    """Submit one telemetry event."""
    state = _get_state(ctx)
    timestamp = recorded_at or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    payload = {
        "customerId": customer_id,
        "deviceId": device_id,
        "eventId": event_id or f"evt-{uuid4()}",
        "recordedAt": timestamp.isoformat(),
        "type": reading_type,
        "value": value,
        "unit": unit,
    }
    render_submission(state.client.submit_event(payload))


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check service health."""
    state = _get_state(ctx)
    echo_key_values(state.client.health().items())
