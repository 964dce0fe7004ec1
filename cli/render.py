from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_reading(value: Any, unit: Any) -> str:
    if value is None:
        return "N/A"
    return f"{float(value):.2f} {unit}"


def render_customers(customers: List[Dict[str, Any]]) -> None:
    echo_heading("Customers")
    if not customers:
        typer.echo("No customers found.")
        return
    for customer in customers:
        typer.echo(f"  - {customer.get('customerId')}: {customer.get('name')}")


def render_devices(customer_id: str, devices: List[Dict[str, Any]]) -> None:
    echo_heading(f"Devices for {customer_id}")
    if not devices:
        typer.echo("No devices registered.")
        return
    for device in devices:
        typer.echo(
            f"  - {device.get('deviceId')}: {device.get('label')} ({device.get('location')})"
        )


def render_events(events: List[Dict[str, Any]]) -> None:
    echo_heading("Telemetry")
    if not events:
        typer.echo("No telemetry in window.")
        return
    for event in events:
        typer.echo(
            f"  {event.get('recordedAt')}  {event.get('eventId')}  "
            f"{event.get('type')}={_format_reading(event.get('value'), event.get('unit'))}"
        )
    typer.echo(f"{len(events)} event(s)")


def render_insights(payload: Dict[str, Any]) -> None:
    echo_heading("Insights")
    unit = payload.get("unit")
    echo_key_values(
        [
            ("latest", _format_reading(payload.get("latest"), unit)),
            ("min", _format_reading(payload.get("min"), unit)),
            ("average", _format_reading(payload.get("average"), unit)),
            ("max", _format_reading(payload.get("max"), unit)),
            ("count", payload.get("count")),
        ]
    )


def render_submission(payload: Dict[str, Any]) -> None:
    if payload.get("isDuplicate"):
        typer.secho(
            f"Duplicate ignored. eventId={payload.get('eventId')}", fg=typer.colors.YELLOW
        )
    else:
        typer.secho(
            f"Event accepted. eventId={payload.get('eventId')}", fg=typer.colors.GREEN
        )
