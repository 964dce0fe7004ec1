"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive timestamps as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class Customer:
    """A tenant. Owns zero or more devices."""

    customer_id: str
    name: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class Device:
    """A device, identified by ``(customer_id, device_id)``."""

    customer_id: str
    device_id: str
    label: str
    location: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class EventDraft:
    """A validated submission that has not been accepted by the store yet."""

    customer_id: str
    device_id: str
    event_id: str
    recorded_at: datetime
    type: str
    value: float
    unit: str


@dataclass(slots=True, frozen=True)
class TelemetryEvent:
    """A stored telemetry reading. Append-only; never updated."""

    id: int
    customer_id: str
    device_id: str
    event_id: str
    recorded_at: datetime
    received_at: datetime
    type: str
    value: float
    unit: str

    @property
    def sort_key(self) -> tuple[datetime, str, int]:
        """Per-device index position: time, then ``event_id``, then surrogate id."""
        return (self.recorded_at, self.event_id, self.id)
