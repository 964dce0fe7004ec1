from __future__ import annotations

import json
import logging
from bisect import bisect_left, insort
from dataclasses import asdict
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.records import (
    Customer,
    Device,
    EventDraft,
    TelemetryEvent,
    ensure_utc,
    utc_now,
)
from settings import get_settings

logger = logging.getLogger(__name__)

DeviceKey = Tuple[str, str]
# (recorded_at, event_id, surrogate id); sorted per device
IndexEntry = Tuple[datetime, str, int]


class EventStoreError(Exception):
    """Base class for storage-level failures."""


class DuplicateEventError(EventStoreError):
    """Raised when an event with the same ``event_id`` is already stored."""

    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event {event_id!r} already exists.")
        self.event_id = event_id


class IntegrityViolationError(EventStoreError):
    """A key or reference constraint other than event_id uniqueness failed."""


class StoreUnavailableError(EventStoreError):
    """The backing storage could not be read or written."""


class EventStore:
    """Keyed storage for customers, devices and telemetry events.

    Events are indexed twice: globally by ``event_id`` (the dedup key, unique
    across all tenants) and per ``(customer_id, device_id)`` in a list kept
    sorted by ``(recorded_at, event_id)`` for window queries. Uniqueness is
    checked and the write applied under one lock, so concurrent inserts of the
    same ``event_id`` cannot both succeed.
    """

    def __init__(
        self,
        persistence_path: Optional[Path] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.persistence_path = persistence_path
        self._clock = clock
        self._customers: Dict[str, Customer] = {}
        self._devices: Dict[DeviceKey, Device] = {}
        self._events: Dict[int, TelemetryEvent] = {}
        self._event_ids: Dict[str, int] = {}
        self._device_index: Dict[DeviceKey, List[IndexEntry]] = {}
        self._next_id = 1
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    # customers and devices

    def add_customer(self, customer: Customer) -> None:
        with self._lock:
            if customer.customer_id in self._customers:
                raise IntegrityViolationError(
                    f"Customer {customer.customer_id!r} already exists."
                )
            self._customers[customer.customer_id] = customer
            try:
                self._persist()
            except OSError as exc:
                del self._customers[customer.customer_id]
                raise StoreUnavailableError(str(exc)) from exc

    def add_device(self, device: Device) -> None:
        key = (device.customer_id, device.device_id)
        with self._lock:
            if device.customer_id not in self._customers:
                raise IntegrityViolationError(
                    f"Customer {device.customer_id!r} does not exist."
                )
            if key in self._devices:
                raise IntegrityViolationError(
                    f"Device {device.device_id!r} already exists for customer "
                    f"{device.customer_id!r}."
                )
            self._devices[key] = device
            try:
                self._persist()
            except OSError as exc:
                del self._devices[key]
                raise StoreUnavailableError(str(exc)) from exc

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        with self._lock:
            return self._customers.get(customer_id)

    def list_customers(self) -> list[Customer]:
        with self._lock:
            return sorted(self._customers.values(), key=lambda c: c.customer_id)

    def has_customers(self) -> bool:
        with self._lock:
            return bool(self._customers)

    def get_device(self, customer_id: str, device_id: str) -> Optional[Device]:
        with self._lock:
            return self._devices.get((customer_id, device_id))

    def list_devices(self, customer_id: str) -> list[Device]:
        with self._lock:
            devices = [
                device
                for (owner, _), device in self._devices.items()
                if owner == customer_id
            ]
        return sorted(devices, key=lambda d: d.device_id)

    # telemetry events

    def insert_event(self, draft: EventDraft) -> TelemetryEvent:
        """Store a new event, assigning its surrogate id and ``received_at``.

        Raises ``DuplicateEventError`` if the ``event_id`` is already present
        and ``IntegrityViolationError`` if the owning device is missing.
        """
        key = (draft.customer_id, draft.device_id)
        with self._lock:
            if draft.event_id in self._event_ids:
                raise DuplicateEventError(draft.event_id)
            if key not in self._devices:
                raise IntegrityViolationError(
                    f"Device {draft.device_id!r} does not exist for customer "
                    f"{draft.customer_id!r}."
                )
            event = TelemetryEvent(
                id=self._next_id,
                customer_id=draft.customer_id,
                device_id=draft.device_id,
                event_id=draft.event_id,
                recorded_at=ensure_utc(draft.recorded_at),
                received_at=ensure_utc(self._clock()),
                type=draft.type,
                value=draft.value,
                unit=draft.unit,
            )
            self._index_event(event)
            try:
                self._persist()
            except OSError as exc:
                self._unindex_event(event)
                raise StoreUnavailableError(str(exc)) from exc
            return event

    def get_event(self, event_id: str) -> Optional[TelemetryEvent]:
        with self._lock:
            surrogate = self._event_ids.get(event_id)
            if surrogate is None:
                return None
            return self._events[surrogate]

    def count_events(self) -> int:
        with self._lock:
            return len(self._events)

    def range_events(
        self,
        customer_id: str,
        device_id: str,
        since: datetime,
        until: Optional[datetime] = None,
        descending: bool = False,
    ) -> list[TelemetryEvent]:
        """Events with ``since <= recorded_at <= until`` for one device.

        Ordered by ``(recorded_at, event_id)``, ascending unless
        ``descending`` is set.
        """
        since = ensure_utc(since)
        upper = ensure_utc(until) if until is not None else None
        with self._lock:
            entries = self._device_index.get((customer_id, device_id), [])
            start = bisect_left(entries, (since,))
            selected: list[TelemetryEvent] = []
            for recorded_at, _, surrogate in entries[start:]:
                if upper is not None and recorded_at > upper:
                    break
                selected.append(self._events[surrogate])
        if descending:
            selected.reverse()
        return selected

    def _index_event(self, event: TelemetryEvent) -> None:
        self._events[event.id] = event
        self._event_ids[event.event_id] = event.id
        entries = self._device_index.setdefault((event.customer_id, event.device_id), [])
        insort(entries, event.sort_key)
        self._next_id = max(self._next_id, event.id + 1)

    def _unindex_event(self, event: TelemetryEvent) -> None:
        self._events.pop(event.id, None)
        self._event_ids.pop(event.event_id, None)
        entries = self._device_index.get((event.customer_id, event.device_id), [])
        entry = event.sort_key
        position = bisect_left(entries, entry)
        if position < len(entries) and entries[position] == entry:
            del entries[position]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            "customers": [_dump(customer) for customer in self._customers.values()],
            "devices": [_dump(device) for device in self._devices.values()],
            "events": [_dump(event) for event in self._events.values()],
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable store file %s", self.persistence_path
            )
            data = {}

        for payload in data.get("customers", []):
            customer = Customer(**_parse_timestamps(payload, "created_at"))
            self._customers[customer.customer_id] = customer
        for payload in data.get("devices", []):
            device = Device(**_parse_timestamps(payload, "created_at"))
            self._devices[(device.customer_id, device.device_id)] = device
        for payload in data.get("events", []):
            event = TelemetryEvent(
                **_parse_timestamps(payload, "recorded_at", "received_at")
            )
            self._index_event(event)


def _dump(record: Any) -> Dict[str, Any]:
    payload = asdict(record)
    for key, value in payload.items():
        if isinstance(value, datetime):
            payload[key] = value.isoformat()
    return payload


def _parse_timestamps(payload: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    parsed = dict(payload)
    for key in keys:
        parsed[key] = ensure_utc(datetime.fromisoformat(parsed[key]))
    return parsed


@lru_cache
def build_default_store(path: Optional[str] = None) -> EventStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return EventStore(persistence_path=persistence)
