from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from datastore.event_store import EventStore
from models.records import Customer, Device, EventDraft
from services.dedup import DedupGate
from services.errors import NotFoundError
from services.registry import Registry

_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store() -> EventStore:
    store = EventStore(clock=lambda: _NOW)
    store.add_customer(Customer(customer_id="acme-123", name="Acme", created_at=_NOW))
    store.add_device(
        Device(
            customer_id="acme-123",
            device_id="dev-001",
            label="Boiler #3",
            location="Plant A",
            created_at=_NOW,
        )
    )
    return store


@pytest.fixture()
def gate(store: EventStore) -> DedupGate:
    return DedupGate(store, Registry(store))


def _draft(event_id: str, value: float = 21.0, device_id: str = "dev-001") -> EventDraft:
    return EventDraft(
        customer_id="acme-123",
        device_id=device_id,
        event_id=event_id,
        recorded_at=_NOW - timedelta(hours=1),
        type="temperature",
        value=value,
        unit="C",
    )


def test_first_submission_is_accepted(gate: DedupGate, store: EventStore) -> None:
    outcome = gate.submit(_draft("evt-1"))

    assert outcome.is_duplicate is False
    assert outcome.event_id == "evt-1"
    assert outcome.event is not None
    assert store.count_events() == 1


def test_repeat_submission_keeps_first_payload(gate: DedupGate, store: EventStore) -> None:
    gate.submit(_draft("evt-1", value=21.0))

    outcome = gate.submit(_draft("evt-1", value=35.0))

    assert outcome.is_duplicate is True
    assert outcome.event is None
    assert store.count_events() == 1
    assert store.get_event("evt-1").value == 21.0  # type: ignore[union-attr]


def test_identical_payload_with_new_event_id_is_not_duplicate(
    gate: DedupGate, store: EventStore
) -> None:
    gate.submit(_draft("evt-1"))

    outcome = gate.submit(_draft("evt-2"))

    assert outcome.is_duplicate is False
    assert store.count_events() == 2


def test_unknown_device_rejected_before_insert(gate: DedupGate, store: EventStore) -> None:
    with pytest.raises(NotFoundError):
        gate.submit(_draft("evt-1", device_id="dev-404"))

    assert store.count_events() == 0


def test_duplicate_is_logged(gate: DedupGate, caplog) -> None:
    gate.submit(_draft("evt-1"))

    with caplog.at_level(logging.INFO):
        gate.submit(_draft("evt-1"))

    records = [record for record in caplog.records if record.name == "services.dedup"]
    assert any(getattr(record, "is_duplicate", None) is True for record in records)
    assert any(getattr(record, "event_id", None) == "evt-1" for record in records)


def test_concurrent_submissions_store_exactly_one_row(
    gate: DedupGate, store: EventStore
) -> None:
    workers = 8
    barrier = threading.Barrier(workers)

    def submit(n: int):
        barrier.wait(timeout=5)
        return gate.submit(_draft("evt-race", value=float(n)))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(submit, range(workers)))

    accepted = [outcome for outcome in outcomes if not outcome.is_duplicate]
    assert len(accepted) == 1
    assert sum(outcome.is_duplicate for outcome in outcomes) == workers - 1
    assert store.count_events() == 1
    assert store.get_event("evt-race").value == accepted[0].event.value  # type: ignore[union-attr]
