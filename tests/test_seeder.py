from __future__ import annotations

from datetime import datetime, timedelta, timezone

from datastore.event_store import EventStore
from services.seeder import seed_demo_data

_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_seed_populates_empty_store() -> None:
    store = EventStore()

    assert seed_demo_data(store, clock=lambda: _NOW) is True

    assert [c.customer_id for c in store.list_customers()] == ["acme-123", "beta-456"]
    assert [d.device_id for d in store.list_devices("acme-123")] == ["dev-001", "dev-002"]
    assert [d.device_id for d in store.list_devices("beta-456")] == ["dev-100"]
    assert store.count_events() == 20

    latest = store.get_event("evt-a9")
    assert latest is not None
    assert latest.recorded_at == _NOW - timedelta(hours=1)
    assert latest.value == 21.0


def test_seed_is_skipped_when_customers_exist() -> None:
    store = EventStore()
    seed_demo_data(store, clock=lambda: _NOW)

    assert seed_demo_data(store, clock=lambda: _NOW) is False
    assert store.count_events() == 20


def test_seeded_events_are_ordered_per_device() -> None:
    store = EventStore()
    seed_demo_data(store, clock=lambda: _NOW)

    events = store.range_events("beta-456", "dev-100", _NOW - timedelta(hours=24))

    assert [event.event_id for event in events] == [
        "evt-c1",
        "evt-c2",
        "evt-c3",
        "evt-c4",
        "evt-c5",
    ]
