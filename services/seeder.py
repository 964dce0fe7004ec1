"""Demo data loaded once at process start through the regular store interface."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from datastore.event_store import EventStore
from models.records import Customer, Device, EventDraft, utc_now

logger = logging.getLogger(__name__)

_CUSTOMERS = (
    ("acme-123", "Acme Corporation"),
    ("beta-456", "Beta Industries"),
)

_DEVICES = (
    ("acme-123", "dev-001", "Boiler #3", "Plant A"),
    ("acme-123", "dev-002", "Chiller #1", "Plant A"),
    ("beta-456", "dev-100", "Pump #9", "Site B"),
)

# (customer, device, event id, minutes before now, temperature in C)
_EVENTS = (
    ("acme-123", "dev-001", "evt-a0", 23 * 60 + 30, 21.0),
    ("acme-123", "dev-001", "evt-a1", 23 * 60, 21.5),
    ("acme-123", "dev-001", "evt-a2", 22 * 60 + 30, 22.0),
    ("acme-123", "dev-001", "evt-a3", 20 * 60, 22.5),
    ("acme-123", "dev-001", "evt-a4", 18 * 60, 23.0),
    ("acme-123", "dev-001", "evt-a5", 15 * 60, 22.8),
    ("acme-123", "dev-001", "evt-a6", 12 * 60, 22.2),
    ("acme-123", "dev-001", "evt-a7", 8 * 60, 21.8),
    ("acme-123", "dev-001", "evt-a8", 4 * 60, 21.3),
    ("acme-123", "dev-001", "evt-a9", 60, 21.0),
    ("acme-123", "dev-002", "evt-b1", 20 * 60, 6.8),
    ("acme-123", "dev-002", "evt-b2", 16 * 60, 7.2),
    ("acme-123", "dev-002", "evt-b3", 12 * 60, 6.5),
    ("acme-123", "dev-002", "evt-b4", 8 * 60, 7.0),
    ("acme-123", "dev-002", "evt-b5", 4 * 60, 6.9),
    ("beta-456", "dev-100", "evt-c1", 19 * 60, 55.2),
    ("beta-456", "dev-100", "evt-c2", 15 * 60, 54.8),
    ("beta-456", "dev-100", "evt-c3", 11 * 60, 56.0),
    ("beta-456", "dev-100", "evt-c4", 7 * 60, 55.5),
    ("beta-456", "dev-100", "evt-c5", 3 * 60, 55.0),
)


def seed_demo_data(
    store: EventStore,
    clock: Optional[Callable[[], datetime]] = None,
) -> bool:
    """Populate an empty store with demo tenants, devices and readings.

    Returns ``False`` without writing anything when the store already holds
    customers.
    """
    if store.has_customers():
        logger.info("Store already seeded")
        return False

    now = (clock or utc_now)()
    logger.info("Seeding demo data")

    for customer_id, name in _CUSTOMERS:
        store.add_customer(Customer(customer_id=customer_id, name=name, created_at=now))

    for customer_id, device_id, label, location in _DEVICES:
        store.add_device(
            Device(
                customer_id=customer_id,
                device_id=device_id,
                label=label,
                location=location,
                created_at=now,
            )
        )

    for customer_id, device_id, event_id, minutes_ago, value in _EVENTS:
        store.insert_event(
            EventDraft(
                customer_id=customer_id,
                device_id=device_id,
                event_id=event_id,
                recorded_at=now - timedelta(minutes=minutes_ago),
                type="temperature",
                value=value,
                unit="C",
            )
        )

    logger.info(
        "Demo data seeded",
        extra={"event_count": len(_EVENTS)},
    )
    return True
