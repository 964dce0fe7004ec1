"""Customer and device lookups used as preconditions by every request path."""

from __future__ import annotations

import logging

from datastore.event_store import EventStore
from models.records import Customer, Device
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


class Registry:

    def __init__(self, store: EventStore) -> None:
        self.store = store

    def customer_exists(self, customer_id: str) -> bool:
        return self.store.get_customer(customer_id) is not None

    def device_exists(self, customer_id: str, device_id: str) -> bool:
        return self.store.get_device(customer_id, device_id) is not None

    def list_customers(self) -> list[Customer]:
        return self.store.list_customers()

    def list_devices(self, customer_id: str) -> list[Device]:
        """Devices owned by a customer; empty when it has none.

        Raises ``NotFoundError`` when the customer itself is unknown.
        """
        if not self.customer_exists(customer_id):
            logger.warning("Unknown customer", extra={"customer_id": customer_id})
            raise NotFoundError(f"Customer {customer_id} not found")
        return self.store.list_devices(customer_id)

    def get_device(self, customer_id: str, device_id: str) -> Device:
        device = self.store.get_device(customer_id, device_id)
        if device is None:
            logger.warning(
                "Unknown device",
                extra={"customer_id": customer_id, "device_id": device_id},
            )
            raise NotFoundError(
                f"Device {device_id} not found for customer {customer_id}"
            )
        return device

    def require_device(self, customer_id: str, device_id: str) -> None:
        self.get_device(customer_id, device_id)
